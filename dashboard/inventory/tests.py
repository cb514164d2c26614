"""
Comprehensive test suite for Inventory module
Tests: stock level derivation, item management, statistics and stock adjustments
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory
from dashboard.inventory.resources import CRITICAL, NORMAL, WARNING, stock_level

ITEMS_PATH = '/t/inventory/items'


class StockLevelTests(TestCase):
    """Test stock level thresholds"""

    def test_levels(self):
        self.assertEqual(stock_level(0, 5), CRITICAL)
        self.assertEqual(stock_level(-2, 5), CRITICAL)
        self.assertEqual(stock_level(5, 5), WARNING)
        self.assertEqual(stock_level(3, 5), WARNING)
        self.assertEqual(stock_level(6, 5), NORMAL)

    def test_missing_values(self):
        """Test missing quantity counts as out of stock"""
        self.assertEqual(stock_level(None, 5), CRITICAL)
        self.assertEqual(stock_level(1, None), NORMAL)


class InventoryItemAPITests(TestCase):
    """Test inventory item management"""

    def setUp(self):
        self.backend = FakeTenantBackend(list_style='paginated').install(self)
        self.items = self.backend.seed(ITEMS_PATH, [
            TestDataFactory.inventory_item(name='Flour', quantity=0, reorder_point=10, baseUnit='kg'),
            TestDataFactory.inventory_item(name='Tomatoes', quantity=4, reorder_point=10,
                                           categoryId={'_id': 'cat-1', 'name': 'Produce'}),
            TestDataFactory.inventory_item(name='Cheese', quantity=50, reorder_point=10),
            TestDataFactory.inventory_item(name='Delivery', item_type='service', quantity=1, reorder_point=0),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/inventory-items/'

    def test_stock_level_filter_and_summary(self):
        """Test derived stock levels can be filtered and are summarized"""
        response = self.client.get(self.url, {'stock_level': 'critical'})
        data = response.data['data']
        self.assertEqual([r['name'] for r in data['items']], ['Flour'])
        self.assertEqual(data['summary']['by_stock_level'], {'critical': 1, 'warning': 1, 'normal': 2})

    def test_populated_category(self):
        """Test a populated categoryId is flattened"""
        response = self.client.get(self.url, {'search': 'tomato'})
        item = response.data['data']['items'][0]
        self.assertEqual(item['category_id'], 'cat-1')
        self.assertEqual(item['category_name'], 'Produce')

    def test_type_filter(self):
        """Test filtering by item type"""
        response = self.client.get(self.url, {'type': 'service'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Delivery'])

    def test_update_recomputes_stock_level(self):
        """Test an optimistic quantity update recomputes the level"""
        target = self.items[0]
        response = self.client.patch(f"{self.url}{target['_id']}/", {'quantity': 25}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['record']['stock_level'], NORMAL)
        record = response.data['data']['state']['items'][0]
        self.assertEqual(record['stock_level'], NORMAL)

    def test_create_maps_backend_fields(self):
        """Test unit and reorder point are sent with backend names"""
        response = self.client.post(self.url, {
            'name': 'Basil', 'unit': 'g', 'reorder_point': 100, 'quantity': 200, 'track_stock': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', ITEMS_PATH)[0]['body']
        self.assertEqual(sent['baseUnit'], 'g')
        self.assertEqual(sent['reorderPoint'], 100)
        self.assertTrue(sent['trackStock'])

    def test_service_cannot_track_stock(self):
        """Test service items reject stock tracking"""
        response = self.client.post(self.url, {
            'name': 'Catering', 'unit': 'event', 'type': 'service', 'track_stock': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('track_stock', response.data['data'])

    def test_negative_reorder_point(self):
        """Test reorder point must be non-negative"""
        response = self.client.post(self.url, {'name': 'Oil', 'unit': 'l', 'reorder_point': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class InventoryStatsTests(TestCase):
    """Test inventory statistics"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.seen_params = []

        def stats(params, body):
            self.seen_params.append(params)
            return 200, {'status': True, 'result': {
                'total': 12, 'tracked': 10, 'service': 2, 'low': 3, 'outOfStock': 1, 'active': 11, 'inactive': 1,
            }}
        self.backend.route('GET', '/t/inventory/stats', stats)

    def test_stats(self):
        """Test backend stats are renamed"""
        response = self.client.get('/api/v1/inventory/stats/', {'category_id': 'cat-1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {
            'total_items': 12, 'stock_items': 10, 'service_items': 2, 'low_stock': 3,
            'out_of_stock': 1, 'active_items': 11, 'inactive_items': 1,
        })
        self.assertEqual(self.seen_params, [{'categoryId': 'cat-1'}])

    def test_stats_failure(self):
        """Test a failed stats call answers 502"""
        self.backend.fail('GET', '/t/inventory/stats', message='Stats unavailable')
        response = self.client.get('/api/v1/inventory/stats/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['message'], 'Stats unavailable')


class StockAdjustmentTests(TestCase):
    """Test stock adjustments"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.items = self.backend.seed(ITEMS_PATH, [TestDataFactory.inventory_item(name='Flour', quantity=2)])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)

        def adjust(params, body):
            for line in body['lines']:
                self.backend.collections[ITEMS_PATH][line['itemId']]['quantity'] += line['qty']
            return 200, {'status': True, 'message': 'Adjusted', 'result': {'lines': len(body['lines'])}}
        self.backend.route('POST', '/t/inventory/stock/adjust', adjust)

    def test_receive_stock(self):
        """Test receiving stock and reloading the list"""
        response = self.client.post('/api/v1/inventory/adjust/', {
            'type': 'receive',
            'branch_id': 'branch-1',
            'lines': [{'item_id': self.items[0]['_id'], 'qty': 20, 'unit': 'pcs'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Adjusted')
        item = response.data['data']['state']['items'][0]
        self.assertEqual(item['quantity'], 22)
        self.assertEqual(item['stock_level'], NORMAL)
        sent = self.backend.requests_to('POST', '/t/inventory/stock/adjust')[0]['body']
        self.assertEqual(sent['branchId'], 'branch-1')
        self.assertEqual(sent['lines'][0]['itemId'], self.items[0]['_id'])

    def test_adjustment_validation(self):
        """Test unknown adjustment types and empty lines are rejected"""
        response = self.client.post('/api/v1/inventory/adjust/', {
            'type': 'steal', 'branch_id': 'branch-1', 'lines': [],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('type', response.data['data'])
        self.assertIn('lines', response.data['data'])
