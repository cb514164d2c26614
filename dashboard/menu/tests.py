"""
Comprehensive test suite for Menu module
Tests: the effective branch menu, assigning and unassigning items and branch overrides
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory
from dashboard.menu.resources import ASSIGNED, UNASSIGNED

BRANCHES_PATH = '/t/branches'
MENU_ITEMS_PATH = '/t/menu/items'
CONFIGS_PATH = '/t/branch-menu'


def effective_menu_route(backend):
    """GET /t/branch-menu/effective: catalog items merged with the branch's configs"""
    def effective(params, body):
        branch_id = params.get('branchId')
        configs = {
            c['menuItemId']: c for c in backend.objects(CONFIGS_PATH) if c.get('branchId') == branch_id
        }
        rows = []
        for item in backend.objects(MENU_ITEMS_PATH):
            config = configs.get(item['_id'])
            overrides = config or {}
            rows.append({
                'menuItem': {
                    '_id': item['_id'],
                    'name': item['name'],
                    'description': item.get('description', ''),
                    'pricing': {'basePrice': item['price'], 'currency': 'PKR'},
                    'category': {'_id': item['categoryId'], 'name': 'Pizza'} if item.get('categoryId') else None,
                    'isActive': item['isActive'],
                },
                'branchConfig': config,
                'effective': {
                    'price': overrides.get('sellingPrice', item['price']),
                    'isAvailable': overrides.get('isAvailable', True),
                },
            })
        return 200, {'status': True, 'result': rows}
    backend.route('GET', f'{CONFIGS_PATH}/effective', effective)


class BranchMenuAPITests(TestCase):
    """Test the branch menu through the scoped resource API"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.main, self.mall = self.backend.seed(BRANCHES_PATH, [
            TestDataFactory.branch(name='Main Street', code='MAIN'),
            TestDataFactory.branch(name='City Mall', code='MALL'),
        ])
        self.margherita, self.pepperoni, self.cola = self.backend.seed(MENU_ITEMS_PATH, [
            TestDataFactory.menu_item(name='Margherita', price=12.0, category_id='cat-1'),
            TestDataFactory.menu_item(name='Pepperoni', price=14.0, category_id='cat-1'),
            TestDataFactory.menu_item(name='Cola', price=2.0),
        ])
        self.configs = self.backend.seed(CONFIGS_PATH, [{
            'branchId': self.main['_id'], 'menuItemId': self.margherita['_id'],
            'sellingPrice': 11.0, 'isAvailable': True, 'isFeatured': True, 'labels': ['bestseller'],
        }])
        effective_menu_route(self.backend)
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/branches/MAIN/menu/'

    def _items(self, response):
        return {r['name']: r for r in response.data['data']['items']}

    def test_effective_menu_records(self):
        """Test catalog items are flattened with their branch overrides"""
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        items = self._items(response)
        margherita = items['Margherita']
        self.assertEqual(margherita['id'], self.margherita['_id'])
        self.assertEqual(margherita['config_id'], self.configs[0]['_id'])
        self.assertEqual(margherita['assignment'], ASSIGNED)
        self.assertEqual(margherita['base_price'], 12.0)
        self.assertEqual(margherita['selling_price'], 11.0)
        self.assertEqual(margherita['effective_price'], 11.0)
        self.assertEqual(margherita['category'], 'Pizza')
        self.assertEqual(margherita['labels'], ['bestseller'])
        self.assertTrue(margherita['is_featured'])

        cola = items['Cola']
        self.assertEqual(cola['assignment'], UNASSIGNED)
        self.assertIsNone(cola['config_id'])
        self.assertEqual(cola['category'], '')
        self.assertEqual(cola['effective_price'], 2.0)

    def test_list_sends_resolved_branch_id(self):
        """Test the branch code is resolved before listing"""
        self.client.get(self.url)
        sent = self.backend.requests_to('GET', f'{CONFIGS_PATH}/effective')[0]
        self.assertEqual(sent['params']['branchId'], self.main['_id'])

    def test_assignment_filter_and_summary(self):
        """Test filtering by assignment and the summary counts"""
        response = self.client.get(self.url, {'assignment': UNASSIGNED})
        data = response.data['data']
        self.assertEqual([r['name'] for r in data['items']], ['Pepperoni', 'Cola'])
        self.assertEqual(data['summary'], {'total': 3, 'assigned': 1, 'available': 1, 'featured': 1})

        response = self.client.get(self.url, {'assignment': 'hidden'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_branch(self):
        """Test an unresolvable branch answers 404"""
        response = self.client.get('/api/v1/branches/NOWHERE/menu/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])

    def test_assign_item(self):
        """Test assigning an item creates a branch config and reloads"""
        response = self.client.post(self.url, {
            'menu_item_id': self.cola['_id'], 'selling_price': 2.5, 'is_featured': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', CONFIGS_PATH)[0]['body']
        self.assertEqual(sent['branchId'], self.main['_id'])
        self.assertEqual(sent['menuItemId'], self.cola['_id'])
        self.assertEqual(sent['sellingPrice'], 2.5)
        self.assertTrue(sent['isVisibleInPOS'])

        items = {r['name']: r for r in response.data['data']['state']['items']}
        self.assertEqual(items['Cola']['assignment'], ASSIGNED)
        self.assertEqual(items['Cola']['effective_price'], 2.5)

    def test_assign_requires_menu_item(self):
        """Test assigning without a menu item is rejected"""
        response = self.client.post(self.url, {'selling_price': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('menu_item_id', response.data['data'])

    def test_update_override_uses_config_id(self):
        """Test updating an assigned item patches its branch config"""
        self.client.get(self.url)
        response = self.client.patch(f"{self.url}{self.margherita['_id']}/", {
            'is_available': False, 'display_order': 3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sent = self.backend.requests_to('PATCH', f"{CONFIGS_PATH}/{self.configs[0]['_id']}")
        self.assertEqual(sent[0]['body'], {'isAvailable': False, 'displayOrder': 3})
        self.assertEqual(response.data['data']['state']['summary']['available'], 0)

    def test_unassigned_item_cannot_be_updated(self):
        """Test updating an item with no branch config is refused"""
        response = self.client.patch(f"{self.url}{self.cola['_id']}/", {'is_featured': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.backend.requests_to('PATCH', f"{CONFIGS_PATH}/{self.cola['_id']}"), [])

    def test_unassign_item(self):
        """Test deleting an assigned item removes its branch config"""
        response = self.client.delete(f"{self.url}{self.margherita['_id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn(self.configs[0]['_id'], self.backend.collections[CONFIGS_PATH])
        items = {r['name']: r for r in response.data['data']['state']['items']}
        self.assertEqual(items['Margherita']['assignment'], UNASSIGNED)

    def test_bulk_unassign_reports_unsaved_items(self):
        """Test bulk delete counts items without a config as failures"""
        self.client.get(self.url)
        self.client.post(f'{self.url}selection/', {
            'ids': [self.margherita['_id'], self.cola['_id']],
        }, format='json')
        response = self.client.post(f'{self.url}bulk-delete/', format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        record = response.data['data']['record']
        self.assertEqual(record['deleted'], 1)
        self.assertEqual([f['id'] for f in record['failed']], [self.cola['_id']])
        self.assertEqual(response.data['data']['state']['selected_ids'], [])
        self.assertEqual(len(self.backend.requests_to('DELETE', f"{CONFIGS_PATH}/{self.configs[0]['_id']}")), 1)

    def test_branches_keep_separate_state(self):
        """Test each branch has its own filters and items"""
        self.client.get(self.url, {'assignment': ASSIGNED})
        response = self.client.get('/api/v1/branches/MALL/menu/')
        data = response.data['data']
        self.assertEqual(data['filters']['assignment'], '')
        self.assertEqual(data['summary']['assigned'], 0)

        response = self.client.get(self.url)
        self.assertEqual(response.data['data']['filters']['assignment'], ASSIGNED)
