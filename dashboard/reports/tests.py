"""
Comprehensive test suite for Reports module
Tests: usage statistics aggregated from order history
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory
from dashboard.reports.services import count_ingredients, count_menu_items, usage_report

ORDERS_PATH = '/t/orders'


class UsageCountTests(TestCase):
    """Test the pure aggregation helpers"""

    def setUp(self):
        self.orders = [
            TestDataFactory.order(lines=[
                {'menuItemId': 'pizza', 'quantity': 2, 'ingredients': [{'ingredientId': 'cheese', 'quantity': 50}]},
                {'menuItemId': 'cola', 'quantity': 1},
            ]),
            TestDataFactory.order(lines=[
                {'menuItemId': {'_id': 'pizza'}, 'ingredients': [{'ingredientId': 'cheese'}, {'ingredientId': 'dough'}]},
            ]),
        ]

    def test_menu_items_weighted_by_quantity(self):
        self.assertEqual(count_menu_items(self.orders), {'pizza': 3, 'cola': 1})

    def test_ingredients(self):
        self.assertEqual(count_ingredients(self.orders), {'cheese': 3, 'dough': 1})

    def test_report_ties_and_empty(self):
        """Test ties pick the first record and an empty list has no extremes"""
        records = [{'id': 'a', 'name': 'A'}, {'id': 'b', 'name': 'B'}, {'id': 'c', 'name': 'C'}]
        report = usage_report(records, {'a': 2, 'b': 2})
        self.assertEqual(report['most_used']['name'], 'A')
        self.assertEqual(report['least_used']['name'], 'C')
        self.assertEqual(report['total_usage'], 4)
        self.assertEqual(usage_report([], {})['most_used'], None)


class UsageAPITests(TestCase):
    """Test usage statistics via API"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.cash, self.card = self.backend.seed('/t/payment-methods', [
            TestDataFactory.payment_method('Cash', 'Cash'),
            TestDataFactory.payment_method('Card', 'Card'),
        ])
        self.cheese, self.basil = self.backend.seed('/t/catalog/ingredients', [
            TestDataFactory.ingredient(name='Cheese'),
            TestDataFactory.ingredient(name='Basil'),
        ])
        self.main = self.backend.seed('/t/branches', [TestDataFactory.branch(name='Main', code='MAIN')])[0]
        self.pizza = self.backend.seed('/t/menu/items', [TestDataFactory.menu_item(name='Pizza')])[0]
        self.backend.add_collection('/t/branch-menu')
        self.backend.seed(ORDERS_PATH, [
            TestDataFactory.order(payment_method_id=self.card['_id'], branch_id=self.main['_id'], lines=[
                {'menuItemId': self.pizza['_id'], 'quantity': 2,
                 'ingredients': [{'ingredientId': self.cheese['_id']}]},
            ]),
            TestDataFactory.order(payment_method_id=self.card['_id'], branch_id='elsewhere', lines=[
                {'menuItemId': self.pizza['_id'], 'quantity': 1,
                 'ingredients': [{'ingredientId': self.cheese['_id']}, {'ingredientId': self.basil['_id']}]},
            ]),
        ])
        self.order_params = []

        def list_orders(params, body):
            self.order_params.append(params)
            orders = self.backend.objects(ORDERS_PATH)
            if params.get('branchId'):
                orders = [o for o in orders if o.get('branchId') == params['branchId']]
            return 200, {'status': True, 'result': orders}

        def effective(params, body):
            rows = [{
                'menuItem': {'_id': item['_id'], 'name': item['name'], 'pricing': {'basePrice': item['price']}},
                'branchConfig': None,
            } for item in self.backend.objects('/t/menu/items')]
            return 200, {'status': True, 'result': rows}

        self.backend.route('GET', ORDERS_PATH, list_orders)
        self.backend.route('GET', '/t/branch-menu/effective', effective)
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)

    def test_payment_method_usage(self):
        """Test payment methods are counted per order"""
        response = self.client.get('/api/v1/reports/usage/payment-methods/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual([r['usage_count'] for r in data['items']], [0, 2])
        self.assertEqual(data['most_used']['name'], 'Card')
        self.assertEqual(data['least_used']['name'], 'Cash')
        self.assertEqual(data['orders_counted'], 2)

    def test_ingredient_usage_for_branch(self):
        """Test a branch filter narrows the order history"""
        response = self.client.get('/api/v1/reports/usage/ingredients/', {'branch': 'MAIN'})
        data = response.data['data']
        self.assertEqual({r['name']: r['usage_count'] for r in data['items']}, {'Cheese': 2, 'Basil': 0})
        self.assertEqual(self.order_params[-1]['branchId'], self.main['_id'])

    def test_usage_respects_current_filters(self):
        """Test only the rows visible in the list are reported"""
        self.client.get('/api/v1/resources/ingredients/', {'search': 'basil'})
        response = self.client.get('/api/v1/reports/usage/ingredients/')
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Basil'])
        self.assertEqual(response.data['data']['items'][0]['usage_count'], 1)

    def test_branch_menu_usage(self):
        """Test branch menu usage needs a branch and counts units sold"""
        response = self.client.get('/api/v1/reports/usage/branch-menu/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/v1/reports/usage/branch-menu/', {'branch': 'MAIN'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['items'][0]['usage_count'], 2)

    def test_unknown_resource_or_branch(self):
        response = self.client.get('/api/v1/reports/usage/staff/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/reports/usage/ingredients/', {'branch': 'NOWHERE'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_date_range(self):
        """Test date bounds are validated and forwarded"""
        response = self.client.get('/api/v1/reports/usage/payment-methods/', {
            'date_from': '2024-02-01', 'date_to': '2024-01-01',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.get('/api/v1/reports/usage/payment-methods/', {
            'date_from': '2024-01-01', 'date_to': '2024-01-31',
        })
        self.assertEqual(self.order_params[-1]['from'], '2024-01-01')
        self.assertEqual(self.order_params[-1]['to'], '2024-01-31')

    def test_orders_failure(self):
        self.backend.fail('GET', ORDERS_PATH, message='Orders unavailable')
        response = self.client.get('/api/v1/reports/usage/payment-methods/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['message'], 'Orders unavailable')
