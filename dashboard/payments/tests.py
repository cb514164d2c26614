"""
Comprehensive test suite for Payments module
Tests: payment method management, filters and summary
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory

METHODS_PATH = '/t/payment-methods'


class PaymentMethodAPITests(TestCase):
    """Test payment method management"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.methods = self.backend.seed(METHODS_PATH, [
            TestDataFactory.payment_method('Cash Payment', 'Cash', 16),
            TestDataFactory.payment_method('Credit Card', 'Card', 16),
            TestDataFactory.payment_method('Online Transfer', 'Online', 5, taxType='VAT'),
            TestDataFactory.payment_method('Debit Card', 'Card', 16, isActive=False),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/payment-methods/'

    def test_summary(self):
        """Test the summary counts active methods and types"""
        response = self.client.get(self.url)
        self.assertEqual(response.data['data']['summary'], {
            'total': 4, 'active': 3, 'by_type': {'Cash': 1, 'Card': 2, 'Online': 1},
        })

    def test_filters(self):
        """Test payment type, tax type and status filters combine"""
        response = self.client.get(self.url, {'payment_type': 'Card', 'status': 'Active'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Credit Card'])

        response = self.client.get(self.url, {'reset': 'true', 'tax_type': 'VAT'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Online Transfer'])
        self.assertEqual(response.data['data']['filter_options']['tax_type'], ['GST', 'VAT'])

    def test_reset_clears_filters(self):
        """Test reset=true clears the search and every filter"""
        self.client.get(self.url, {'search': 'card', 'payment_type': 'Card'})
        response = self.client.get(self.url, {'reset': 'true'})
        data = response.data['data']
        self.assertEqual(data['search_term'], '')
        self.assertEqual(data['filters']['payment_type'], '')
        self.assertEqual(data['filtered_count'], 4)

    def test_unknown_payment_type_filter(self):
        response = self.client.get(self.url, {'payment_type': 'Crypto'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_reloads(self):
        """Test creating a payment method reloads the list"""
        self.client.get(self.url)
        response = self.client.post(self.url, {
            'name': 'Mobile Wallet', 'payment_type': 'Online', 'tax_type': 'Service Tax', 'tax_percentage': 8,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', METHODS_PATH)[0]['body']
        self.assertEqual(sent['paymentType'], 'Online')
        self.assertEqual(sent['taxPercentage'], 8.0)
        self.assertEqual(len(self.backend.requests_to('GET', METHODS_PATH)), 2)
        self.assertEqual(response.data['data']['state']['summary']['active'], 4)

    def test_tax_percentage_bounds(self):
        """Test tax percentage must be within 0..100"""
        for value in (-1, 101):
            response = self.client.post(self.url, {
                'name': 'Bad', 'payment_type': 'Cash', 'tax_percentage': value,
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('tax_percentage', response.data['data'])

    def test_edit_modal_requires_known_record(self):
        """Test the edit modal opens only for loaded records"""
        target = self.methods[1]
        response = self.client.post(f'{self.url}modal/', {'action': 'edit', 'id': target['_id']}, format='json')
        self.assertEqual(response.data['data']['modal']['editing']['name'], 'Credit Card')

        response = self.client.post(f'{self.url}modal/', {'action': 'edit', 'id': 'missing'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_closes_modal(self):
        """Test a successful update closes the edit modal"""
        target = self.methods[0]
        self.client.post(f'{self.url}modal/', {'action': 'edit', 'id': target['_id']}, format='json')
        response = self.client.patch(f"{self.url}{target['_id']}/", {'tax_percentage': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['data']['state']['modal']['open'])
        self.assertEqual(self.backend.collections[METHODS_PATH][target['_id']]['taxPercentage'], 0)
