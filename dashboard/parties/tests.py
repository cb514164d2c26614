"""
Comprehensive test suite for Parties module
Tests: vendor management through the resource API
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory

VENDORS_PATH = '/t/vendors'


class VendorAPITests(TestCase):
    """Test vendor management"""

    def setUp(self):
        self.backend = FakeTenantBackend(list_style='data').install(self)
        self.vendors = self.backend.seed(VENDORS_PATH, [
            TestDataFactory.vendor('Water Inc', name='Ahmad Ali', branchId='branch-1'),
            TestDataFactory.vendor('Salt Inc', name='Hassan Ahmed', branchId='branch-2'),
            TestDataFactory.vendor('Fresh Mart', name='Ali Hassan', isActive=False, branchId='branch-1'),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/vendors/'

    def test_list_vendors(self):
        """Test listing vendors via API"""
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        first = response.data['data']['items'][0]
        self.assertEqual(first['company_name'], 'Water Inc')
        self.assertEqual(first['contact'], '5550199')
        self.assertEqual(first['status'], 'Active')
        self.assertEqual(response.data['data']['summary']['by_status'], {'Active': 2, 'Inactive': 1})

    def test_search_by_company_and_contact_name(self):
        """Test search covers the company and the contact person"""
        response = self.client.get(self.url, {'search': 'hassan'})
        self.assertEqual([r['company_name'] for r in response.data['data']['items']], ['Salt Inc', 'Fresh Mart'])

        response = self.client.get(self.url, {'search': 'inc', 'status': 'Active', 'branch_id': 'branch-2'})
        self.assertEqual([r['company_name'] for r in response.data['data']['items']], ['Salt Inc'])

    def test_create_vendor(self):
        """Test creating a vendor via API"""
        self.client.get(self.url)
        response = self.client.post(self.url, {
            'company_name': 'Spice Co', 'name': 'Zara', 'email': 'zara@spice.com', 'contact': '03001112233',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', VENDORS_PATH)[0]['body']
        self.assertEqual(sent['companyName'], 'Spice Co')
        self.assertEqual(sent['phone'], '03001112233')
        self.assertTrue(sent['isActive'])
        state = response.data['data']['state']
        self.assertEqual(state['items'][-1]['company_name'], 'Spice Co')
        self.assertEqual(state['items'][-1]['display_id'], 4)
        self.assertEqual(len(self.backend.requests_to('GET', VENDORS_PATH)), 1)

    def test_required_fields(self):
        """Test company, contact person, email and contact number are required"""
        response = self.client.post(self.url, {'company_name': '   ', 'email': 'bad'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('company_name', 'name', 'email', 'contact'):
            self.assertIn(field, response.data['data'])

    def test_create_failure_keeps_modal_open(self):
        """Test a failed create leaves the modal open with an error toast"""
        self.client.post(f'{self.url}modal/', {'action': 'create'}, format='json')
        self.backend.fail('POST', VENDORS_PATH, message='Duplicate vendor')
        response = self.client.post(self.url, {
            'company_name': 'Water Inc', 'name': 'Ahmad', 'email': 'a@water.com', 'contact': '0300',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        state = response.data['data']['state']
        self.assertEqual(state['modal']['mode'], 'creating')
        self.assertEqual(state['toasts'], [{'level': 'error', 'message': 'Duplicate vendor'}])

    def test_bulk_delete(self):
        """Test deleting selected vendors one by one"""
        self.client.get(self.url)
        self.client.post(f'{self.url}selection/', {'all': True}, format='json')
        response = self.client.post(f'{self.url}bulk-delete/', format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['record']['deleted'], 3)
        self.assertEqual(response.data['message'], '3 items deleted successfully.')
        self.assertEqual(self.backend.objects(VENDORS_PATH), [])
