"""
Comprehensive test suite for Locations module
Tests: branch management, branch identifier resolution and the restaurant profile draft
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core import auth
from dashboard.core.client import TenantAPIClient
from dashboard.core.session import TenantSession
from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory
from dashboard.locations.resolver import resolve_branch_id

BRANCHES_PATH = '/t/branches'


class BranchResolverTests(TestCase):
    """Test branch identifier resolution"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backend.add_user()
        self.main, self.mall = self.backend.seed(BRANCHES_PATH, [
            TestDataFactory.branch(name='Main Street', code='MAIN'),
            TestDataFactory.branch(name='City Mall', code='MALL', id=7),
        ])
        self.api = TenantAPIClient(TenantSession())
        auth.login(self.api, 'manager@test.com', 'testpass123')

    def test_resolve_by_code_name_and_id(self):
        """Test code, name and numeric id all resolve to the ObjectId"""
        self.assertEqual(resolve_branch_id(self.api, 'MAIN'), self.main['_id'])
        self.assertEqual(resolve_branch_id(self.api, 'City Mall'), self.mall['_id'])
        self.assertEqual(resolve_branch_id(self.api, 7), self.mall['_id'])

    def test_resolve_object_id_directly(self):
        """Test an ObjectId is validated with a single detail call"""
        self.assertEqual(resolve_branch_id(self.api, self.main['_id']), self.main['_id'])
        self.assertEqual(len(self.backend.requests_to('GET', f"{BRANCHES_PATH}/{self.main['_id']}")), 1)
        self.assertEqual(self.backend.requests_to('GET', BRANCHES_PATH), [])

    def test_resolution_is_cached(self):
        """Test repeated lookups hit the cache"""
        resolve_branch_id(self.api, 'MAIN')
        resolve_branch_id(self.api, 'MAIN')
        self.assertEqual(len(self.backend.requests_to('GET', BRANCHES_PATH)), 1)

    def test_unknown_branch(self):
        """Test unknown identifiers resolve to None and are not cached"""
        self.assertIsNone(resolve_branch_id(self.api, 'NOWHERE'))
        self.assertIsNone(resolve_branch_id(self.api, ''))
        resolve_branch_id(self.api, 'NOWHERE')
        self.assertEqual(len(self.backend.requests_to('GET', BRANCHES_PATH)), 2)

    def test_list_failure(self):
        """Test a failed branch list resolves to None"""
        self.backend.fail('GET', BRANCHES_PATH)
        self.assertIsNone(resolve_branch_id(self.api, 'MAIN'))


class BranchAPITests(TestCase):
    """Test branch management via API"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.branches = self.backend.seed(BRANCHES_PATH, [
            TestDataFactory.branch(name='Main Street', code='MAIN', city='Lahore'),
            TestDataFactory.branch(name='Harbour', code='HRB', city='Karachi', status='inactive'),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/branches/'

    def test_nested_fields_flattened(self):
        """Test address and tax are flattened into the record"""
        response = self.client.get(self.url, {'city': 'Karachi'})
        branch = response.data['data']['items'][0]
        self.assertEqual(branch['name'], 'Harbour')
        self.assertEqual(branch['status'], 'inactive')
        self.assertEqual(branch['tax_rate'], 16)
        self.assertEqual(response.data['data']['filter_options']['city'], ['Karachi', 'Lahore'])

    def test_create_nests_address_and_tax(self):
        """Test creating a branch sends nested address and tax"""
        response = self.client.post(self.url, {
            'name': 'Airport', 'code': 'AIR', 'city': 'Islamabad', 'address_line': 'Terminal 1',
            'tax_mode': 'inclusive', 'tax_rate': 5, 'contact_email': 'air@test.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', BRANCHES_PATH)[0]['body']
        self.assertEqual(sent['address'], {'line': 'Terminal 1', 'city': 'Islamabad'})
        self.assertEqual(sent['tax'], {'mode': 'inclusive', 'rate': 5.0})
        self.assertEqual(sent['status'], 'active')
        self.assertEqual(sent['contactEmail'], 'air@test.com')

    def test_tax_rate_bounds(self):
        """Test tax rate must be within 0..100"""
        response = self.client.post(self.url, {'name': 'Bad', 'tax_rate': 120}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_resolve_endpoint(self):
        """Test resolving a branch code via API"""
        response = self.client.get('/api/v1/branches/resolve/HRB/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['branch_id'], self.branches[1]['_id'])
        response = self.client.get('/api/v1/branches/resolve/NOPE/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_rename_invalidates_resolution(self):
        """Test a branch update drops cached resolutions"""
        self.client.get('/api/v1/branches/resolve/MAIN/')
        target = self.branches[0]
        self.client.patch(f"{self.url}{target['_id']}/", {'code': 'CENTRAL'}, format='json')
        response = self.client.get('/api/v1/branches/resolve/MAIN/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/branches/resolve/CENTRAL/')
        self.assertEqual(response.data['data']['branch_id'], target['_id'])


class ProfileDraftTests(TestCase):
    """Test the restaurant profile draft kept in the session"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/profile/draft/'

    def test_empty_draft(self):
        response = self.client.get(self.url)
        self.assertEqual(response.data['data'], {'draft': {}, 'has_changes': False})

    def test_save_merge_and_discard(self):
        """Test partial saves merge and delete discards"""
        self.client.put(self.url, {'name': 'Pizza Place', 'opening_time': '09:00'}, format='json')
        response = self.client.put(self.url, {'closing_time': '23:30'}, format='json')
        self.assertEqual(response.data['data']['draft'], {
            'name': 'Pizza Place', 'opening_time': '09:00', 'closing_time': '23:30',
        })
        self.assertTrue(self.client.get(self.url).data['data']['has_changes'])

        self.client.delete(self.url)
        self.assertEqual(self.client.get(self.url).data['data']['draft'], {})

    def test_invalid_fields(self):
        """Test email, website and times are validated"""
        response = self.client.put(self.url, {
            'email': 'nope', 'website': 'not a url', 'opening_time': '25:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('email', 'website', 'opening_time'):
            self.assertIn(field, response.data['data'])

    def test_draft_cleared_on_logout(self):
        """Test logging out flushes the draft with the session"""
        self.client.put(self.url, {'name': 'Pizza Place'}, format='json')
        self.client.post('/api/v1/auth/logout/', format='json')
        self.client.authenticate_tenant(self.backend)
        self.assertEqual(self.client.get(self.url).data['data']['draft'], {})
