"""
Comprehensive test suite for Staff module
Tests: staff management, status changes and PIN assignment
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory

STAFF_PATH = '/t/staff'


class StaffAPITests(TestCase):
    """Test staff management via API"""

    def setUp(self):
        self.backend = FakeTenantBackend(list_style='paginated').install(self)
        self.staff = self.backend.seed(STAFF_PATH, [
            TestDataFactory.staff_member(name='Ayesha Khan', email='ayesha@test.com', branch_id='branch-1'),
            TestDataFactory.staff_member(name='Bilal Ahmed', status='suspended', branch_id='branch-2'),
            TestDataFactory.staff_member(name='Sara Ali', status='inactive', branch_id='branch-1', pin='1234'),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/staff/'

    def test_records_flattened(self):
        """Test fullName and branchIds are exposed as dashboard fields"""
        response = self.client.get(self.url)
        first = response.data['data']['items'][0]
        self.assertEqual(first['name'], 'Ayesha Khan')
        self.assertEqual(first['branch_ids'], ['branch-1'])
        self.assertEqual(first['branch_id'], 'branch-1')
        self.assertEqual(first['status'], 'active')

    def test_pin_not_exposed(self):
        """Test stored PINs are never returned"""
        response = self.client.get(self.url, {'search': 'sara'})
        self.assertNotIn('pin', response.data['data']['items'][0])

    def test_search_and_filters(self):
        """Test search by email and filters by status and branch"""
        response = self.client.get(self.url, {'search': 'AYESHA@'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Ayesha Khan'])

        response = self.client.get(self.url, {'search': '', 'branch_id': 'branch-1', 'status': 'inactive'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Sara Ali'])
        self.assertEqual(response.data['data']['filter_options']['branch_id'], ['branch-1', 'branch-2'])

    def test_invalid_status_filter(self):
        response = self.client.get(self.url, {'status': 'retired'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_staff(self):
        """Test creating a staff member via API"""
        response = self.client.post(self.url, {
            'name': 'Omar Farooq',
            'email': 'omar@test.com',
            'password': 'secret123',
            'roles': ['waiter'],
            'branch_ids': ['branch-2'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', STAFF_PATH)[0]['body']
        self.assertEqual(sent['fullName'], 'Omar Farooq')
        self.assertEqual(sent['branchIds'], ['branch-2'])
        self.assertEqual(sent['status'], 'active')
        self.assertNotIn('password', response.data['data']['record'])
        self.assertEqual(response.data['data']['state']['total'], 4)

    def test_create_requires_password_and_email(self):
        """Test new staff need a password and a valid email"""
        response = self.client.post(self.url, {'name': 'No Pass', 'email': 'not-an-email'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['data'])

        response = self.client.post(self.url, {'name': 'No Pass', 'email': 'np@test.com'}, format='json')
        self.assertIn('password', response.data['data'])

    def test_update_without_password(self):
        """Test editing an existing member does not need a password"""
        target = self.staff[1]
        response = self.client.patch(f"{self.url}{target['_id']}/", {'position': 'Manager'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['state']['items'][1]['position'], 'Manager')


class StaffActionTests(TestCase):
    """Test staff status and PIN endpoints"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.member = self.backend.seed(STAFF_PATH, [TestDataFactory.staff_member(name='Ayesha Khan')])[0]
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.calls = []

        def change_status(params, body):
            self.calls.append(body)
            self.backend.collections[STAFF_PATH][self.member['_id']]['status'] = body['status']
            return 200, {'status': True, 'message': 'Status updated'}

        def set_pin(params, body):
            self.calls.append(body)
            return 200, {'status': True, 'message': 'PIN set'}

        self.backend.route('POST', f"{STAFF_PATH}/{self.member['_id']}/status", change_status)
        self.backend.route('POST', f"{STAFF_PATH}/{self.member['_id']}/set-pin", set_pin)

    def test_suspend_staff(self):
        """Test suspending a staff member patches the list in place"""
        response = self.client.post(f"/api/v1/staff/{self.member['_id']}/status/", {
            'status': 'suspended', 'branch_id': 'branch-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.calls, [{'status': 'suspended', 'branchId': 'branch-1'}])
        state = response.data['data']['state']
        self.assertEqual(state['items'][0]['status'], 'suspended')
        self.assertEqual(state['toasts'][-1]['message'], 'Staff status changed to suspended.')
        self.assertEqual(len(self.backend.requests_to('GET', STAFF_PATH)), 1)

    def test_invalid_status(self):
        response = self.client.post(f"/api/v1/staff/{self.member['_id']}/status/", {'status': 'fired'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.calls, [])

    def test_status_failure(self):
        """Test a failed status change leaves the record unchanged"""
        self.backend.fail('POST', f"{STAFF_PATH}/{self.member['_id']}/status", message='Not allowed')
        response = self.client.post(f"/api/v1/staff/{self.member['_id']}/status/", {'status': 'inactive'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['message'], 'Not allowed')
        self.assertEqual(response.data['data']['state']['items'][0]['status'], 'active')

    def test_set_pin(self):
        """Test setting a PIN via API"""
        response = self.client.post(f"/api/v1/staff/{self.member['_id']}/pin/", {'pin': '4321'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.calls, [{'pin': '4321'}])

    def test_pin_format(self):
        """Test PINs must be 4 to 6 digits"""
        for pin in ('12', '1234567', 'abcd'):
            response = self.client.post(f"/api/v1/staff/{self.member['_id']}/pin/", {'pin': pin}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.calls, [])

    def test_unknown_member(self):
        response = self.client.post('/api/v1/staff/missing/pin/', {'pin': '1234'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
