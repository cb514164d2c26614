"""
Comprehensive test suite for Backups module
Tests: backup history, manual backups, restore and backup settings
"""
from django.test import TestCase
from rest_framework import status

from dashboard.backups.resources import format_size
from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory

BACKUPS_PATH = '/t/backups'
SETTINGS_PATH = '/t/backups/settings'


class FormatSizeTests(TestCase):

    def test_sizes(self):
        self.assertEqual(format_size(500), '500 B')
        self.assertEqual(format_size(2048), '2.0 KB')
        self.assertEqual(format_size(2576980378), '2.4 GB')
        self.assertEqual(format_size('1.8 GB'), '1.8 GB')
        self.assertEqual(format_size(None), '')


class BackupAPITests(TestCase):
    """Test backup history, runs and restores"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backups = self.backend.seed(BACKUPS_PATH, [
            TestDataFactory.backup(type='auto', createdAt='2023-10-14T02:00:00Z', includes=['Menu', 'Orders']),
            TestDataFactory.backup(type='auto', createdAt='2023-10-15T02:00:00Z', includes=['Menu']),
            TestDataFactory.backup(status='failed', createdAt='2023-10-16T02:00:00Z'),
        ])
        self.settings = {
            'autoBackupEnabled': True, 'backupFrequency': 'daily', 'backupTime': '02:00',
            'includeMenuData': True, 'includeOrderHistory': True, 'includeCustomerData': False,
            'includeEmployeeData': False, 'includeSettings': True, 'includeFinancialData': False,
        }
        self.restored = []

        def get_settings(params, body):
            return 200, {'status': True, 'result': dict(self.settings)}

        def put_settings(params, body):
            self.settings.update(body)
            return 200, {'status': True, 'message': 'Settings saved', 'result': dict(self.settings)}

        def create_backup(params, body):
            obj = dict(TestDataFactory.backup(createdAt='2023-10-17T12:00:00Z'), **body)
            obj['_id'] = self.backend.next_id()
            self.backend.collections[BACKUPS_PATH][obj['_id']] = obj
            return 201, {'status': True, 'message': 'Backup created', 'result': obj}

        self.backend.route('GET', SETTINGS_PATH, get_settings)
        self.backend.route('PUT', SETTINGS_PATH, put_settings)
        self.backend.route('POST', BACKUPS_PATH, create_backup)
        for backup in self.backups:
            self.backend.route('POST', f"{BACKUPS_PATH}/{backup['_id']}/restore",
                               lambda params, body, backup_id=backup['_id']: self._restore(backup_id))
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/backups/'

    def _restore(self, backup_id):
        self.restored.append(backup_id)
        return 200, {'status': True, 'message': 'Restore started'}

    def test_history(self):
        """Test backup history records and summary"""
        response = self.client.get(self.url)
        data = response.data['data']
        self.assertEqual(data['items'][0]['size_display'], '2.0 KB')
        self.assertEqual(data['items'][0]['includes'], ['Menu', 'Orders'])
        self.assertEqual(data['summary']['by_status'], {'completed': 2, 'failed': 1})
        self.assertEqual(data['summary']['last_completed'], '2023-10-15T02:00:00Z')

    def test_status_filter(self):
        response = self.client.get(self.url, {'status': 'failed'})
        self.assertEqual(response.data['data']['filtered_count'], 1)

    def test_run_uses_settings_flags(self):
        """Test a manual backup includes the data sets enabled in settings"""
        response = self.client.post('/api/v1/backups/run/', {'type': 'full'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', BACKUPS_PATH)[0]['body']
        self.assertEqual(sent, {'backupType': 'full', 'type': 'manual', 'includes': ['Menu', 'Orders', 'Settings']})
        self.assertEqual(response.data['message'], 'Backup created successfully with 3 data type(s)!')
        self.assertEqual(response.data['data']['state']['total'], 4)

    def test_run_with_explicit_includes(self):
        """Test a partial backup with chosen data sets skips the settings lookup"""
        response = self.client.post('/api/v1/backups/run/', {
            'type': 'partial', 'includes': ['Customers'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.backend.requests_to('GET', SETTINGS_PATH), [])
        self.assertEqual(self.backend.requests_to('POST', BACKUPS_PATH)[0]['body']['includes'], ['Customers'])

    def test_run_needs_a_data_set(self):
        """Test a backup with nothing selected is refused"""
        for key in list(self.settings):
            if key.startswith('include'):
                self.settings[key] = False
        response = self.client.post('/api/v1/backups/run/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Please select at least one data type to backup')
        self.assertEqual(self.backend.requests_to('POST', BACKUPS_PATH), [])

    def test_restore_completed_backup(self):
        """Test restoring a completed backup"""
        target = self.backups[1]
        response = self.client.post(f"/api/v1/backups/{target['_id']}/restore/", format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.restored, [target['_id']])
        self.assertEqual(response.data['message'], 'Restore started')

    def test_restore_failed_backup_refused(self):
        """Test failed backups cannot be restored"""
        target = self.backups[2]
        response = self.client.post(f"/api/v1/backups/{target['_id']}/restore/", format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.restored, [])

    def test_delete_backup(self):
        """Test deleting a backup reloads the history"""
        target = self.backups[0]
        response = self.client.delete(f"{self.url}{target['_id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['state']['total'], 2)

    def test_generic_writes_refused(self):
        """Test backups are only created through backups/run/ and never edited"""
        response = self.client.post(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertEqual(response.data['message'], 'Backups cannot be created here')

        target = self.backups[0]
        response = self.client.patch(f"{self.url}{target['_id']}/", {'type': 'partial'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        response = self.client.put(f"{self.url}{target['_id']}/", {'type': 'partial'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

        self.assertEqual(self.backend.requests_to('POST', BACKUPS_PATH), [])
        self.assertEqual(self.backend.requests_to('PATCH', f"{BACKUPS_PATH}/{target['_id']}"), [])
        self.assertEqual(self.backend.requests_to('PUT', f"{BACKUPS_PATH}/{target['_id']}"), [])


class BackupSettingsTests(TestCase):
    """Test backup settings endpoints"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.stored = {'autoBackupEnabled': True, 'backupFrequency': 'daily', 'retentionPeriod': 30}

        def get_settings(params, body):
            return 200, {'status': True, 'data': dict(self.stored)}

        def put_settings(params, body):
            self.stored.update(body)
            return 200, {'status': True, 'data': dict(self.stored)}

        self.backend.route('GET', SETTINGS_PATH, get_settings)
        self.backend.route('PUT', SETTINGS_PATH, put_settings)
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/backups/settings/'

    def test_get_settings(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {
            'auto_backup_enabled': True, 'backup_frequency': 'daily', 'retention_period': 30,
        })

    def test_partial_update(self):
        """Test only the changed settings are sent"""
        response = self.client.put(self.url, {'backup_time': '03:30', 'auto_cleanup': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Settings saved successfully!')
        sent = self.backend.requests_to('PUT', SETTINGS_PATH)[0]['body']
        self.assertEqual(sent, {'backupTime': '03:30', 'autoCleanup': True})
        self.assertEqual(response.data['data']['backup_frequency'], 'daily')

    def test_invalid_settings(self):
        """Test frequency, time and retention are validated"""
        response = self.client.put(self.url, {
            'backup_frequency': 'hourly', 'backup_time': '7pm', 'retention_period': 0,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('backup_frequency', 'backup_time', 'retention_period'):
            self.assertIn(field, response.data['data'])

    def test_settings_failure(self):
        self.backend.fail('GET', SETTINGS_PATH, message='Settings unavailable')
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['message'], 'Settings unavailable')
