"""
Comprehensive test suite for the core dashboard layer
Tests: filtering, response envelopes, tenant session, API client, record service,
management state and the generic resource endpoints
"""
import os
import subprocess
import sys

from django.conf import settings
from django.test import TestCase, override_settings
from rest_framework import serializers, status

from dashboard.core import auth
from dashboard.core.client import TenantAPIClient
from dashboard.core.envelope import Result, extract_message, unwrap, unwrap_record
from dashboard.core.exceptions import RequestError, UnknownResource
from dashboard.core.filtering import distinct_values, filter_records, matches_filters, matches_search
from dashboard.core.management import CLOSED, CREATING, EDITING, ERROR, SUCCESS, RecordManager
from dashboard.core.registry import ACTIVE_STATUSES, Resource, get_resource, register, status_from_flag
from dashboard.core.services import RecordService
from dashboard.core.session import ANONYMOUS, AUTHENTICATED, CLEARED, TenantSession
from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend

NOTES_PATH = '/t/notes'


class NoteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    status = serializers.ChoiceField(choices=ACTIVE_STATUSES, default='Active')
    priority = serializers.IntegerField(min_value=0, required=False)


class NoteResource(Resource):
    name = 'test-notes'
    label = 'Notes'
    path = NOTES_PATH
    search_fields = ('name', 'sku')
    filter_choices = {'status': ACTIVE_STATUSES}
    serializer_class = NoteSerializer
    export_columns = ('display_id', 'name', 'status')

    def to_record(self, raw, index):
        record = super().to_record(raw, index)
        record['status'] = status_from_flag(raw.get('isActive', True))
        return record


class OptimisticNoteResource(NoteResource):
    name = 'test-notes-optimistic'
    optimistic = True


register(NoteResource())
register(OptimisticNoteResource())


def note(name, is_active=True, **extra):
    obj = {'name': name, 'isActive': is_active}
    obj.update(extra)
    return obj


class FilteringTests(TestCase):
    """Test search and equality filters"""

    def setUp(self):
        self.records = [
            {'id': '1', 'name': 'Bread', 'status': 'Active', 'unit': 'kg'},
            {'id': '2', 'name': 'Oat Bread', 'status': 'Inactive', 'unit': 'kg'},
            {'id': '3', 'name': 'Butter', 'status': 'Active', 'unit': 'g', 'sku': 'BRD-9'},
        ]

    def test_search_and_status_filter(self):
        """Test search 'bread' with status Active returns only Bread"""
        result = filter_records(self.records, 'bread', ('name',), {'status': 'Active'})
        self.assertEqual([r['name'] for r in result], ['Bread'])

    def test_search_is_case_insensitive_substring(self):
        """Test search matches any designated field case-insensitively"""
        result = filter_records(self.records, 'BRD', ('name', 'sku'))
        self.assertEqual([r['id'] for r in result], ['3'])
        self.assertTrue(matches_search(self.records[1], 'oat b', ('name',)))
        self.assertFalse(matches_search(self.records[1], 'rye', ('name',)))

    def test_identity_filter_values(self):
        """Test '', 'all' and None disable a filter"""
        for value in ('', 'all', None):
            result = filter_records(self.records, '', ('name',), {'status': value})
            self.assertEqual(result, self.records)

    def test_filter_is_exact_match(self):
        """Test filters compare whole values, not substrings"""
        self.assertFalse(matches_filters(self.records[0], {'status': 'Act'}))
        self.assertTrue(matches_filters({'quantity': 5}, {'quantity': '5'}))

    def test_filter_preserves_order_and_input(self):
        """Test filtering is pure: input untouched, order kept"""
        before = [dict(r) for r in self.records]
        result = filter_records(self.records, 'b', ('name',), {'unit': 'kg'})
        self.assertEqual([r['id'] for r in result], ['1', '2'])
        self.assertEqual(self.records, before)

    def test_distinct_values(self):
        """Test distinct filter options are sorted and skip blanks"""
        records = self.records + [{'id': '4', 'unit': ''}]
        self.assertEqual(distinct_values(records, 'unit'), ['g', 'kg'])


class EnvelopeTests(TestCase):
    """Test response shape normalization"""

    def test_unwrap_envelope_keys(self):
        """Test data, items and result keys are all accepted"""
        self.assertEqual(unwrap({'data': [1]}, many=True), [1])
        self.assertEqual(unwrap({'items': [2]}, many=True), [2])
        self.assertEqual(unwrap({'result': [3]}, many=True), [3])
        self.assertEqual(unwrap([4], many=True), [4])

    def test_unwrap_paginated_list(self):
        """Test one nested level is unwrapped for lists"""
        body = {'status': True, 'result': {'items': [{'_id': 'a'}], 'total': 1}}
        self.assertEqual(unwrap(body, many=True), [{'_id': 'a'}])

    def test_unwrap_non_list_for_many(self):
        """Test a list request with an object body gives an empty list"""
        self.assertEqual(unwrap({'message': 'ok'}, many=True), [])
        self.assertEqual(unwrap({'result': {'_id': 'x'}}), {'_id': 'x'})

    def test_unwrap_record(self):
        """Test single records come from an envelope key or a bare object with an id"""
        self.assertEqual(unwrap_record({'data': {'_id': 'a'}}), {'_id': 'a'})
        self.assertEqual(unwrap_record({'_id': 'b', 'name': 'Rye'}), {'_id': 'b', 'name': 'Rye'})
        self.assertIsNone(unwrap_record({'status': True, 'message': 'Updated'}))
        self.assertIsNone(unwrap_record({'data': [1, 2]}))
        self.assertIsNone(unwrap_record(None))

    def test_extract_message(self):
        """Test message lookup order"""
        self.assertEqual(extract_message({'message': 'Saved'}), 'Saved')
        self.assertEqual(extract_message({'error': {'message': 'Bad'}}), 'Bad')
        self.assertEqual(extract_message({'error': 'Nope'}), 'Nope')
        self.assertEqual(extract_message([], 'default'), 'default')

    def test_result_to_dict(self):
        """Test Result renders the documented envelope"""
        self.assertEqual(Result.ok([1], 'fine').to_dict(), {'success': True, 'data': [1], 'message': 'fine'})
        self.assertEqual(Result.fail('broken').to_dict(), {'success': False, 'data': None, 'message': 'broken'})


class TenantSessionTests(TestCase):
    """Test the explicit session lifecycle"""

    def test_lifecycle(self):
        """Test anonymous -> authenticated -> cleared"""
        session = TenantSession.init({})
        self.assertEqual(session.state, ANONYMOUS)
        self.assertFalse(session.is_authenticated)

        session.authenticate('tok', user={'email': 'a@b.c'}, tenant_slug='pizza-co')
        self.assertEqual(session.state, AUTHENTICATED)
        self.assertTrue(session.is_authenticated)
        self.assertEqual(session.tenant_header, 'pizza-co')

        session.clear()
        self.assertEqual(session.state, CLEARED)
        self.assertIsNone(session.token)
        self.assertFalse(session.is_authenticated)

    def test_authenticate_requires_token(self):
        """Test a session cannot be authenticated without a token"""
        with self.assertRaises(ValueError):
            TenantSession().authenticate('')

    @override_settings(DEFAULT_TENANT_ID='', DEFAULT_TENANT_SLUG='extraction-testt')
    def test_default_tenant_header(self):
        """Test the configured default slug is used when no tenant is known"""
        self.assertEqual(TenantSession().tenant_header, 'extraction-testt')

    def test_round_trip_through_storage(self):
        """Test saving to and loading from a session mapping"""
        storage = {}
        session = TenantSession()
        session.authenticate('tok', tenant_id='t-1')
        session.save(storage)
        loaded = TenantSession.init(storage)
        self.assertTrue(loaded.is_authenticated)
        self.assertEqual(loaded.tenant_id, 't-1')
        self.assertNotIn('token', loaded.public_dict())


class ClientTests(TestCase):
    """Test the tenant API client"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backend.add_user()
        self.session = TenantSession()
        self.client_api = TenantAPIClient(self.session)

    def test_login_sets_token_and_tenant(self):
        """Test login reads result.token and the user's tenant"""
        result = auth.login(self.client_api, 'manager@test.com', 'testpass123')
        self.assertTrue(result.success)
        self.assertTrue(self.session.is_authenticated)
        self.assertEqual(self.session.tenant_slug, 'extraction-testt')
        self.assertEqual(self.session.tenant_id, 'tenant-0001')

    def test_login_failure(self):
        """Test wrong password gives a failed Result and an anonymous session"""
        result = auth.login(self.client_api, 'manager@test.com', 'wrong')
        self.assertFalse(result.success)
        self.assertEqual(result.message, 'Invalid email or password')
        self.assertFalse(self.session.is_authenticated)

    def test_headers_sent(self):
        """Test bearer token and tenant headers go out on every call"""
        auth.login(self.client_api, 'manager@test.com', 'testpass123')
        self.backend.add_collection(NOTES_PATH)
        self.client_api.get(NOTES_PATH, params={'limit': 10, 'empty': ''})
        sent = self.backend.requests_to('GET', NOTES_PATH)[0]
        self.assertEqual(sent['headers']['Authorization'], f'Bearer {self.session.token}')
        self.assertEqual(sent['headers']['x-tenant-id'], 'tenant-0001')
        self.assertEqual(sent['params'], {'limit': '10'})

    def test_non_ok_response_raises(self):
        """Test HTTP errors become RequestError with the backend message"""
        auth.login(self.client_api, 'manager@test.com', 'testpass123')
        self.backend.fail('GET', NOTES_PATH, status_code=503, message='Maintenance')
        with self.assertRaises(RequestError) as ctx:
            self.client_api.get(NOTES_PATH)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, 'Maintenance')

    def test_network_error_raises(self):
        """Test connection failures become RequestError"""
        self.backend.fail('GET', NOTES_PATH, network=True)
        with self.assertRaises(RequestError) as ctx:
            self.client_api.get(NOTES_PATH)
        self.assertIn('Network error', ctx.exception.message)

    def test_logout_clears_session_even_when_backend_fails(self):
        """Test logout is best effort remotely and always clears locally"""
        auth.login(self.client_api, 'manager@test.com', 'testpass123')
        self.backend.fail('POST', '/t/auth/logout')
        result = auth.logout(self.client_api)
        self.assertTrue(result.success)
        self.assertEqual(self.session.state, CLEARED)


class RecordServiceTests(TestCase):
    """Test one CRUD call -> one Result"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backend.add_user()
        self.backend.seed(NOTES_PATH, [note('Bread'), note('Oat Bread', is_active=False)])
        client = TenantAPIClient(TenantSession())
        auth.login(client, 'manager@test.com', 'testpass123')
        self.service = RecordService(get_resource('test-notes'), client)

    def test_list_maps_records(self):
        """Test list assigns ids and display ids"""
        result = self.service.list()
        self.assertTrue(result.success)
        self.assertEqual([r['display_id'] for r in result.data], [1, 2])
        self.assertEqual(result.data[1]['status'], 'Inactive')
        self.assertTrue(all(r['id'] for r in result.data))

    def test_list_accepts_every_envelope(self):
        """Test data/items/bare/paginated list bodies"""
        for style in ('data', 'items', 'bare', 'paginated'):
            self.backend.list_style = style
            self.assertEqual(len(self.service.list().data), 2, style)

    def test_create_then_list_has_server_id(self):
        """Test create followed by list contains the new record with a server-assigned id"""
        created = self.service.create({'name': 'Rye', 'status': 'Active'})
        self.assertTrue(created.success)
        self.assertTrue(created.data['id'])
        ids = [r['id'] for r in self.service.list().data]
        self.assertIn(created.data['id'], ids)
        sent = self.backend.requests_to('POST', NOTES_PATH)[0]['body']
        self.assertEqual(sent, {'name': 'Rye', 'isActive': True})

    def test_delete_then_list_omits_id(self):
        """Test delete followed by list no longer contains the id"""
        record_id = self.service.list().data[0]['id']
        self.assertTrue(self.service.delete(record_id).success)
        self.assertNotIn(record_id, [r['id'] for r in self.service.list().data])

    def test_update_uses_put_or_patch(self):
        """Test full updates PUT and partial updates PATCH"""
        record_id = self.service.list().data[0]['id']
        self.service.update(record_id, {'name': 'White Bread', 'status': 'Active'})
        self.service.update(record_id, {'status': 'Inactive'}, partial=True)
        self.assertEqual(len(self.backend.requests_to('PUT', f'{NOTES_PATH}/{record_id}')), 1)
        self.assertEqual(len(self.backend.requests_to('PATCH', f'{NOTES_PATH}/{record_id}')), 1)
        self.assertEqual(self.service.get(record_id).data['status'], 'Inactive')

    def test_failure_becomes_result(self):
        """Test errors are wrapped, never raised"""
        self.backend.fail('GET', NOTES_PATH, message='Database unavailable')
        result = self.service.list()
        self.assertFalse(result.success)
        self.assertEqual(result.message, 'Database unavailable')


class RecordManagerTests(TestCase):
    """Test list state, selection, modal and actions"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backend.add_user()
        self.backend.seed(NOTES_PATH, [
            note('Bread'), note('Oat Bread', is_active=False), note('Butter'),
        ])
        self.api = TenantAPIClient(TenantSession())
        auth.login(self.api, 'manager@test.com', 'testpass123')

    def make_manager(self, name='test-notes'):
        resource = get_resource(name)
        manager = RecordManager(resource, RecordService(resource, self.api))
        manager.load()
        return manager

    def test_load_and_filter(self):
        """Test derived filtered items follow search and filters"""
        manager = self.make_manager()
        manager.set_search_term('bread')
        manager.set_filter('status', 'Active')
        self.assertEqual([r['name'] for r in manager.filtered_items], ['Bread'])
        manager.reset_filters()
        self.assertEqual(len(manager.filtered_items), 3)

    def test_invalid_filter_value(self):
        """Test filters outside the closed set are rejected"""
        manager = self.make_manager()
        with self.assertRaises(ValueError):
            manager.set_filter('status', 'Deleted')
        with self.assertRaises(ValueError):
            manager.set_filter('colour', 'red')

    def test_load_failure_keeps_items(self):
        """Test a failed reload leaves previous items and adds an error toast"""
        manager = self.make_manager()
        self.backend.fail('GET', NOTES_PATH)
        result = manager.load()
        self.assertFalse(result.success)
        self.assertEqual(len(manager.items), 3)
        self.assertEqual(manager.drain_toasts()[0]['level'], ERROR)

    def test_modal_state_machine(self):
        """Test closed -> creating/editing -> closed"""
        manager = self.make_manager()
        self.assertEqual(manager.modal_mode, CLOSED)
        self.assertTrue(manager.open_create())
        self.assertEqual(manager.modal_mode, CREATING)
        manager.close_modal()
        record = manager.items[0]
        manager.open_edit(record['id'])
        self.assertEqual(manager.modal_mode, EDITING)
        self.assertEqual(manager.modal['editing'], record)
        manager.close_modal()
        self.assertFalse(manager.modal['open'])

    def test_open_create_blocked_by_selection(self):
        """Test create cannot open while rows are selected"""
        manager = self.make_manager()
        manager.select(manager.items[0]['id'])
        self.assertFalse(manager.open_create())
        self.assertEqual(manager.modal_mode, CLOSED)

    def test_create_reloads_for_non_optimistic(self):
        """Test non-optimistic create reloads and closes the modal"""
        manager = self.make_manager()
        manager.open_create()
        result = manager.create({'name': 'Rye', 'status': 'Active'})
        self.assertTrue(result.success)
        self.assertEqual(len(manager.items), 4)
        self.assertEqual(manager.modal_mode, CLOSED)
        self.assertEqual(len(self.backend.requests_to('GET', NOTES_PATH)), 2)
        self.assertEqual(manager.drain_toasts()[-1]['level'], SUCCESS)

    def test_create_appends_for_optimistic(self):
        """Test optimistic create appends without reloading"""
        manager = self.make_manager('test-notes-optimistic')
        manager.create({'name': 'Rye', 'status': 'Active'})
        self.assertEqual(manager.items[-1]['name'], 'Rye')
        self.assertEqual(manager.items[-1]['display_id'], 4)
        self.assertEqual(len(self.backend.requests_to('GET', NOTES_PATH)), 1)

    def test_optimistic_update_patches_in_place(self):
        """Test optimistic update replaces the record and keeps its display id"""
        manager = self.make_manager('test-notes-optimistic')
        target = manager.items[1]
        manager.update(target['id'], {'name': 'Oat Loaf'}, partial=True)
        updated = manager.find(target['id'])
        self.assertEqual(updated['name'], 'Oat Loaf')
        self.assertEqual(updated['display_id'], 2)

    def test_status_only_update_reply_patches_payload(self):
        """Test an update reply without a record patches the submitted fields"""
        manager = self.make_manager('test-notes-optimistic')
        target = manager.items[0]
        self.backend.route('PATCH', f"{NOTES_PATH}/{target['id']}",
                           lambda params, body: (200, {'status': True, 'message': 'Updated'}))
        result = manager.update(target['id'], {'name': 'Rye', 'status': 'Inactive'}, partial=True)
        self.assertTrue(result.success)
        updated = manager.find(target['id'])
        self.assertEqual(updated['name'], 'Rye')
        self.assertEqual(updated['status'], 'Inactive')
        self.assertNotIn('message', updated)
        self.assertEqual(updated['display_id'], 1)

    def test_status_only_create_reply_reloads(self):
        """Test a create reply without a record reads the list back instead of appending"""
        manager = self.make_manager('test-notes-optimistic')

        def create(params, body):
            self.backend.seed(NOTES_PATH, [body])
            return 200, {'status': True, 'message': 'Created'}

        self.backend.route('POST', NOTES_PATH, create)
        result = manager.create({'name': 'Scone', 'status': 'Active'})
        self.assertTrue(result.success)
        self.assertIsNone(result.data)
        self.assertEqual(len(manager.items), 4)
        self.assertTrue(all(item['id'] for item in manager.items))
        self.assertEqual(manager.items[-1]['name'], 'Scone')
        self.assertEqual(len(self.backend.requests_to('GET', NOTES_PATH)), 2)

    def test_optimistic_create_on_unloaded_list(self):
        """Test creating before the first load reads the whole list back"""
        resource = get_resource('test-notes-optimistic')
        manager = RecordManager(resource, RecordService(resource, self.api))
        manager.create({'name': 'Rye', 'status': 'Active'})
        self.assertTrue(manager.loaded)
        self.assertEqual(len(manager.items), 4)
        self.assertEqual(manager.items[-1]['name'], 'Rye')

    def test_failed_create_keeps_modal_open(self):
        """Test a failed create shows an error toast and leaves the modal open"""
        manager = self.make_manager()
        manager.open_create()
        self.backend.fail('POST', NOTES_PATH, status_code=422, message='Name already exists')
        result = manager.create({'name': 'Bread', 'status': 'Active'})
        self.assertFalse(result.success)
        self.assertEqual(manager.modal_mode, CREATING)
        self.assertEqual(manager.drain_toasts(), [{'level': ERROR, 'message': 'Name already exists'}])

    def test_select_all_visible_then_delete(self):
        """Test deleting all filtered rows leaves the others untouched"""
        manager = self.make_manager()
        manager.set_search_term('bread')
        manager.select_all(True)
        self.assertEqual(len(manager.selected_ids), 2)
        self.assertTrue(manager.all_selected)
        result = manager.delete_selected()
        self.assertTrue(result.success)
        self.assertEqual(result.data['deleted'], 2)
        manager.reset_filters()
        self.assertEqual([r['name'] for r in manager.items], ['Butter'])
        self.assertEqual(manager.selected_ids, set())

    def test_bulk_delete_aggregates_failures(self):
        """Test a failure partway is reported and the reload shows what remains"""
        manager = self.make_manager()
        ids = [r['id'] for r in manager.items]
        manager.select_all(True)
        self.backend.fail('DELETE', f'{NOTES_PATH}/{ids[1]}', message='Locked')
        result = manager.delete_selected()
        self.assertFalse(result.success)
        self.assertEqual(result.data['requested'], 3)
        self.assertEqual(result.data['deleted'], 2)
        self.assertEqual(result.data['failed'], [{'id': ids[1], 'message': 'Locked'}])
        self.assertEqual([r['id'] for r in manager.items], [ids[1]])

    def test_perform_patches_optimistic_record(self):
        """Test an extra action patches the record in place for optimistic resources"""
        manager = self.make_manager('test-notes-optimistic')
        target = manager.items[0]
        calls = []
        result = manager.perform(target['id'], lambda remote_id: calls.append(remote_id) or Result.ok(),
                                 'Archived.', changes={'status': 'Inactive'})
        self.assertTrue(result.success)
        self.assertEqual(calls, [target['id']])
        self.assertEqual(manager.find(target['id'])['status'], 'Inactive')
        self.assertEqual(manager.drain_toasts(), [{'level': SUCCESS, 'message': 'Archived.'}])
        self.assertEqual(len(self.backend.requests_to('GET', NOTES_PATH)), 1)

    def test_perform_failure_and_unsaved_record(self):
        """Test failed actions toast and records without a backend id are refused"""
        manager = self.make_manager()
        result = manager.perform(manager.items[0]['id'], lambda remote_id: Result.fail('Nope'), 'Done.')
        self.assertFalse(result.success)
        self.assertEqual(manager.drain_toasts(), [{'level': ERROR, 'message': 'Nope'}])

        manager.items.append({'id': 'draft', 'display_id': 4, 'name': 'Draft'})
        manager.resource.remote_id = lambda record: None if record['id'] == 'draft' else record['id']
        self.addCleanup(delattr, manager.resource, 'remote_id')
        result = manager.perform('draft', lambda remote_id: self.fail('call must not run'), 'Done.')
        self.assertFalse(result.success)
        self.assertIn('not saved yet', result.message)

    def test_state_round_trip(self):
        """Test manager state survives serialization to the session"""
        manager = self.make_manager()
        manager.set_search_term('oat')
        manager.select(manager.items[1]['id'])
        restored = RecordManager(manager.resource, manager.service, state=manager.to_state())
        self.assertEqual(restored.search_term, 'oat')
        self.assertEqual(restored.selected_ids, manager.selected_ids)
        self.assertTrue(restored.loaded)


class AuthAPITests(TestCase):
    """Test the dashboard auth endpoints"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backend.add_user(pin='1234')
        self.client = AuthenticatedAPIClient()

    def test_login_via_api(self):
        """Test logging in returns the public session without the token"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'manager@test.com', 'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertTrue(response.data['data']['is_authenticated'])
        self.assertNotIn('token', response.data['data'])

    def test_login_wrong_password(self):
        """Test a rejected login answers 401 in the envelope"""
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'manager@test.com', 'password': 'nope',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_login_validation(self):
        """Test missing fields answer 400"""
        response = self.client.post('/api/v1/auth/login/', {'email': 'not-an-email'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Validation error')
        self.assertIn('password', response.data['data'])

    def test_pin_login(self):
        """Test manager PIN login"""
        response = self.client.post('/api/v1/auth/pin-login/', {'pin': '1234'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        bad = self.client.post('/api/v1/auth/pin-login/', {'pin': '12'}, format='json')
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_requires_session(self):
        """Test anonymous requests are rejected"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Authentication required')

    def test_me_and_logout(self):
        """Test me reflects the session and logout clears it"""
        self.client.authenticate_tenant(self.backend)
        response = self.client.get('/api/v1/auth/me/', {'refresh': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['user']['email'], 'manager@test.com')

        response = self.client.post('/api/v1/auth/logout/', format='json')
        self.assertEqual(response.data['data']['state'], CLEARED)
        self.assertEqual(self.client.get('/api/v1/auth/me/').status_code, status.HTTP_403_FORBIDDEN)


class ResourceAPITests(TestCase):
    """Test the generic resource endpoints"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.notes = self.backend.seed(NOTES_PATH, [
            note('Bread'), note('Oat Bread', is_active=False), note('Butter'),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/test-notes/'

    def test_resource_index(self):
        """Test registered resources are described"""
        response = self.client.get('/api/v1/resources/')
        names = [r['name'] for r in response.data['data']]
        self.assertIn('test-notes', names)

    def test_list_auto_loads_and_filters(self):
        """Test the first visit loads; query params search and filter"""
        response = self.client.get(self.url, {'search': 'bread', 'status': 'Active'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual([r['name'] for r in data['items']], ['Bread'])
        self.assertEqual(data['total'], 3)
        self.assertEqual(data['filter_options']['status'], ['Active', 'Inactive'])

        # Filters persist between requests, no reload on the second visit
        response = self.client.get(self.url)
        self.assertEqual(response.data['data']['filtered_count'], 1)
        self.assertEqual(len(self.backend.requests_to('GET', NOTES_PATH)), 1)

        response = self.client.get(self.url, {'status': 'all', 'search': ''})
        self.assertEqual(response.data['data']['filtered_count'], 3)

    def test_invalid_filter_value(self):
        """Test unknown filter values answer 400"""
        response = self.client.get(self.url, {'status': 'Deleted'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_unknown_resource(self):
        """Test unknown resource names answer 404"""
        response = self.client.get('/api/v1/resources/nothing-here/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Unknown resource: nothing-here')

    def test_create_via_api(self):
        """Test creating a record via API"""
        response = self.client.post(self.url, {'name': 'Rye', 'status': 'Active'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['record']['name'], 'Rye')
        self.assertEqual(response.data['data']['state']['total'], 4)
        self.assertEqual(response.data['data']['state']['toasts'][-1]['level'], SUCCESS)

    def test_optimistic_create_before_first_visit(self):
        """Test the list state after a create holds every backend record"""
        response = self.client.post('/api/v1/resources/test-notes-optimistic/', {'name': 'Rye'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        state = response.data['data']['state']
        self.assertEqual(state['total'], 4)
        self.assertEqual(state['items'][-1]['name'], 'Rye')
        self.assertTrue(state['loaded'])
        self.assertNotIn('loading', state)
        self.assertNotIn('action_loading', state)

    def test_create_validation(self):
        """Test invalid payloads never reach the backend"""
        response = self.client.post(self.url, {'name': 'Rye', 'priority': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('priority', response.data['data'])
        self.assertEqual(self.backend.requests_to('POST', NOTES_PATH), [])

    def test_create_remote_failure(self):
        """Test a failed backend call answers 502 with an error toast"""
        self.backend.fail('POST', NOTES_PATH, message='Quota exceeded')
        response = self.client.post(self.url, {'name': 'Rye'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['message'], 'Quota exceeded')

    def test_detail_update_delete(self):
        """Test retrieve, patch and delete a single record"""
        record_id = self.notes[0]['_id']
        url = f'{self.url}{record_id}/'
        response = self.client.get(url)
        self.assertEqual(response.data['data']['name'], 'Bread')

        response = self.client.patch(url, {'status': 'Inactive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(self.backend.collections[NOTES_PATH][record_id]['isActive'])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn(record_id, self.backend.collections[NOTES_PATH])
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_selection_and_bulk_delete(self):
        """Test selecting visible rows and bulk deleting them"""
        self.client.get(self.url, {'search': 'bread'})
        response = self.client.post(f'{self.url}selection/', {'all': True}, format='json')
        self.assertEqual(len(response.data['data']['selected_ids']), 2)

        response = self.client.post(f'{self.url}bulk-delete/', format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['record']['deleted'], 2)
        self.assertEqual([o['name'] for o in self.backend.objects(NOTES_PATH)], ['Butter'])

    def test_bulk_delete_without_selection(self):
        """Test bulk delete with nothing selected answers 400"""
        self.client.get(self.url)
        response = self.client.post(f'{self.url}bulk-delete/', format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'No items selected')

    def test_select_unknown_id(self):
        """Test selecting an unknown id answers 400"""
        self.client.get(self.url)
        response = self.client.post(f'{self.url}selection/', {'ids': ['missing']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_modal_actions(self):
        """Test opening create/edit and closing the modal"""
        self.client.get(self.url)
        response = self.client.post(f'{self.url}modal/', {'action': 'edit', 'id': self.notes[1]['_id']}, format='json')
        modal = response.data['data']['modal']
        self.assertEqual(modal['mode'], EDITING)
        self.assertEqual(modal['editing']['name'], 'Oat Bread')

        response = self.client.post(f'{self.url}modal/', {'action': 'close'}, format='json')
        self.assertFalse(response.data['data']['modal']['open'])

        self.client.post(f'{self.url}selection/', {'ids': [self.notes[0]['_id']]}, format='json')
        response = self.client.post(f'{self.url}modal/', {'action': 'create'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_load_failure(self):
        """Test explicit reload failure answers 502 and keeps items"""
        self.client.get(self.url)
        self.backend.fail('GET', NOTES_PATH, message='Timeout')
        response = self.client.post(f'{self.url}load/', format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['data']['total'], 3)
        self.assertEqual(response.data['data']['toasts'][0]['level'], ERROR)

    def test_export_csv(self):
        """Test CSV export of the filtered rows"""
        self.client.get(self.url, {'status': 'Active'})
        response = self.client.get(f'{self.url}export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        lines = response.content.decode().strip().splitlines()
        self.assertEqual(lines[0], 'display_id,name,status')
        self.assertEqual(len(lines), 3)

    def test_anonymous_rejected(self):
        """Test resource endpoints require a tenant session"""
        anonymous = AuthenticatedAPIClient()
        self.assertEqual(anonymous.get(self.url).status_code, status.HTTP_403_FORBIDDEN)


class RegistryTests(TestCase):
    """Test resource registry lookups"""

    def test_unknown_resource_raises(self):
        with self.assertRaises(UnknownResource):
            get_resource('missing')

    def test_to_payload_maps_status(self):
        """Test status becomes isActive unless mapped explicitly"""
        payload = get_resource('test-notes').to_payload({'name': 'x', 'status': 'Inactive'})
        self.assertEqual(payload, {'name': 'x', 'isActive': False})


class StartupTests(TestCase):
    """Test the project boots in a fresh interpreter"""

    def test_setup_resolves_permission_class(self):
        """Test django.setup() and DRF's default permission import cleanly"""
        code = (
            'import django\n'
            'django.setup()\n'
            'from rest_framework.settings import api_settings\n'
            'print(api_settings.DEFAULT_PERMISSION_CLASSES[0].__name__)\n'
        )
        env = dict(os.environ, DJANGO_SETTINGS_MODULE='dashboard.config.settings')
        result = subprocess.run(
            [sys.executable, '-c', code],
            cwd=str(settings.BASE_DIR.parent), env=env, capture_output=True, text=True, timeout=60,
        )
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(result.stdout.strip(), 'HasTenantSession')
