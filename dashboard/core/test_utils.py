"""
Test utilities: an in-memory tenant API mounted as a requests transport adapter,
factories for backend objects and an API client that logs in through it
"""
import json
import random
import string
from unittest import mock
from urllib.parse import parse_qsl, urlsplit

import requests
from requests.adapters import BaseAdapter
from django.core.cache import cache
from rest_framework.test import APIClient

from dashboard.core.client import get_api_base_url

AUTH_PREFIX = '/t/auth/'


class FakeTenantBackend(BaseAdapter):
    """
    Serves collections of JSON objects the way the tenant API does:
    server-assigned `_id`s, {"status", "message", "result"} envelopes,
    PUT/PATCH merge, DELETE, bearer-token auth and injectable failures.
    Extra endpoints (stats, status changes, ...) are registered with route().
    """

    def __init__(self, list_style='result'):
        super().__init__()
        self.collections = {}
        self.routes = {}
        self.failures = []
        self.requests = []
        self.users = {}
        self.pins = {}
        self.tokens = {}
        self.list_style = list_style
        self._counter = 0

    # ------------------------------------------------------------------
    # Setup helpers
    # ------------------------------------------------------------------

    def install(self, test_case):
        """Route every TenantAPIClient created during the test to this backend"""
        backend = self
        # Cached lookups from earlier tests point at another backend's ids
        cache.clear()

        def build_session():
            session = requests.Session()
            session.mount(get_api_base_url(), backend)
            return session

        patcher = mock.patch('dashboard.core.client.build_http_session', side_effect=build_session)
        patcher.start()
        test_case.addCleanup(patcher.stop)
        return self

    def next_id(self):
        self._counter += 1
        return f'{self._counter:024x}'

    def add_collection(self, path):
        return self.collections.setdefault(path, {})

    def seed(self, path, objects):
        """Store objects under a collection path, assigning `_id`s; returns the stored copies"""
        collection = self.add_collection(path)
        stored = []
        for obj in objects:
            obj = dict(obj)
            obj.setdefault('_id', self.next_id())
            collection[obj['_id']] = obj
            stored.append(obj)
        return stored

    def objects(self, path):
        return list(self.collections.get(path, {}).values())

    def route(self, method, path, handler):
        """handler(params, body) -> (status_code, payload)"""
        self.routes[(method.upper(), path)] = handler

    def add_user(self, email='manager@test.com', password='testpass123', pin=None, tenant=None, **extra):
        user = {
            '_id': self.next_id(),
            'email': email,
            'name': extra.pop('name', 'Test Manager'),
            'role': extra.pop('role', 'manager'),
            'tenant': tenant or {'_id': 'tenant-0001', 'slug': 'extraction-testt'},
        }
        user.update(extra)
        self.users[email] = (password, user)
        if pin:
            self.pins[pin] = user
        return user

    def fail(self, method, path, status_code=500, message='Internal server error', times=None, network=False):
        """Make matching requests fail; path matches exactly or as a prefix ending in '*'"""
        self.failures.append({
            'method': method.upper(),
            'path': path,
            'status_code': status_code,
            'message': message,
            'times': times,
            'network': network,
        })

    def requests_to(self, method, path):
        return [r for r in self.requests if r['method'] == method.upper() and r['path'] == path]

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def send(self, request, **kwargs):
        parts = urlsplit(request.url)
        path = parts.path
        params = dict(parse_qsl(parts.query))
        body = json.loads(request.body) if request.body else None
        self.requests.append({
            'method': request.method,
            'path': path,
            'params': params,
            'body': body,
            'headers': dict(request.headers),
        })

        failure = self._match_failure(request.method, path)
        if failure:
            if failure['network']:
                raise requests.ConnectionError(f"Connection refused: {path}")
            return self._response(request, failure['status_code'], {
                'status': False, 'message': failure['message'],
            })

        status_code, payload = self.handle(request.method, path, params, body, request.headers)
        return self._response(request, status_code, payload)

    def close(self):
        pass

    def _match_failure(self, method, path):
        for failure in self.failures:
            if failure['method'] != method:
                continue
            pattern = failure['path']
            matched = path.startswith(pattern[:-1]) if pattern.endswith('*') else path == pattern
            if not matched:
                continue
            if failure['times'] is not None:
                failure['times'] -= 1
                if failure['times'] <= 0:
                    self.failures.remove(failure)
            return failure
        return None

    @staticmethod
    def _response(request, status_code, payload):
        response = requests.Response()
        response.status_code = status_code
        response._content = json.dumps(payload).encode('utf-8') if payload is not None else b''
        response.headers['Content-Type'] = 'application/json'
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        return response

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def handle(self, method, path, params, body, headers):
        if path.startswith(AUTH_PREFIX):
            return self._handle_auth(method, path, body, headers)

        if self._user_for(headers) is None:
            return 401, {'status': False, 'message': 'Unauthorized'}

        handler = self.routes.get((method, path))
        if handler:
            return handler(params, body)

        collection_path, record_id = self._split(path)
        if collection_path is None:
            return 404, {'status': False, 'message': f'Cannot {method} {path}'}
        collection = self.collections[collection_path]

        if record_id is None:
            if method == 'GET':
                return 200, self._list_body(list(collection.values()))
            if method == 'POST':
                obj = dict(body or {})
                obj['_id'] = self.next_id()
                collection[obj['_id']] = obj
                return 201, {'status': True, 'message': 'Created successfully', 'result': obj}
            return 405, {'status': False, 'message': 'Method not allowed'}

        obj = collection.get(record_id)
        if obj is None:
            return 404, {'status': False, 'message': 'Record not found'}
        if method == 'GET':
            return 200, {'status': True, 'result': obj}
        if method in ('PUT', 'PATCH'):
            obj.update(body or {})
            obj['_id'] = record_id
            return 200, {'status': True, 'message': 'Updated successfully', 'result': obj}
        if method == 'DELETE':
            del collection[record_id]
            return 200, {'status': True, 'message': 'Deleted successfully'}
        return 405, {'status': False, 'message': 'Method not allowed'}

    def _split(self, path):
        path = path.rstrip('/')
        if path in self.collections:
            return path, None
        head, _, tail = path.rpartition('/')
        if head in self.collections and tail:
            return head, tail
        return None, None

    def _list_body(self, objects):
        if self.list_style == 'bare':
            return objects
        if self.list_style == 'paginated':
            return {'status': True, 'result': {'items': objects, 'total': len(objects)}}
        return {'status': True, self.list_style: objects}

    def _user_for(self, headers):
        auth = headers.get('Authorization') or ''
        if not auth.startswith('Bearer '):
            return None
        return self.tokens.get(auth[len('Bearer '):])

    def _issue_token(self, user):
        token = 'tok_' + ''.join(random.choices(string.ascii_letters + string.digits, k=24))
        self.tokens[token] = user
        return {'status': True, 'message': 'Login successful', 'result': {'token': token, 'user': user}}

    def _handle_auth(self, method, path, body, headers):
        body = body or {}
        if method == 'POST' and path == '/t/auth/login':
            password, user = self.users.get(body.get('email'), (None, None))
            if user is None or password != body.get('password'):
                return 401, {'status': False, 'message': 'Invalid email or password'}
            return 200, self._issue_token(user)
        if method == 'POST' and path == '/t/auth/pin-login':
            user = self.pins.get(body.get('pin'))
            if user is None:
                return 401, {'status': False, 'message': 'Invalid PIN'}
            return 200, self._issue_token(user)
        if method == 'POST' and path == '/t/auth/logout':
            auth = headers.get('Authorization') or ''
            self.tokens.pop(auth[len('Bearer '):], None)
            return 200, {'status': True, 'message': 'Logged out'}
        if method == 'GET' and path == '/t/auth/me':
            user = self._user_for(headers)
            if user is None:
                return 401, {'status': False, 'message': 'Unauthorized'}
            return 200, {'status': True, 'result': {'user': user}}
        return 404, {'status': False, 'message': f'Cannot {method} {path}'}


class TestDataFactory:
    """Factory class for backend objects as the tenant API returns them"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def ingredient(name=None, sku=None, unit='kg', is_active=True, **extra):
        """Ingredient as stored at /t/catalog/ingredients"""
        if not name:
            name = f'Ingredient_{TestDataFactory.random_string(6)}'
        obj = {
            'name': name,
            'sku': sku or f'SKU-{TestDataFactory.random_string(6).upper()}',
            'uom': unit,
            'isActive': is_active,
            'description': f'Test ingredient {name}',
            'minThreshold': 5,
            'costPerUom': 2.5,
            'priority': 1,
        }
        obj.update(extra)
        return obj

    @staticmethod
    def category(name=None, is_active=True, sort_index=0, **extra):
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        obj = {'name': name, 'description': f'Test category {name}', 'isActive': is_active, 'sortIndex': sort_index}
        obj.update(extra)
        return obj

    @staticmethod
    def recipe_variation(name=None, variation_type='size', **extra):
        if not name:
            name = f'Variation_{TestDataFactory.random_string(6)}'
        obj = {
            'name': name,
            'type': variation_type,
            'description': '',
            'sizeMultiplier': 1.0,
            'baseCostAdjustment': 0,
            'ingredients': [],
            'isActive': True,
        }
        obj.update(extra)
        return obj

    @staticmethod
    def inventory_item(name=None, quantity=10, reorder_point=5, item_type='stock', **extra):
        if not name:
            name = f'Item_{TestDataFactory.random_string(6)}'
        obj = {
            'name': name,
            'sku': f'INV-{TestDataFactory.random_string(6).upper()}',
            'type': item_type,
            'baseUnit': 'pcs',
            'quantity': quantity,
            'reorderPoint': reorder_point,
            'isActive': True,
        }
        obj.update(extra)
        return obj

    @staticmethod
    def branch(name=None, code=None, city='Lahore', status='active', **extra):
        if not name:
            name = f'Branch_{TestDataFactory.random_string(6)}'
        obj = {
            'name': name,
            'code': code or TestDataFactory.random_string(4).upper(),
            'address': {'line': f'Test Address {name}', 'city': city, 'country': 'PK'},
            'status': status,
            'currency': 'PKR',
            'tax': {'mode': 'exclusive', 'rate': 16},
            'isDefault': False,
        }
        obj.update(extra)
        return obj

    @staticmethod
    def staff_member(name=None, email=None, status='active', branch_id=None, **extra):
        if not name:
            name = f'Staff_{TestDataFactory.random_string(6)}'
        obj = {
            'fullName': name,
            'email': email or f'{name.lower()}@test.com',
            'phone': '5550100',
            'position': 'Cashier',
            'roles': ['cashier'],
            'status': status,
            'branchIds': [branch_id] if branch_id else [],
        }
        obj.update(extra)
        return obj

    @staticmethod
    def vendor(company_name=None, **extra):
        if not company_name:
            company_name = f'Vendor_{TestDataFactory.random_string(6)}'
        obj = {
            'companyName': company_name,
            'name': 'Contact Person',
            'email': f'{company_name.lower()}@vendor.com',
            'phone': '5550199',
            'address': 'Vendor Street 1',
            'isActive': True,
        }
        obj.update(extra)
        return obj

    @staticmethod
    def payment_method(name=None, payment_type='Cash', tax_percentage=0, **extra):
        if not name:
            name = f'Method_{TestDataFactory.random_string(6)}'
        obj = {
            'name': name,
            'paymentType': payment_type,
            'taxType': 'GST',
            'taxPercentage': tax_percentage,
            'isActive': True,
        }
        obj.update(extra)
        return obj

    @staticmethod
    def menu_item(name=None, price=10.0, category_id=None, **extra):
        if not name:
            name = f'MenuItem_{TestDataFactory.random_string(6)}'
        obj = {'name': name, 'price': price, 'categoryId': category_id, 'isActive': True}
        obj.update(extra)
        return obj

    @staticmethod
    def order(lines=None, payment_method_id=None, branch_id=None, **extra):
        """Order with lines of {menuItemId, quantity, ingredients: [{ingredientId, quantity}]}"""
        obj = {
            'orderNumber': f'ORD-{TestDataFactory.random_string(6).upper()}',
            'items': lines or [],
            'paymentMethodId': payment_method_id,
            'branchId': branch_id,
            'status': 'completed',
        }
        obj.update(extra)
        return obj

    @staticmethod
    def backup(status='completed', **extra):
        obj = {
            'name': f'backup-{TestDataFactory.random_string(6).lower()}',
            'status': status,
            'type': 'manual',
            'size': 2048,
            'createdAt': '2024-01-01T00:00:00Z',
        }
        obj.update(extra)
        return obj


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_tenant(self, backend, email='manager@test.com', password='testpass123', **user_extra):
        """Register a user on the fake backend and log in through the dashboard"""
        if email not in backend.users:
            backend.add_user(email=email, password=password, **user_extra)
        response = self.post('/api/v1/auth/login/', {'email': email, 'password': password}, format='json')
        assert response.status_code == 200, response.content
        return self

    def logout(self):
        """Log out through the dashboard and drop the session cookie"""
        self.post('/api/v1/auth/logout/', format='json')
        super().logout()
