"""
HTTP client for the remote tenant API.
Every call is a single request: no retries, no caching, no idempotency keys.
"""
import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .envelope import extract_message
from .exceptions import RequestError

logger = logging.getLogger(__name__)


def build_http_session() -> requests.Session:
    """Create the underlying requests session (tests mount a fake transport here)"""
    return requests.Session()


def get_api_base_url() -> str:
    return settings.TENANT_API_BASE_URL.rstrip('/')


class TenantAPIClient:
    """Sends requests to the tenant API on behalf of one TenantSession"""

    def __init__(self, session, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 http: Optional[requests.Session] = None):
        self.session = session
        self.base_url = (base_url or get_api_base_url()).rstrip('/')
        self.timeout = timeout or settings.TENANT_API_TIMEOUT
        self.http = http or build_http_session()

    def build_headers(self) -> Dict[str, str]:
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'x-tenant-id': self.session.tenant_header,
        }
        if self.session.token:
            headers['Authorization'] = f'Bearer {self.session.token}'
        if self.session.tenant_id:
            headers['x-tenant-uuid'] = self.session.tenant_id
        return headers

    def build_url(self, path: str) -> str:
        if not path.startswith('/'):
            path = f'/{path}'
        return f'{self.base_url}{path}'

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                payload: Optional[Any] = None) -> Any:
        method = method.upper()
        url = self.build_url(path)
        clean_params = {k: v for k, v in (params or {}).items() if v not in (None, '')}

        try:
            response = self.http.request(
                method,
                url,
                params=clean_params or None,
                json=payload,
                headers=self.build_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Tenant API {method} {path} network error: {str(e)}")
            raise RequestError(f"Network error: {str(e)}") from e

        body = self._parse_body(response)

        if not response.ok:
            message = self._error_message(body, f"{method} {path} failed ({response.status_code})")
            logger.warning(f"Tenant API {method} {path} returned {response.status_code}: {message}")
            raise RequestError(message, status_code=response.status_code, payload=body)

        # Some endpoints answer 200 with {"success": false} or {"status": false}
        if isinstance(body, dict) and (body.get('success') is False or body.get('status') is False):
            message = self._error_message(body, f"{method} {path} failed")
            logger.warning(f"Tenant API {method} {path} reported failure: {message}")
            raise RequestError(message, status_code=response.status_code, payload=body)

        return body

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, payload=None, params=None):
        return self.request('POST', path, params=params, payload=payload)

    def put(self, path, payload=None):
        return self.request('PUT', path, payload=payload)

    def patch(self, path, payload=None):
        return self.request('PATCH', path, payload=payload)

    def delete(self, path):
        return self.request('DELETE', path)

    @staticmethod
    def _parse_body(response):
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    @staticmethod
    def _error_message(body, default):
        return extract_message(body, default)
