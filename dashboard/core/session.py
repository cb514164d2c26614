"""
Explicit tenant session.

Replaces the browser-global auth context: a TenantSession is built from the
Django session at the start of a request and handed to every API client.
Lifecycle: anonymous (init) -> authenticated (login) -> cleared (logout).
"""
import logging

from django.conf import settings

logger = logging.getLogger(__name__)

ANONYMOUS = 'anonymous'
AUTHENTICATED = 'authenticated'
CLEARED = 'cleared'

SESSION_STATES = (ANONYMOUS, AUTHENTICATED, CLEARED)


class TenantSession:
    SESSION_KEY = 'tenant_session'

    def __init__(self, token=None, tenant_slug=None, tenant_id=None, user=None, state=ANONYMOUS):
        if state not in SESSION_STATES:
            raise ValueError(f"Unknown session state: {state}")
        self.token = token
        self.tenant_slug = tenant_slug
        self.tenant_id = tenant_id
        self.user = user or {}
        self.state = state

    @classmethod
    def init(cls, storage=None):
        """Load the session from a Django session mapping, anonymous when absent"""
        data = storage.get(cls.SESSION_KEY) if storage is not None else None
        if not data:
            return cls()
        return cls(
            token=data.get('token'),
            tenant_slug=data.get('tenant_slug'),
            tenant_id=data.get('tenant_id'),
            user=data.get('user'),
            state=data.get('state', ANONYMOUS),
        )

    @property
    def is_authenticated(self):
        return self.state == AUTHENTICATED and bool(self.token)

    @property
    def tenant_header(self):
        """Value sent as x-tenant-id: tenant id, then slug, then the configured default"""
        return (
            self.tenant_id
            or self.tenant_slug
            or getattr(settings, 'DEFAULT_TENANT_ID', '')
            or settings.DEFAULT_TENANT_SLUG
        )

    def authenticate(self, token, user=None, tenant_slug=None, tenant_id=None):
        if not token:
            raise ValueError("Cannot authenticate a session without a token")
        self.token = token
        self.user = user or {}
        if tenant_slug:
            self.tenant_slug = tenant_slug
        if tenant_id:
            self.tenant_id = tenant_id
        self.state = AUTHENTICATED
        logger.info(f"Tenant session authenticated for tenant {self.tenant_header}")

    def clear(self):
        self.token = None
        self.user = {}
        self.state = CLEARED

    def to_dict(self):
        return {
            'token': self.token,
            'tenant_slug': self.tenant_slug,
            'tenant_id': self.tenant_id,
            'user': self.user,
            'state': self.state,
        }

    def save(self, storage):
        storage[self.SESSION_KEY] = self.to_dict()

    def public_dict(self):
        """Session info safe to send to the browser (no token)"""
        return {
            'state': self.state,
            'is_authenticated': self.is_authenticated,
            'tenant': self.tenant_header,
            'user': self.user,
        }

    def __repr__(self):
        return f"<TenantSession {self.state} tenant={self.tenant_header}>"
