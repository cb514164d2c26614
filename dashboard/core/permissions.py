from rest_framework.permissions import BasePermission


class HasTenantSession(BasePermission):
    """Allows access only when the Django session holds an authenticated tenant session"""
    message = 'Authentication required'

    def has_permission(self, request, view):
        # DRF imports this class while rest_framework.views is still loading,
        # so the request helpers (which import core.exceptions) load lazily
        from .utils import get_tenant_session
        return get_tenant_session(request).is_authenticated
