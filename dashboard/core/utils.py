"""Request helpers: tenant session, API client and per-resource management state"""
from rest_framework import status
from rest_framework.exceptions import NotFound

from .client import TenantAPIClient
from .envelope import Result, envelope_response
from .exceptions import UnknownResource
from .management import RecordManager
from .services import RecordService
from .session import TenantSession

MANAGERS_SESSION_KEY = 'managers'


def get_tenant_session(request):
    """The TenantSession for this request, loaded once from the Django session"""
    tenant_session = getattr(request, '_tenant_session', None)
    if tenant_session is None:
        tenant_session = TenantSession.init(request.session)
        request._tenant_session = tenant_session
    return tenant_session


def save_tenant_session(request, tenant_session):
    tenant_session.save(request.session)
    request._tenant_session = tenant_session


def get_client(request):
    return TenantAPIClient(get_tenant_session(request))


def state_key(resource, scope=None):
    return f"{resource.name}@{scope}" if scope else resource.name


def get_manager(request, resource, scope=None, client=None):
    """Rebuild the RecordManager for a resource from the Django session"""
    client = client or get_client(request)
    backend_scope = None
    if resource.scoped:
        if not scope:
            raise UnknownResource(f"{resource.name} requires a scope")
        backend_scope = resource.resolve_scope(client, scope)
        if not backend_scope:
            raise UnknownResource(f"Could not resolve '{scope}' for {resource.name}")
    service = RecordService(resource, client, scope=backend_scope)
    state = request.session.get(MANAGERS_SESSION_KEY, {}).get(state_key(resource, scope))
    return RecordManager(resource, service, state=state)


def save_manager(request, manager, scope=None):
    managers = request.session.get(MANAGERS_SESSION_KEY, {})
    managers[state_key(manager.resource, scope)] = manager.to_state()
    request.session[MANAGERS_SESSION_KEY] = managers
    request.session.modified = True


def clear_managers(request):
    request.session.pop(MANAGERS_SESSION_KEY, None)


def require_record(manager, pk):
    """The record with id pk, loading the list first if needed"""
    if not manager.loaded:
        manager.load()
    record = manager.find(pk)
    if record is None:
        raise NotFound(f"{manager.resource.label or manager.resource.name} {pk} not found")
    return record


def action_response(request, manager, result, scope=None, success_status=status.HTTP_200_OK):
    """Envelope for a mutating action: the affected record plus the refreshed list state"""
    save_manager(request, manager, scope)
    body = Result(
        success=result.success,
        data={'record': result.data, 'state': manager.snapshot()},
        message=result.message,
    )
    return envelope_response(body, success_status if result.success else status.HTTP_502_BAD_GATEWAY)
