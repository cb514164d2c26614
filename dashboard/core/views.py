import csv
import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import MethodNotAllowed
from rest_framework.permissions import AllowAny

from . import auth
from .envelope import Result, envelope_response
from .exceptions import InvalidAction
from .registry import all_resources, get_resource
from .serializers import LoginSerializer, ModalSerializer, PinLoginSerializer, SelectionSerializer
from .utils import (
    action_response, clear_managers, get_client, get_manager, get_tenant_session, require_record, save_manager,
    save_tenant_session,
)

logger = logging.getLogger(__name__)


def _require_writable(resource, request):
    if not resource.writable:
        action = 'created' if request.method == 'POST' else 'edited'
        raise MethodNotAllowed(request.method, detail=f"{resource.label or resource.name} cannot be {action} here")


def _validated(resource, data, partial=False, instance=None):
    if resource.serializer_class is None:
        return dict(data)
    serializer = resource.serializer_class(instance, data=data, partial=partial)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# Auth views
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Email/password login against the tenant API"""
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    client = get_client(request)
    result = auth.login(
        client,
        serializer.validated_data['email'],
        serializer.validated_data['password'],
        tenant_slug=serializer.validated_data.get('tenant') or None,
    )
    if not result.success:
        return envelope_response(result, status.HTTP_401_UNAUTHORIZED)
    clear_managers(request)
    save_tenant_session(request, client.session)
    return envelope_response(result)


@api_view(['POST'])
@permission_classes([AllowAny])
def pin_login(request):
    """Manager PIN login"""
    serializer = PinLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    client = get_client(request)
    result = auth.pin_login(
        client,
        serializer.validated_data['pin'],
        branch_id=serializer.validated_data.get('branch_id') or None,
        tenant_slug=serializer.validated_data.get('tenant') or None,
    )
    if not result.success:
        return envelope_response(result, status.HTTP_401_UNAUTHORIZED)
    clear_managers(request)
    save_tenant_session(request, client.session)
    return envelope_response(result)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    """Logout; the local session is cleared even if the backend call fails"""
    client = get_client(request)
    result = auth.logout(client)
    # Drops list state and drafts along with the credentials
    request.session.flush()
    save_tenant_session(request, client.session)
    return envelope_response(result)


@api_view(['GET'])
def me(request):
    """Current session; ?refresh=true re-reads the profile from the tenant API"""
    tenant_session = get_tenant_session(request)
    if request.query_params.get('refresh') == 'true':
        result = auth.fetch_profile(get_client(request))
        if not result.success:
            return envelope_response(result, status.HTTP_502_BAD_GATEWAY)
        tenant_session.user = result.data
        save_tenant_session(request, tenant_session)
    return envelope_response(Result.ok(tenant_session.public_dict()))


# Resource views
@api_view(['GET'])
def resource_index(request):
    """List registered resources with their search fields and filters"""
    return envelope_response(Result.ok([r.describe() for r in all_resources()]))


@api_view(['GET', 'POST'])
def resource_list_create(request, resource, scope=None):
    """Filtered list state of a resource, or create a record"""
    res = get_resource(resource)
    manager = get_manager(request, res, scope)

    if request.method == 'GET':
        params = request.query_params
        if params.get('reset') == 'true':
            manager.reset_filters()
        try:
            if 'search' in params:
                manager.set_search_term(params.get('search'))
            for name in res.filter_choices:
                if name in params:
                    manager.set_filter(name, params.get(name))
        except ValueError as e:
            raise InvalidAction(str(e))
        if not manager.loaded or params.get('reload') == 'true':
            manager.load()
        save_manager(request, manager, scope)
        return envelope_response(Result.ok(manager.snapshot()))

    _require_writable(res, request)
    data = _validated(res, request.data)
    result = manager.create(data)
    return action_response(request, manager, result, scope, status.HTTP_201_CREATED)


@api_view(['POST'])
def resource_load(request, resource, scope=None):
    """Reload a resource list from the tenant API"""
    manager = get_manager(request, get_resource(resource), scope)
    result = manager.load()
    save_manager(request, manager, scope)
    body = Result(success=result.success, data=manager.snapshot(), message=result.message)
    return envelope_response(body, status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY)


@api_view(['POST'])
def resource_selection(request, resource, scope=None):
    """Toggle selected rows, select all visible rows, or clear the selection"""
    manager = get_manager(request, get_resource(resource), scope)
    serializer = SelectionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if data.get('clear'):
        manager.clear_selection()
    elif 'all' in data:
        manager.select_all(data['all'])
    else:
        try:
            for record_id in data['ids']:
                manager.select(record_id, data['checked'])
        except ValueError as e:
            raise InvalidAction(str(e))

    save_manager(request, manager, scope)
    return envelope_response(Result.ok(manager.snapshot()))


@api_view(['POST'])
def resource_bulk_delete(request, resource, scope=None):
    """Delete every selected record, one backend call per record"""
    manager = get_manager(request, get_resource(resource), scope)
    if not manager.selected_ids:
        raise InvalidAction('No items selected')
    result = manager.delete_selected()
    return action_response(request, manager, result, scope)


@api_view(['POST'])
def resource_modal(request, resource, scope=None):
    """Open the create/edit modal or close it"""
    manager = get_manager(request, get_resource(resource), scope)
    serializer = ModalSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    action = serializer.validated_data['action']

    if action == ModalSerializer.CREATE:
        if not manager.open_create():
            raise InvalidAction('Clear the selection before adding a new item.')
    elif action == ModalSerializer.EDIT:
        require_record(manager, serializer.validated_data['id'])
        manager.open_edit(serializer.validated_data['id'])
    else:
        manager.close_modal()

    save_manager(request, manager, scope)
    return envelope_response(Result.ok(manager.snapshot()))


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def resource_detail(request, resource, pk, scope=None):
    """Retrieve, update or delete a single record"""
    res = get_resource(resource)
    manager = get_manager(request, res, scope)
    record = require_record(manager, pk)

    if request.method == 'GET':
        save_manager(request, manager, scope)
        return envelope_response(Result.ok(record))

    if res.remote_id(record) is None:
        raise InvalidAction(f"{res.label or res.name} {pk} is not saved yet")

    if request.method in ('PUT', 'PATCH'):
        _require_writable(res, request)
        partial = request.method == 'PATCH'
        data = _validated(res, request.data, partial=partial, instance=record)
        result = manager.update(pk, data, partial=partial)
        return action_response(request, manager, result, scope)

    result = manager.delete(pk)
    return action_response(request, manager, result, scope)


@api_view(['GET'])
def resource_export(request, resource, scope=None):
    """CSV export of the currently visible (filtered) rows"""
    res = get_resource(resource)
    manager = get_manager(request, res, scope)
    if not manager.loaded:
        manager.load()
        save_manager(request, manager, scope)

    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{res.name}.csv"'
    writer = csv.writer(response)
    writer.writerow(res.export_columns)
    for record in manager.filtered_items:
        writer.writerow([_csv_value(record.get(column)) for column in res.export_columns])
    logger.info(f"Exported {len(manager.filtered_items)} {res.name} rows")
    return response


def _csv_value(value):
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v) for v in value)
    return value
