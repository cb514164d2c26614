from rest_framework import status
from rest_framework.decorators import api_view

from dashboard.core.envelope import envelope_response
from dashboard.core.exceptions import InvalidAction
from dashboard.core.registry import get_resource
from dashboard.core.utils import action_response, get_client, get_manager, require_record

from .serializers import INCLUDE_FLAGS, BackupRunSerializer, BackupSettingsSerializer
from .services import fetch_settings, restore_backup, update_settings


def _remote_status(result):
    return status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY


@api_view(['GET', 'PUT'])
def backup_settings(request):
    """Retrieve or update the automatic backup settings"""
    client = get_client(request)
    if request.method == 'GET':
        result = fetch_settings(client)
        return envelope_response(result, _remote_status(result))

    serializer = BackupSettingsSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    result = update_settings(client, serializer.validated_data)
    return envelope_response(result, _remote_status(result))


@api_view(['POST'])
def backup_run(request):
    """Create a manual backup.

    Without an explicit `includes` list the data sets come from the
    include_* flags of the saved settings; at least one must be selected.
    """
    serializer = BackupRunSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    client = get_client(request)

    if not data.get('includes'):
        settings_result = fetch_settings(client)
        if not settings_result.success:
            return envelope_response(settings_result, status.HTTP_502_BAD_GATEWAY)
        data['includes'] = [label for flag, label in INCLUDE_FLAGS if settings_result.data.get(flag)]
    if not data['includes']:
        raise InvalidAction('Please select at least one data type to backup')

    manager = get_manager(request, get_resource('backups'), client=client)
    result = manager.create(data)
    if result.success:
        result.message = f"Backup created successfully with {len(data['includes'])} data type(s)!"
    return action_response(request, manager, result, success_status=status.HTTP_201_CREATED)


@api_view(['POST'])
def backup_restore(request, pk):
    """Restore a completed backup, overwriting current data"""
    client = get_client(request)
    manager = get_manager(request, get_resource('backups'), client=client)
    record = require_record(manager, pk)
    if record.get('status') != 'completed':
        raise InvalidAction('Only completed backups can be restored')
    result = manager.perform(pk, lambda remote_id: restore_backup(client, remote_id),
                             'Backup restored successfully!')
    return action_response(request, manager, result)
