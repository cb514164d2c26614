from rest_framework.decorators import api_view

from dashboard.core.registry import get_resource
from dashboard.core.utils import action_response, get_client, get_manager, require_record

from .serializers import StaffPinSerializer, StaffStatusSerializer
from .services import set_pin, set_status


@api_view(['POST'])
def staff_status(request, pk):
    """Activate, deactivate or suspend a staff member"""
    serializer = StaffStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    new_status = serializer.validated_data['status']
    branch_id = serializer.validated_data.get('branch_id')

    client = get_client(request)
    manager = get_manager(request, get_resource('staff'), client=client)
    require_record(manager, pk)
    result = manager.perform(
        pk,
        lambda remote_id: set_status(client, remote_id, new_status, branch_id),
        f"Staff status changed to {new_status}.",
        changes={'status': new_status},
    )
    return action_response(request, manager, result)


@api_view(['POST'])
def staff_pin(request, pk):
    """Set the POS login PIN of a staff member"""
    serializer = StaffPinSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    pin = serializer.validated_data['pin']
    branch_id = serializer.validated_data.get('branch_id')

    client = get_client(request)
    manager = get_manager(request, get_resource('staff'), client=client)
    require_record(manager, pk)
    result = manager.perform(
        pk,
        lambda remote_id: set_pin(client, remote_id, pin, branch_id),
        'PIN updated successfully.',
    )
    return action_response(request, manager, result)
