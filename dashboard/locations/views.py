from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound

from dashboard.core.envelope import Result, envelope_response
from dashboard.core.utils import get_client

from .resolver import resolve_branch_id
from .serializers import RestaurantProfileDraftSerializer

PROFILE_DRAFT_SESSION_KEY = 'restaurant_profile_draft'


@api_view(['GET'])
def branch_resolve(request, identifier):
    """Resolve a branch code, name or id to its ObjectId"""
    branch_id = resolve_branch_id(get_client(request), identifier)
    if not branch_id:
        raise NotFound(f"Branch not found with identifier: {identifier}")
    return envelope_response(Result.ok({'identifier': identifier, 'branch_id': branch_id}))


@api_view(['GET', 'PUT', 'DELETE'])
def profile_draft(request):
    """Retrieve, update or discard the unsaved restaurant profile form"""
    draft = request.session.get(PROFILE_DRAFT_SESSION_KEY)

    if request.method == 'GET':
        return envelope_response(Result.ok({'draft': draft or {}, 'has_changes': draft is not None}))

    if request.method == 'PUT':
        serializer = RestaurantProfileDraftSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        merged = dict(draft or {})
        merged.update(serializer.validated_data)
        request.session[PROFILE_DRAFT_SESSION_KEY] = merged
        return envelope_response(Result.ok({'draft': merged, 'has_changes': True}, 'Draft saved.'))

    request.session.pop(PROFILE_DRAFT_SESSION_KEY, None)
    return envelope_response(Result.ok({'draft': {}, 'has_changes': False}, 'Draft discarded.'),
                             status.HTTP_200_OK)
