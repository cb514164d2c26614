"""
Branch identifier resolution.

URLs and staff records refer to branches by ObjectId, numeric id, code or
name; backend calls need the ObjectId. Resolutions are cached per tenant for
five minutes.
"""
import logging
import re

from dashboard.core.cache_utils import cache_branch_id, get_cached_branch_id
from dashboard.core.envelope import unwrap, unwrap_record
from dashboard.core.exceptions import RequestError

logger = logging.getLogger(__name__)

BRANCHES_PATH = '/t/branches'
OBJECT_ID_RE = re.compile(r'^[0-9a-fA-F]{24}$')
MATCH_FIELDS = ('_id', 'id', 'code', 'name')


def _object_id(raw):
    if not isinstance(raw, dict):
        return None
    value = raw.get('_id') or raw.get('id')
    return str(value) if value else None


def _lookup_by_object_id(client, identifier):
    try:
        body = client.get(f"{BRANCHES_PATH}/{identifier}")
    except RequestError as e:
        logger.debug(f"Branch {identifier} not found directly, searching the list: {e}")
        return None
    return _object_id(unwrap_record(body))


def _lookup_in_list(client, identifier):
    try:
        body = client.get(BRANCHES_PATH, params={'limit': 1000})
    except RequestError as e:
        logger.warning(f"Failed to list branches while resolving '{identifier}': {e}")
        return None
    for branch in unwrap(body, many=True):
        if not isinstance(branch, dict):
            continue
        if any(str(branch.get(field)) == identifier for field in MATCH_FIELDS if branch.get(field) is not None):
            return _object_id(branch)
    return None


def resolve_branch_id(client, identifier):
    """Branch ObjectId for an identifier, or None when no branch matches"""
    identifier = str(identifier).strip()
    if not identifier:
        return None

    tenant = client.session.tenant_header
    cached, cache_key = get_cached_branch_id(tenant, identifier)
    if cached:
        return cached

    object_id = None
    if OBJECT_ID_RE.match(identifier):
        object_id = _lookup_by_object_id(client, identifier)
    if not object_id:
        object_id = _lookup_in_list(client, identifier)

    if object_id:
        cache_branch_id(cache_key, object_id)
        logger.info(f"Resolved branch '{identifier}' to {object_id}")
    else:
        logger.warning(f"Branch not found with identifier: {identifier}")
    return object_id
