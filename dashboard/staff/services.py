"""Staff actions outside the CRUD endpoints"""
import logging

from dashboard.core.envelope import Result, extract_message
from dashboard.core.exceptions import RequestError

logger = logging.getLogger(__name__)


def _post(client, path, payload, action, default_message):
    try:
        body = client.post(path, payload)
    except RequestError as e:
        logger.warning(f"Staff {action} failed: {e}")
        return Result.fail(e.message or f"{action.capitalize()} failed")
    return Result.ok(None, extract_message(body, default_message))


def set_status(client, staff_id, status, branch_id=None):
    payload = {'status': status}
    if branch_id:
        payload['branchId'] = branch_id
    return _post(client, f"/t/staff/{staff_id}/status", payload, 'status change', 'Status updated.')


def set_pin(client, staff_id, pin, branch_id=None):
    payload = {'pin': pin}
    if branch_id:
        payload['branchId'] = branch_id
    result = _post(client, f"/t/staff/{staff_id}/set-pin", payload, 'set pin', 'PIN updated.')
    if result.success:
        logger.info(f"PIN set for staff {staff_id}")
    return result
