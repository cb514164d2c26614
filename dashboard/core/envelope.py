"""
Response envelope shared by the service layer and the dashboard API.

The tenant API answers in several shapes ({"data": ...}, {"items": ...},
{"result": ...}, bare lists, {"result": {"items": [...]}} for paginated
lists). Everything is normalized here into a single Result, and every
dashboard response leaves as {"success", "data", "message"}.
"""
from dataclasses import dataclass
from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response

ENVELOPE_KEYS = ('data', 'items', 'result')


@dataclass
class Result:
    success: bool
    data: Any = None
    message: str = ''

    @classmethod
    def ok(cls, data=None, message=''):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message):
        return cls(success=False, data=None, message=message)

    def to_dict(self):
        return {'success': self.success, 'data': self.data, 'message': self.message}


def _first_present(body):
    for key in ENVELOPE_KEYS:
        if key in body and body[key] is not None:
            return body[key], True
    return body, False


def unwrap(body, many=False):
    """Pull the payload out of whichever envelope key the backend used"""
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        return [] if many else body

    payload, found = _first_present(body)
    # Paginated lists nest one more level: {"result": {"items": [...], "total": n}}
    if found and many and isinstance(payload, dict):
        payload, _ = _first_present(payload)

    if many and not isinstance(payload, list):
        return []
    return payload


def unwrap_record(body):
    """A single object from a write or detail reply, or None when the reply carries none.

    Status-only replies such as {"status": true, "message": "Updated"} hold no
    record; a bare body counts as one only when it has an `_id` or `id`.
    """
    if not isinstance(body, dict):
        return None
    payload, found = _first_present(body)
    if not found:
        return body if ('_id' in body or 'id' in body) else None
    return payload if isinstance(payload, dict) else None


def extract_message(body, default=''):
    if not isinstance(body, dict):
        return default
    message = body.get('message')
    if not message:
        error = body.get('error')
        if isinstance(error, dict):
            message = error.get('message')
        elif isinstance(error, str):
            message = error
    return message or default


def envelope_response(result, status=http_status.HTTP_200_OK):
    """Render a Result as the dashboard's documented envelope"""
    return Response(result.to_dict(), status=status)
