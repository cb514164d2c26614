# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class RequestError(Exception):
    """A call to the tenant API failed (network error, non-2xx or an explicit failure body)"""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self):
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class UnknownResource(LookupError):
    """No resource is registered under the requested name"""


class InvalidAction(APIException):
    """A dashboard action that cannot be applied to the current list state"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid action'
    default_code = 'invalid_action'


def custom_exception_handler(exc, context):
    """
    Render every API error in the dashboard envelope:
    {"success": false, "message": ..., "data": <details>}
    """
    response = exception_handler(exc, context)

    if response is not None:
        message = 'An error occurred'
        if response.status_code == 400:
            message = 'Validation error'
        elif response.status_code == 401:
            message = 'Authentication required'
        elif response.status_code == 403:
            message = 'Permission denied'
        elif response.status_code == 404:
            message = 'Resource not found'
        elif response.status_code == 405:
            message = 'Method not allowed'

        details = response.data
        if isinstance(details, dict) and 'detail' in details and len(details) == 1:
            message = str(details['detail'])
            details = None

        response.data = {
            'success': False,
            'message': message,
            'data': details,
        }
        return response

    if isinstance(exc, UnknownResource):
        return Response({
            'success': False,
            'message': str(exc),
            'data': None,
        }, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, RequestError):
        logger.error(f"Unhandled tenant API error: {exc}")
        return Response({
            'success': False,
            'message': exc.message,
            'data': None,
        }, status=status.HTTP_502_BAD_GATEWAY)

    logger.error(f"Unexpected Error: {exc}")
    return Response({
        'success': False,
        'message': 'An unexpected error occurred',
        'data': {'error': str(exc)} if settings.DEBUG else None,
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
