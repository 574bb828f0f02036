"""
Error taxonomy for the Bantuin front end and the proxy's exception handler.

- Unauthorized: missing or rejected bearer token.
- ValidationFailed: a local precondition failed; nothing was sent.
- UpstreamRejection: the backend answered non-2xx; its message is kept verbatim.
- NetworkFailure: the request never completed or the body was not JSON.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'Internal server error'


class BantuinError(Exception):
    """Base class for every error surfaced to a Bantuin user."""

    default_message = 'Something went wrong.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(BantuinError):
    default_message = 'Authentication credentials were not provided.'


class ValidationFailed(BantuinError):
    """
    Local validation failure.

    Attributes:
        errors: dict mapping field name to a list of messages, suitable for
            rendering next to the corresponding form input.
    """

    default_message = 'Please correct the highlighted fields.'

    def __init__(self, errors, message=None):
        self.errors = errors
        if message is None:
            message = _first_message(errors) or self.default_message
        super().__init__(message)


class ActionNotAllowed(ValidationFailed):
    """The requested action is not offered for the order's status and role."""

    def __init__(self, action, status_value, role):
        self.action = action
        self.status = status_value
        self.role = role
        message = f'Action "{action}" is not available for a {role} while the order is {status_value}.'
        super().__init__({'action': [message]}, message=message)


class UpstreamRejection(BantuinError):
    default_message = 'The request was rejected.'

    def __init__(self, message=None, status_code=None, payload=None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class NetworkFailure(BantuinError):
    default_message = 'Something went wrong. Please try again.'


def _first_message(errors):
    """Pick the first human readable message out of a DRF style error dict."""
    if isinstance(errors, dict):
        for value in errors.values():
            found = _first_message(value)
            if found:
                return found
        return None
    if isinstance(errors, (list, tuple)):
        for value in errors:
            found = _first_message(value)
            if found:
                return found
        return None
    if errors:
        return str(errors)
    return None


def envelope_exception_handler(exc, context):
    """
    DRF exception handler producing the Bantuin failure envelope.

    Known API exceptions keep their status code and become
    {"success": false, "error": <message>} plus "errors" for field
    validation failures. Anything unexpected is logged and answered with a
    generic 500 so stack traces never reach the client.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}. "
            f"Error: {exc!r}",
            exc_info=exc,
        )
        return Response(
            {'success': False, 'error': GENERIC_ERROR_MESSAGE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    data = response.data
    if isinstance(data, dict) and set(data.keys()) == {'detail'}:
        response.data = {'success': False, 'error': str(data['detail'])}
    else:
        response.data = {
            'success': False,
            'error': _first_message(data) or 'Invalid request.',
            'errors': data,
        }
    return response
