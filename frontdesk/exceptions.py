"""
API errors and the unified exception handler.

Every error leaves the API as ``{"ok": false, "error": {"code", "message"}}``.
Domain rule violations are raised from the service layer as
:class:`ClinicError` subclasses and surface as client errors.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

PASSTHROUGH_HEADERS = ('WWW-Authenticate', 'Retry-After')
FALLBACK_CODES = {
    status.HTTP_400_BAD_REQUEST: 'validation_error',
    status.HTTP_404_NOT_FOUND: 'not_found',
}


class ClinicError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'
    default_code = 'invalid'


class ReferenceNotFound(ClinicError):
    default_detail = 'Referenced record not found'
    default_code = 'reference_not_found'


class BookingConflict(ClinicError):
    default_detail = 'Doctor already has an appointment at this time'
    default_code = 'booking_conflict'


class AlreadyQueued(ClinicError):
    default_detail = 'Patient is already in queue'
    default_code = 'already_queued'


class InvalidTransition(ClinicError):
    default_detail = 'Invalid status transition'
    default_code = 'invalid_transition'


class QueueNumberUnavailable(ClinicError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Could not allocate a queue number, please resubmit'
    default_code = 'queue_number_unavailable'


def _message(data):
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        return {key: _message(value) for key, value in data.items()}
    if isinstance(data, list):
        if len(data) == 1:
            return _message(data[0])
        return [_message(value) for value in data]
    return str(data)


def _code(exc, resp) -> str:
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            return codes
    return FALLBACK_CODES.get(resp.status_code, 'api_error')


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.error(
            'Unhandled error on %s %s',
            getattr(request, 'method', '?'), getattr(request, 'path', '?'),
            exc_info=exc,
        )
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    normalized = Response(
        {'ok': False, 'error': {'code': _code(exc, resp), 'message': _message(resp.data)}},
        status=resp.status_code,
    )
    for header in PASSTHROUGH_HEADERS:
        if header in resp:
            normalized[header] = resp[header]
    return normalized
