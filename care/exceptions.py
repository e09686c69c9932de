"""
Error taxonomy and the DRF exception handler.

Every failure leaving the API is rendered as
``{'ok': False, 'error': {'code': ..., 'message': ...}}``.  Services
raise the domain exceptions below; database integrity errors and
anything unexpected are translated at the request boundary.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ValidationFailed(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'validation_error'


class InvalidInput(ValidationFailed):
    pass


class InvalidRating(ValidationFailed):
    default_detail = 'Rating must be between 1 and 5 and a doctor is required.'


class InvalidTransition(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Status transition not allowed.'
    default_code = 'invalid_transition'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Conflict with existing data.'
    default_code = 'conflict'


class DuplicateEmail(Conflict):
    default_detail = 'Email already exists.'


class AlreadyRated(Conflict):
    default_detail = 'This appointment has already been rated.'


class InvalidCredentials(exceptions.APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid credentials.'
    default_code = 'invalid_credentials'


class InvalidToken(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Invalid token.'
    default_code = 'invalid_token'


class Forbidden(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied.'
    default_code = 'forbidden'

    def __init__(self, detail=None, code=None, extra: dict | None = None):
        super().__init__(detail, code)
        # extra keys merged into the rendered error body
        self.extra = extra or {}


class PendingApproval(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Account pending approval.'
    default_code = 'pending_approval'


class NotFound(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class PatientProfileNotFound(NotFound):
    default_detail = 'Patient profile not found.'


class DoctorProfileNotFound(NotFound):
    default_detail = 'Doctor profile not found.'


class PatientNotFound(NotFound):
    default_detail = 'Patient not found.'


class AppointmentMismatch(NotFound):
    default_detail = 'Appointment not found or does not match the patient and doctor.'


# DRF default codes mapped onto the codes above
_DRF_CODES = {
    'invalid': 'validation_error',
    'parse_error': 'validation_error',
    'not_authenticated': 'unauthenticated',
    'authentication_failed': 'invalid_token',
    'token_not_valid': 'invalid_token',
    'permission_denied': 'forbidden',
}


def _code_for(exc: exceptions.APIException) -> str:
    code = getattr(exc, 'default_code', None) or 'api_error'
    return _DRF_CODES.get(code, code)


def _message_for(data) -> str:
    """Flatten a DRF error payload into a single human readable message."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        field, errors = next(iter(data.items()))
        first = errors[0] if isinstance(errors, list) and errors else errors
        if field == 'non_field_errors':
            return str(first)
        return f"{field}: {first}"
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def _error(code: str, message: str, http_status: int, **extra) -> Response:
    body = {'ok': False, 'error': {'code': code, 'message': message, **extra}}
    return Response(body, status=http_status)


def api_exception_handler(exc, context):
    # rest_framework.views loads the authentication classes, which import this module
    from rest_framework.views import exception_handler as drf_exception_handler

    if isinstance(exc, IntegrityError):
        text = str(exc).lower()
        if 'unique' in text or 'duplicate' in text:
            return _error('conflict', 'Duplicate entry.', status.HTTP_400_BAD_REQUEST)
        logger.warning("integrity error on %s: %s", context.get('view'), exc)
        return _error('validation_error', 'Invalid reference or missing required field.',
                      status.HTTP_400_BAD_REQUEST)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled error in %s", context.get('view'), exc_info=exc)
        message = str(exc) if settings.DEBUG else 'Internal server error.'
        return _error('server_error', message, status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Django's Http404 and PermissionDenied arrive here already converted
    api_exc = exc if isinstance(exc, exceptions.APIException) else None
    if api_exc is None:
        code = 'not_found' if resp.status_code == 404 else 'forbidden'
    else:
        code = _code_for(api_exc)
    extra = {}
    if isinstance(exc, exceptions.ValidationError) and isinstance(resp.data, dict):
        extra['fields'] = resp.data
    extra.update(getattr(exc, 'extra', None) or {})
    response = _error(code, _message_for(resp.data), resp.status_code, **extra)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if header in resp:
            response[header] = resp[header]
    return response
