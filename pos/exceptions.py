import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class PosError(APIException):
    """Base class for business-rule failures surfaced to API clients."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'error'


class ValidationError(PosError):
    default_detail = 'Invalid request'
    default_code = 'validation_error'


class NotFoundError(PosError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class ConflictError(PosError):
    default_detail = 'Conflicts with existing data'
    default_code = 'conflict'


class UnavailableError(PosError):
    default_detail = 'Product is not available'
    default_code = 'unavailable'


class InsufficientStockError(PosError):
    default_detail = 'Insufficient stock'
    default_code = 'insufficient_stock'


class InsufficientPaymentError(PosError):
    default_detail = 'Insufficient payment'
    default_code = 'insufficient_payment'


class UnmodifiableStateError(PosError):
    default_detail = 'Order cannot be modified at this stage'
    default_code = 'unmodifiable_state'


STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
}


def _error_response(message, code, status_code, errors=None):
    body = {
        'success': False,
        'message': message,
        'error': code,
    }
    if errors is not None:
        body['errors'] = errors
    return Response(body, status=status_code)


def pos_exception_handler(exc, context):
    """
    Render every failure in the standard envelope:
    {"success": false, "message": ..., "error": <code>, "errors": ...}
    """
    if isinstance(exc, PosError):
        set_rollback()
        return _error_response(str(exc.detail), exc.default_code, exc.status_code)

    if isinstance(exc, DjangoValidationError):
        logger.warning("Model validation failed: %s", exc.messages)
        return _error_response('Validation error', 'validation_error',
                               status.HTTP_400_BAD_REQUEST, errors=exc.messages)

    if isinstance(exc, (IntegrityError, ProtectedError)):
        logger.warning("Integrity error: %s", exc)
        set_rollback()
        return _error_response('This operation conflicts with existing data', 'conflict',
                               status.HTTP_400_BAD_REQUEST)

    # REST framework's default handler covers Http404, PermissionDenied and APIException
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, DRFValidationError):
            return _error_response('Validation error', 'validation_error',
                                   response.status_code, errors=response.data)
        if isinstance(exc, Http404):
            code = 'not_found'
        elif isinstance(exc, APIException):
            code = exc.default_code
        else:
            code = 'error'
        message = STATUS_MESSAGES.get(response.status_code, 'An error occurred')
        detail = response.data.get('detail') if isinstance(response.data, dict) else None
        response.data = {
            'success': False,
            'message': str(detail) if detail else message,
            'error': code,
        }
        return response

    view = context.get('view')
    logger.exception("Unexpected error in %s", view.__class__.__name__ if view else 'request')
    return _error_response('An unexpected error occurred', 'server_error',
                           status.HTTP_500_INTERNAL_SERVER_ERROR)
