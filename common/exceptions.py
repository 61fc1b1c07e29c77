"""
Domain errors and the custom exception handler for Django REST Framework.

Services raise ``LedgerError`` subclasses and never build responses; the
handler below turns them (and DRF / Django errors) into the common envelope.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    ValidationError as DRFValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for errors raised by the expense ledger services."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'error'
    default_message = 'An error occurred.'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFound(LedgerError):
    """A travel, expense, or budget reference does not resolve."""
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'not_found'
    default_message = 'The requested resource was not found.'


class Forbidden(LedgerError):
    """The requesting user is not a member of the owning group."""
    status_code = status.HTTP_403_FORBIDDEN
    default_code = 'forbidden'
    default_message = 'You are not a member of this travel group.'


class ValidationError(LedgerError):
    """Malformed input: bad amounts, split mismatches, unknown references."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'validation_error'
    default_message = 'Invalid input.'


class PersistenceError(LedgerError):
    """Storage failure; the transaction was rolled back and may be retried."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = 'persistence_error'
    default_message = 'The operation could not be saved. Please try again.'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent JSON error responses.

    Response format:
    {
        "success": false,
        "error": {
            "code": "error_code",
            "message": "Human-readable message",
            "details": { ... }  // optional, for field-level validation errors
        }
    }
    """
    if isinstance(exc, LedgerError):
        return _ledger_error_response(exc)

    # Convert Django ValidationError to DRF ValidationError
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.message_dict if hasattr(exc, 'message_dict') else exc.messages)

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        # Unhandled exception
        logger.exception(
            'Unhandled exception in %s',
            context.get('view', 'unknown view'),
            exc_info=exc,
        )
        return Response(
            {
                'success': False,
                'error': {
                    'code': 'internal_error',
                    'message': 'An unexpected error occurred. Please try again later.',
                },
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Build structured error response
    error_response = {
        'success': False,
        'error': _format_error(exc, response),
    }

    response.data = error_response
    return response


def _ledger_error_response(exc):
    error = {
        'code': exc.default_code,
        'message': exc.message,
    }
    if exc.details:
        error['details'] = exc.details

    return Response({'success': False, 'error': error}, status=exc.status_code)


def _format_error(exc, response):
    """Format the error payload based on exception type."""
    if isinstance(exc, DRFValidationError):
        return {
            'code': 'validation_error',
            'message': 'Invalid input.',
            'details': response.data,
        }

    if isinstance(exc, Http404):
        return {
            'code': 'not_found',
            'message': 'The requested resource was not found.',
        }

    if isinstance(exc, APIException):
        return {
            'code': exc.default_code if hasattr(exc, 'default_code') else 'error',
            'message': str(exc.detail) if hasattr(exc, 'detail') else str(exc),
        }

    return {
        'code': 'error',
        'message': 'An error occurred.',
    }
