# core/api/exception_handlers.py
"""
DRF exception handler producing a single ``{"error": ...}`` envelope.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import SchoolHubException

logger = logging.getLogger(__name__)


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def custom_exception_handler(exc, context):
    view = context.get('view')
    request = context.get('request')
    user = getattr(request, 'user', None)

    if isinstance(exc, SchoolHubException):
        body = {'error': exc.message}
        if exc.details:
            body['details'] = exc.details
        return Response(body, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        return Response(
            {'error': _first_message(details), 'details': details},
            status=status.HTTP_400_BAD_REQUEST
        )

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data
        body = {'error': _first_message(detail)}
        if isinstance(detail, (dict, list)) and not (isinstance(detail, dict) and set(detail) == {'detail'}):
            body['details'] = detail
        response.data = body
        return response

    logger.error(
        f"Unhandled API error in {view.__class__.__name__ if view else 'unknown view'} "
        f"for user {getattr(user, 'username', 'Anonymous')}: {exc}",
        exc_info=True
    )
    return Response(
        {'error': 'An unexpected error occurred. Please try again later.'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )
