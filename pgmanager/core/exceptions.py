"""
DRF exception handler that renders framework errors in the API error envelope
"""
import logging
from django.http import Http404
from django.core.exceptions import PermissionDenied
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('pgmanager.core')


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)) and detail:
        return _first_message(detail[0])
    return str(detail)


def api_exception_handler(exc, context):
    """Wrap DRF/Django errors as {"success": false, "error": {...}}"""
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or 'Not found.')
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied(str(exc) or None)

    response = exception_handler(exc, context)
    if response is None:
        request = context.get('request')
        path = request.path if request is not None else '?'
        logger.error(f"Unhandled error on {path}: {exc}", exc_info=exc)
        return Response(
            {'success': False, 'error': {'message': 'An unexpected error occurred'}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        error = {
            'message': _first_message(exc.detail) or 'Validation error',
            'details': response.data,
        }
    else:
        detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
        error = {'message': str(detail) if detail else 'Request failed'}
        code = getattr(getattr(exc, 'detail', None), 'code', None) or getattr(exc, 'default_code', None)
        if code:
            error['code'] = code

    if response.status_code >= 500:
        logger.error(f"API error {response.status_code}: {error['message']}")
    else:
        logger.debug(f"API error {response.status_code}: {error['message']}")

    response.data = {'success': False, 'error': error}
    return response
