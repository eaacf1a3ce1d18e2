"""Response envelope helpers shared by all API views"""
from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    """Wrap a payload as {"success": true, "data": ..., "message": ...}"""
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    body.update(extra)
    return Response(body, status=status_code)


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST, **extra):
    """Wrap an error as {"success": false, "error": {"message": ..., **extra}}"""
    error = {'message': message}
    error.update(extra)
    return Response({'success': False, 'error': error}, status=status_code)


def validation_error_response(errors, message=None):
    """400 envelope for serializer errors, surfacing the first message"""
    first = message
    if first is None:
        for field, field_errors in errors.items():
            detail = field_errors[0] if isinstance(field_errors, (list, tuple)) and field_errors else field_errors
            first = str(detail) if field == 'non_field_errors' else f"{field}: {detail}"
            break
    return error_response(first or 'Validation error', status.HTTP_400_BAD_REQUEST, details=errors)


def paginate(queryset, request, default_limit=10, max_limit=100):
    """
    Slice a queryset using ?page= and ?limit= query params.

    Returns (items, pagination_dict).
    """
    try:
        page = max(int(request.query_params.get('page', 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.query_params.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    limit = min(max(limit, 1), max_limit)

    total = queryset.count()
    offset = (page - 1) * limit
    items = queryset[offset:offset + limit]
    pages = (total + limit - 1) // limit if total else 0
    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': pages,
    }
