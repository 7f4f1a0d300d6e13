"""
JSON response helpers for the API.

Every API response uses the same envelope:

    {"code": 200, "message": "success", "data": ..., "timestamp": "..."}

Error responses carry an additional "error" string and no "data".
"""

import math

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse
from django.utils import timezone


def _envelope(code, message, data=None, error=None):
    payload = {
        'code': code,
        'message': message,
    }
    if data is not None:
        payload['data'] = data
    if error:
        payload['error'] = str(error)
    payload['timestamp'] = timezone.now()
    return payload


def success_response(data, message='success', status=200):
    """Wrap ``data`` in the success envelope."""
    return JsonResponse(
        _envelope(status, message, data=data),
        status=status,
        encoder=DjangoJSONEncoder,
    )


def error_response(status, message, error=None):
    """
    Build an error envelope.

    Args:
        status: HTTP status code (also echoed as "code")
        message: Short human-readable description
        error: Optional detail (exception or string)
    """
    return JsonResponse(
        _envelope(status, message, error=error),
        status=status,
        encoder=DjangoJSONEncoder,
    )


def _format_field_errors(errors):
    return '; '.join(
        f'{field}: {" ".join(messages)}' for field, messages in errors.items()
    )


def validation_error_response(exc, message='Invalid request parameters'):
    """Translate a Django ValidationError into a 400 envelope."""
    if hasattr(exc, 'error_dict'):
        detail = _format_field_errors(exc.message_dict)
    else:
        detail = ' '.join(exc.messages)
    return error_response(400, message, detail)


def form_error_response(form, message='Invalid request parameters'):
    """400 envelope listing a bound form's field errors."""
    errors = {
        field: [error['message'] for error in field_errors]
        for field, field_errors in form.errors.get_json_data().items()
    }
    return error_response(400, message, _format_field_errors(errors))


def get_pagination_params(request):
    """
    Read page/page_size from the query string.

    Invalid values fall back to defaults instead of failing:
    page < 1 becomes 1, page_size outside 1..API_MAX_PAGE_SIZE becomes
    API_PAGE_SIZE.

    Returns:
        tuple: (page, page_size, offset)
    """
    try:
        page = int(request.GET.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    if page < 1:
        page = 1

    try:
        page_size = int(request.GET.get('page_size', settings.API_PAGE_SIZE))
    except (TypeError, ValueError):
        page_size = settings.API_PAGE_SIZE
    if page_size < 1 or page_size > settings.API_MAX_PAGE_SIZE:
        page_size = settings.API_PAGE_SIZE

    offset = (page - 1) * page_size
    return page, page_size, offset


def paginate(request, queryset):
    """
    Slice ``queryset`` according to the request's pagination parameters.

    Returns:
        tuple: (items, total, page, page_size)
    """
    page, page_size, offset = get_pagination_params(request)
    total = queryset.count()
    items = list(queryset[offset:offset + page_size])
    return items, total, page, page_size


def paginated_response(items, total, page, page_size):
    """Success envelope around a page of already-serialized items."""
    return success_response({
        'items': items,
        'total': total,
        'page': page,
        'page_size': page_size,
        'total_pages': math.ceil(total / page_size) if page_size else 0,
    })
