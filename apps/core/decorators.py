"""
View decorators and request helpers for the JSON API.

Includes:
- api_login_required: 401 envelope instead of a login redirect
- api_methods: 405 envelope for unsupported HTTP methods
- parse_json_body: decode a JSON object body or raise ValidationError
- is_true: read a boolean query flag
"""

import json
from functools import wraps

from django.core.exceptions import ValidationError

from .responses import error_response


def api_login_required(view_func):
    """
    Require an authenticated user for an API view.

    The owner of every query is ``request.user``; anonymous requests never
    reach the view.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response(401, 'Authentication required')
        return view_func(request, *args, **kwargs)
    return wrapper


def api_methods(*methods):
    """Restrict a view to ``methods``; anything else gets a 405 envelope."""
    allowed = [m.upper() for m in methods]

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if request.method not in allowed:
                response = error_response(
                    405, f'Method {request.method} not allowed'
                )
                response['Allow'] = ', '.join(allowed)
                return response
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def parse_json_body(request):
    """
    Decode the request body as a JSON object.

    Returns:
        dict: Parsed body ({} for an empty body)

    Raises:
        ValidationError: If the body is not valid JSON or not an object
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValidationError(f'Malformed JSON body: {exc}')
    if not isinstance(payload, dict):
        raise ValidationError('JSON body must be an object.')
    return payload


def is_true(value):
    """Interpret a boolean query parameter ("true"/"1"/"yes")."""
    return str(value).lower() in ('true', '1', 'yes')
