"""
Custom middleware for the JSON API.

ApiExceptionMiddleware turns exceptions raised by /api/ views into the
error envelope:
- Http404 -> 404 (missing records and records owned by someone else)
- anything else (database failures included) -> 500, logged with traceback

Nothing is retried and no partial result is returned.
"""

import logging

from django.http import Http404

from .responses import error_response

logger = logging.getLogger(__name__)


def is_api_request(request):
    """Check if the request targets the JSON API."""
    return request.path.startswith('/api/')


class ApiExceptionMiddleware:
    """
    Convert uncaught exceptions from API views into the error envelope.

    Non-API requests fall through to Django's normal handling.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not is_api_request(request):
            return None

        if isinstance(exception, Http404):
            return error_response(404, 'Resource not found', str(exception))

        logger.exception(
            'Unhandled error on %s %s', request.method, request.path
        )
        return error_response(500, 'Internal server error', exception.__class__.__name__)
