"""
Exceptions shared across apps.
"""

from django.core.exceptions import ValidationError


class InvalidInput(ValidationError):
    """
    A request parameter that cannot be interpreted (e.g. a malformed month).

    Subclasses ValidationError so views that already translate validation
    failures into 400 responses handle it without special casing.
    """


class Conflict(Exception):
    """
    The request clashes with existing data (HTTP 409).

    Raised for duplicate per-owner names and for deleting a category or
    project that still has tasks without ``force``.
    """
