"""
Task filters using django-filter.

Provides filtering for the task list endpoint:
- Status and priority (unknown values are ignored, not rejected)
- Category and project ids
- Keyword search (title, description)
- Created-at range and due-before cutoff

Ordering is applied separately with apply_sorting() because it is driven by
two parameters (order_by, order_dir).
"""

import django_filters
from django.db.models import Q

from .models import Category, Task


class TaskFilter(django_filters.FilterSet):
    """
    Task list filter.

    Usage in views:
        filterset = TaskFilter(request.GET, queryset=queryset)
        tasks = filterset.qs

    Invalid values drop out of the form's cleaned_data, so they simply do
    not filter.
    """

    status = django_filters.ChoiceFilter(choices=Task.Status.choices)
    priority = django_filters.ChoiceFilter(choices=Task.Priority.choices)

    category_id = django_filters.NumberFilter(field_name='category_id')
    project_id = django_filters.NumberFilter(field_name='project_id')

    keyword = django_filters.CharFilter(method='filter_keyword')

    start_date = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    end_date = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')
    due_before = django_filters.DateTimeFilter(field_name='due_date', lookup_expr='lte')

    class Meta:
        model = Task
        fields = ['status', 'priority']

    def filter_keyword(self, queryset, name, value):
        """Search in title and description."""
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) | Q(description__icontains=value)
        )


# =============================================================================
# Sorting
# =============================================================================

TASK_SORT_FIELDS = ['created_at', 'updated_at', 'due_date', 'priority', 'status', 'title']
CATEGORY_SORT_FIELDS = ['created_at', 'updated_at', 'name']


def get_order_params(params, allowed, default_field='created_at', default_dir='desc'):
    """
    Read order_by/order_dir from ``params``.

    Unknown fields and directions fall back to the defaults.

    Returns:
        tuple: (field, direction)
    """
    field = params.get('order_by', default_field)
    if field not in allowed:
        field = default_field

    direction = params.get('order_dir', default_dir)
    if direction not in ('asc', 'desc'):
        direction = default_dir

    return field, direction


def apply_sorting(queryset, field, direction):
    """Order ``queryset`` by ``field``, with id as a stable tiebreaker."""
    prefix = '-' if direction == 'desc' else ''
    return queryset.order_by(f'{prefix}{field}', f'{prefix}id')


def filter_categories(owner, params):
    """Owner's categories ordered by order_by/order_dir (default created_at asc)."""
    field, direction = get_order_params(
        params, CATEGORY_SORT_FIELDS, default_dir='asc'
    )
    return apply_sorting(Category.objects.filter(owner=owner), field, direction)
