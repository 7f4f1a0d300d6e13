"""
Project filters using django-filter.
"""

import django_filters
from django.db.models import Q

from .models import Project

PROJECT_SORT_FIELDS = ['created_at', 'updated_at', 'name', 'status', 'start_date', 'end_date']


class ProjectFilter(django_filters.FilterSet):
    """
    Project list filter: status (unknown values ignored) and keyword search
    over name and description.
    """

    status = django_filters.ChoiceFilter(choices=Project.Status.choices)
    keyword = django_filters.CharFilter(method='filter_keyword')

    class Meta:
        model = Project
        fields = ['status']

    def filter_keyword(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(description__icontains=value)
        )
