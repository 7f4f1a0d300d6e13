"""
Views for reports app.

Read-only statistics endpoints under /api/stats/. All of them are scoped to
the authenticated user and return the standard JSON envelope.
"""

from django.core.exceptions import ValidationError

from apps.core.decorators import api_login_required, api_methods
from apps.core.responses import success_response, validation_error_response

from . import services


@api_login_required
@api_methods('GET')
def overview_view(request):
    """Headline task/project/category counts."""
    return success_response(services.get_overview(request.user))


@api_login_required
@api_methods('GET')
def daily_stats_view(request):
    """
    Created/completed counts per day.

    Query params:
        days: 1-30, anything else falls back to 7
    """
    return success_response(
        services.get_daily_stats(request.user, request.GET.get('days'))
    )


@api_login_required
@api_methods('GET')
def weekly_stats_view(request):
    """
    Created/completed counts per Monday-Sunday week.

    Query params:
        weeks: 1-12, anything else falls back to 4
    """
    return success_response(
        services.get_weekly_stats(request.user, request.GET.get('weeks'))
    )


@api_login_required
@api_methods('GET')
def productivity_stats_view(request):
    """Rates, priority breakdowns, category efficiency and today's snapshot."""
    return success_response(services.get_productivity_stats(request.user))


@api_login_required
@api_methods('GET')
def monthly_report_view(request):
    """
    Summary, daily trends and project progress for one month.

    Query params:
        month: YYYY-MM (default current month); malformed values get a 400
    """
    try:
        report = services.get_monthly_report(request.user, request.GET.get('month'))
    except ValidationError as e:
        return validation_error_response(e, message='Invalid month parameter')
    return success_response(report)
