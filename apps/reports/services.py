"""
Service layer for reports app.

Builds the statistics payloads served under /api/stats/. Each builder is a
read-only function of (owner, parameters, now) and returns plain dicts and
lists ready for JSON encoding.

Builders:
- get_overview: status/project/category totals
- get_daily_stats: created/completed per day
- get_weekly_stats: created/completed per Monday-Sunday week
- get_productivity_stats: rates, priorities, efficiency and today's snapshot
- get_monthly_report: one month's summary, daily trends and project progress
"""

import logging

from apps.projects.models import Project
from apps.tasks.models import Task

from . import aggregates
from .rates import average_hours, efficiency, rate
from .windows import (
    DAILY_DEFAULT,
    WEEKLY_DEFAULT,
    daily_windows,
    day_window,
    local_today,
    monthly_window,
    resolve_now,
    weekly_windows,
)

logger = logging.getLogger(__name__)

RECENT_PRODUCTIVITY_DAYS = 7


# =============================================================================
# Overview
# =============================================================================

def get_overview(owner):
    """
    Headline counts for an owner.

    Returns:
        dict: total/pending/in_progress/completed task counts plus
        total_projects, active_projects and total_categories
    """
    logger.debug('Building overview for user %s', owner.pk)

    return {
        'total_tasks': aggregates.count_tasks(owner),
        'pending_tasks': aggregates.count_tasks(owner, status=Task.Status.PENDING),
        'in_progress_tasks': aggregates.count_tasks(owner, status=Task.Status.IN_PROGRESS),
        'completed_tasks': aggregates.count_tasks(owner, status=Task.Status.COMPLETED),
        'total_projects': owner.projects.count(),
        'active_projects': owner.projects.filter(status=Project.Status.ACTIVE).count(),
        'total_categories': owner.categories.count(),
    }


# =============================================================================
# Trends
# =============================================================================

def get_daily_stats(owner, days=DAILY_DEFAULT, now=None):
    """
    Tasks created and completed on each of the last ``days`` days.

    Args:
        owner: User whose tasks are counted
        days: Requested number of days (lenient, see windows.clamp_count)
        now: Reference time

    Returns:
        list[dict]: {date, tasks_created, tasks_completed}, oldest first
    """
    windows = daily_windows(days, resolve_now(now))
    logger.debug('Building daily stats for user %s over %d days', owner.pk, len(windows))

    return [
        {
            'date': window.label,
            'tasks_created': aggregates.count_created(owner, window),
            'tasks_completed': aggregates.count_completed(owner, window),
        }
        for window in windows
    ]


def get_weekly_stats(owner, weeks=WEEKLY_DEFAULT, now=None):
    """
    Tasks created and completed in each of the last ``weeks`` weeks.

    Returns:
        list[dict]: {week_label, tasks_created, tasks_completed}, oldest first;
        ``week_label`` is "YYYY-MM-DD to YYYY-MM-DD"
    """
    windows = weekly_windows(weeks, resolve_now(now))
    logger.debug('Building weekly stats for user %s over %d weeks', owner.pk, len(windows))

    return [
        {
            'week_label': window.label,
            'tasks_created': aggregates.count_created(owner, window),
            'tasks_completed': aggregates.count_completed(owner, window),
        }
        for window in windows
    ]


# =============================================================================
# Productivity
# =============================================================================

def get_productivity_stats(owner, now=None):
    """
    Productivity analysis for an owner.

    Returns:
        dict with keys:
        - overview: {total_tasks, completed_tasks, completion_rate, overdue_tasks}
        - priority_distribution: {low, medium, high, urgent} task counts
        - priority_completion_rates: {low, medium, high, urgent} rates
        - avg_completion_time_hours: mean hours from creation to completion
        - recent_productivity: last 7 days of {date, created, completed, efficiency}
        - category_efficiency: {category_id, category_name, total_tasks,
          completed_tasks, completion_rate} per category
        - today: {total_tasks, completed_tasks, completion_rate} for tasks due today
    """
    now = resolve_now(now)
    logger.debug('Building productivity stats for user %s', owner.pk)

    total = aggregates.count_tasks(owner)
    completed = aggregates.count_tasks(owner, status=Task.Status.COMPLETED)

    priorities = aggregates.count_by_dimension(owner, 'priority')

    recent = []
    for window in daily_windows(RECENT_PRODUCTIVITY_DAYS, now):
        created_count = aggregates.count_created(owner, window)
        completed_count = aggregates.count_completed(owner, window)
        recent.append({
            'date': window.label,
            'created': created_count,
            'completed': completed_count,
            'efficiency': efficiency(created_count, completed_count),
        })

    categories = [
        {
            'category_id': row.key,
            'category_name': row.label,
            'total_tasks': row.total,
            'completed_tasks': row.completed,
            'completion_rate': rate(row.completed, row.total),
        }
        for row in aggregates.count_by_dimension(owner, 'category')
    ]

    today = day_window(local_today(now))
    due_today = aggregates.count_in_window(owner, today, 'due_date')
    completed_today = aggregates.count_in_window(
        owner, today, 'due_date', status=Task.Status.COMPLETED
    )

    return {
        'overview': {
            'total_tasks': total,
            'completed_tasks': completed,
            'completion_rate': rate(completed, total),
            'overdue_tasks': aggregates.count_overdue(owner, now),
        },
        'priority_distribution': {row.key: row.total for row in priorities},
        'priority_completion_rates': {
            row.key: rate(row.completed, row.total) for row in priorities
        },
        'avg_completion_time_hours': average_hours(
            aggregates.completion_durations_hours(owner)
        ),
        'recent_productivity': recent,
        'category_efficiency': categories,
        'today': {
            'total_tasks': due_today,
            'completed_tasks': completed_today,
            'completion_rate': rate(completed_today, due_today),
        },
    }


# =============================================================================
# Monthly Report
# =============================================================================

def get_monthly_report(owner, month=None, now=None):
    """
    Summary of one calendar month.

    Args:
        owner: User whose tasks are counted
        month: 'YYYY-MM' key, or None for the current month
        now: Reference time (only used to pick the current month)

    Returns:
        dict: {month, summary, daily_trends, project_progress}. Every owned
        project appears in project_progress with its all-time counts.

    Raises:
        InvalidInput: If ``month`` is malformed (before any query runs)
    """
    month_window = monthly_window(month, resolve_now(now))
    window = month_window.window
    logger.debug('Building monthly report %s for user %s', month_window.key, owner.pk)

    tasks_created = aggregates.count_created(owner, window)
    tasks_completed = aggregates.count_completed(owner, window)
    tasks_in_progress = aggregates.count_created(
        owner, window, status=Task.Status.IN_PROGRESS
    )

    daily_trends = [
        {
            'day': day.label,
            'created': aggregates.count_created(owner, day),
            'completed': aggregates.count_completed(owner, day),
        }
        for day in month_window.days
    ]

    project_progress = [
        {
            'project_id': row.key,
            'project_name': row.label,
            'total_tasks': row.total,
            'completed': row.completed,
            'progress': rate(row.completed, row.total),
        }
        for row in aggregates.count_by_dimension(owner, 'project')
    ]

    return {
        'month': month_window.key,
        'summary': {
            'tasks_created': tasks_created,
            'tasks_completed': tasks_completed,
            'tasks_in_progress': tasks_in_progress,
            'completion_rate': rate(tasks_completed, tasks_created),
        },
        'daily_trends': daily_trends,
        'project_progress': project_progress,
    }
