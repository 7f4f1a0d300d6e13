"""
Owner-scoped task counting for reports.

Every function takes the owner first and never counts another user's
records. Counts come back as plain ints (0 when nothing matches).

Functions:
- count_tasks: unwindowed count with optional filters
- count_in_window / count_created / count_completed: timestamp in a Window
- count_overdue: open tasks whose due date has passed
- count_by_dimension: per-priority / per-category / per-project totals
- completion_durations_hours: creation-to-completion durations
"""

from collections import namedtuple

from django.db.models import Count, Q

from apps.projects.models import Project
from apps.tasks.models import Category, Task

from .windows import resolve_now

DimensionCount = namedtuple('DimensionCount', ['key', 'label', 'total', 'completed'])

TASK_FILTERS = ('status', 'priority', 'category', 'project')
WINDOW_FIELDS = ('created_at', 'completed_at', 'due_date')
DIMENSIONS = ('priority', 'category', 'project')


def owned_tasks(owner, **filters):
    """
    Base queryset of ``owner``'s tasks narrowed by ``filters``.

    Filters are ANDed; a None value means "not filtered". Category and
    project accept either an id or an instance.

    Raises:
        TypeError: If a filter name is not one of TASK_FILTERS
    """
    unknown = sorted(set(filters) - set(TASK_FILTERS))
    if unknown:
        raise TypeError(f"Unknown task filter(s): {', '.join(unknown)}")

    lookups = {name: value for name, value in filters.items() if value is not None}
    return Task.objects.filter(owner=owner, **lookups)


def count_tasks(owner, **filters):
    return owned_tasks(owner, **filters).count()


def count_in_window(owner, window, field, **filters):
    """
    Count tasks whose ``field`` timestamp falls inside ``window`` (inclusive).

    Tasks with a NULL ``field`` never match.

    Args:
        owner: User whose tasks are counted
        window: Window with aware start/end datetimes
        field: One of 'created_at', 'completed_at', 'due_date'
        **filters: See owned_tasks()
    """
    if field not in WINDOW_FIELDS:
        raise ValueError(f'Cannot window on field: {field}')

    return owned_tasks(owner, **filters).filter(
        **{f'{field}__range': (window.start, window.end)}
    ).count()


def count_created(owner, window, **filters):
    return count_in_window(owner, window, 'created_at', **filters)


def count_completed(owner, window, **filters):
    return count_in_window(owner, window, 'completed_at', **filters)


def count_overdue(owner, now=None):
    """Open tasks with a due date strictly before ``now``."""
    now = resolve_now(now)
    return (
        Task.objects.filter(owner=owner, due_date__isnull=False, due_date__lt=now)
        .exclude(status=Task.Status.COMPLETED)
        .count()
    )


# =============================================================================
# Per-dimension Breakdowns
# =============================================================================

def _priority_counts(owner):
    rows = (
        Task.objects.filter(owner=owner)
        .order_by()
        .values('priority')
        .annotate(
            total=Count('id'),
            completed=Count('id', filter=Q(status=Task.Status.COMPLETED)),
        )
    )
    by_priority = {row['priority']: row for row in rows}

    counts = []
    for priority in Task.Priority:
        row = by_priority.get(priority.value, {})
        counts.append(DimensionCount(
            key=priority.value,
            label=priority.label,
            total=row.get('total', 0),
            completed=row.get('completed', 0),
        ))
    return counts


def _related_counts(model, owner):
    owned = Q(tasks__owner=owner)
    rows = (
        model.objects.filter(owner=owner)
        .order_by('created_at', 'id')
        .annotate(
            task_total=Count('tasks', filter=owned),
            task_completed=Count(
                'tasks', filter=owned & Q(tasks__status=Task.Status.COMPLETED)
            ),
        )
    )
    return [
        DimensionCount(
            key=row.pk,
            label=row.name,
            total=row.task_total,
            completed=row.task_completed,
        )
        for row in rows
    ]


def count_by_dimension(owner, dimension):
    """
    Total and completed task counts grouped by ``dimension``.

    - priority: one row per Task.Priority member, in enum order, zeros
      included
    - category / project: one row per category/project the owner has,
      oldest first, including those without tasks

    Each dimension is a single grouped query.

    Returns:
        list[DimensionCount]
    """
    if dimension == 'priority':
        return _priority_counts(owner)
    if dimension == 'category':
        return _related_counts(Category, owner)
    if dimension == 'project':
        return _related_counts(Project, owner)
    raise ValueError(f'Unknown dimension: {dimension}')


def completion_durations_hours(owner):
    """Hours from created_at to completed_at for each completed task."""
    pairs = (
        Task.objects.filter(
            owner=owner,
            status=Task.Status.COMPLETED,
            completed_at__isnull=False,
        )
        .order_by()
        .values_list('created_at', 'completed_at')
    )
    return [
        (completed_at - created_at).total_seconds() / 3600
        for created_at, completed_at in pairs
    ]
