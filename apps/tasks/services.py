"""
Service layer for tasks app.

All write operations on tasks and categories are centralized here so the
completed_at invariant and per-owner rules live in one place.

Services:
- create_task / update_task: Save a validated TaskForm for an owner
- change_status: Change one task's status
- batch_update_status: Change status of many owned tasks
- delete_task / batch_delete: Remove owned tasks
- create_category / update_category: Save a validated CategoryForm
- delete_category: Remove a category, detaching its tasks when forced
- get_category_stats: Status breakdown for one category
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import DateTimeField, F, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.core.exceptions import Conflict
from apps.reports.aggregates import count_tasks
from apps.reports.rates import rate

from .models import Category, Task

logger = logging.getLogger(__name__)


def clean_task_ids(task_ids):
    """
    Validate a list of task ids from a request body.

    Raises:
        ValidationError: If task_ids is not a list of integers
    """
    if not isinstance(task_ids, list):
        raise ValidationError({'task_ids': 'task_ids must be a list of task ids.'})
    for task_id in task_ids:
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            raise ValidationError({'task_ids': f'Invalid task id: {task_id!r}'})
    return task_ids


def clean_status(status):
    if status not in Task.Status.values:
        raise ValidationError({'status': f'Invalid status: {status}'})
    return status


# =============================================================================
# Tasks
# =============================================================================

def create_task(form, owner):
    """
    Create a task from a validated TaskForm.

    New tasks always start as pending with no completion timestamp.

    Returns:
        Created Task instance
    """
    task = form.save(commit=False)
    task.owner = owner
    task.status = Task.Status.PENDING
    task.completed_at = None
    task.save()

    logger.info('Task %s created by user %s', task.pk, owner.pk)
    return task


def update_task(form):
    """Save a validated TaskForm bound to an existing task."""
    task = form.save()
    logger.info('Task %s updated', task.pk)
    return task


def change_status(task, new_status, now=None):
    """
    Change task status and keep completed_at consistent.

    Entering completed stamps completed_at (an existing stamp is kept);
    any other status clears it.

    Returns:
        Updated Task instance

    Raises:
        ValidationError: If new_status is not a known status
    """
    old_status = task.status
    task.set_status(new_status, now=now)
    task.save(update_fields=['status', 'completed_at', 'updated_at'])

    logger.info('Task %s status changed: %s -> %s', task.pk, old_status, new_status)
    return task


def batch_update_status(owner, task_ids, new_status, now=None):
    """
    Set the status of every listed task that ``owner`` owns.

    Ids of missing or foreign tasks are silently skipped.

    Returns:
        int: Number of tasks updated

    Raises:
        ValidationError: If task_ids or new_status is invalid
    """
    clean_task_ids(task_ids)
    clean_status(new_status)

    tasks = Task.objects.filter(owner=owner, pk__in=task_ids)
    if new_status == Task.Status.COMPLETED:
        now = now or timezone.now()
        completed_at = Coalesce(F('completed_at'), Value(now, output_field=DateTimeField()))
    else:
        completed_at = None

    affected = tasks.update(
        status=new_status,
        completed_at=completed_at,
        updated_at=timezone.now(),
    )

    logger.info(
        'Batch status update to %s by user %s: %d task(s)', new_status, owner.pk, affected
    )
    return affected


def delete_task(task):
    task_id = task.pk
    task.delete()
    logger.info('Task %s deleted', task_id)


def batch_delete(owner, task_ids):
    """
    Delete every listed task that ``owner`` owns.

    Returns:
        int: Number of tasks deleted
    """
    clean_task_ids(task_ids)
    affected, _ = Task.objects.filter(owner=owner, pk__in=task_ids).delete()

    logger.info('Batch delete by user %s: %d task(s)', owner.pk, affected)
    return affected


# =============================================================================
# Categories
# =============================================================================

def _ensure_unique_category_name(owner, name, exclude_pk=None):
    duplicates = Category.objects.filter(owner=owner, name=name)
    if exclude_pk is not None:
        duplicates = duplicates.exclude(pk=exclude_pk)
    if duplicates.exists():
        raise Conflict(f'Category "{name}" already exists.')


def create_category(form, owner):
    """
    Create a category from a validated CategoryForm.

    Raises:
        Conflict: If the owner already has a category with this name
    """
    category = form.save(commit=False)
    _ensure_unique_category_name(owner, category.name)
    category.owner = owner
    category.save()

    logger.info('Category %s created by user %s', category.pk, owner.pk)
    return category


def update_category(form):
    """
    Save a validated CategoryForm bound to an existing category.

    Raises:
        Conflict: If another category of the same owner has the new name
    """
    category = form.save(commit=False)
    _ensure_unique_category_name(category.owner, category.name, exclude_pk=category.pk)
    category.save()
    return category


def delete_category(category, force=False):
    """
    Delete a category.

    Tasks in the category are never deleted. Without ``force`` a category
    that still has tasks is refused; with ``force`` its tasks are detached
    (category set to NULL) first.

    Raises:
        Conflict: If the category has tasks and force is False
    """
    with transaction.atomic():
        task_count = category.tasks.count()
        if task_count and not force:
            raise Conflict(
                f'Category has {task_count} task(s); pass force=true to delete it anyway.'
            )
        if task_count:
            category.tasks.update(category=None)

        category_id = category.pk
        category.delete()

    logger.info('Category %s deleted (%d task(s) detached)', category_id, task_count)


def get_category_stats(category):
    """
    Status breakdown of a category's tasks.

    Returns:
        dict: total/pending/in_progress/completed counts and completion_rate
        (0.0 for an empty category)
    """
    owner = category.owner
    total = count_tasks(owner, category=category.pk)
    completed = count_tasks(owner, category=category.pk, status=Task.Status.COMPLETED)

    return {
        'total_tasks': total,
        'pending_tasks': count_tasks(owner, category=category.pk, status=Task.Status.PENDING),
        'in_progress_tasks': count_tasks(
            owner, category=category.pk, status=Task.Status.IN_PROGRESS
        ),
        'completed_tasks': completed,
        'completion_rate': rate(completed, total),
    }
