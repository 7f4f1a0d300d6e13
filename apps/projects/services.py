"""
Service layer for projects app.

Services:
- create_project / update_project: Save a validated ProjectForm
- delete_project: Remove a project, detaching its tasks when forced
- annotate_progress: Add task totals to a project queryset
- get_project_stats: Status and priority breakdown for one project
"""

import logging

from django.db import transaction
from django.db.models import Count, Q

from apps.core.exceptions import Conflict
from apps.reports.aggregates import count_tasks
from apps.reports.rates import rate
from apps.tasks.models import Task

from .models import Project

logger = logging.getLogger(__name__)


def _ensure_unique_project_name(owner, name, exclude_pk=None):
    duplicates = Project.objects.filter(owner=owner, name=name)
    if exclude_pk is not None:
        duplicates = duplicates.exclude(pk=exclude_pk)
    if duplicates.exists():
        raise Conflict(f'Project "{name}" already exists.')


def create_project(form, owner):
    """
    Create a project from a validated ProjectForm.

    Raises:
        Conflict: If the owner already has a project with this name
    """
    project = form.save(commit=False)
    _ensure_unique_project_name(owner, project.name)
    project.owner = owner
    project.save()

    logger.info('Project %s created by user %s', project.pk, owner.pk)
    return project


def update_project(form):
    """
    Save a validated ProjectForm bound to an existing project.

    Raises:
        Conflict: If another project of the same owner has the new name
    """
    project = form.save(commit=False)
    _ensure_unique_project_name(project.owner, project.name, exclude_pk=project.pk)
    project.save()
    return project


def delete_project(project, force=False):
    """
    Delete a project.

    Tasks are never deleted with their project. Without ``force`` a project
    that still has tasks is refused; with ``force`` its tasks are detached
    first.

    Raises:
        Conflict: If the project has tasks and force is False
    """
    with transaction.atomic():
        tasks = Task.objects.filter(project=project, owner=project.owner_id)
        task_count = tasks.count()
        if task_count and not force:
            raise Conflict(
                f'Project has {task_count} task(s); pass force=true to delete it anyway.'
            )
        if task_count:
            tasks.update(project=None)

        project_id = project.pk
        project.delete()

    logger.info('Project %s deleted (%d task(s) detached)', project_id, task_count)


def annotate_progress(queryset):
    """Annotate projects with task_total and task_completed."""
    return queryset.annotate(
        task_total=Count('tasks'),
        task_completed=Count('tasks', filter=Q(tasks__status=Task.Status.COMPLETED)),
    )


def progress_stats(project):
    """total_tasks/completed_tasks/progress for a project from annotate_progress()."""
    return {
        'total_tasks': project.task_total,
        'completed_tasks': project.task_completed,
        'progress': rate(project.task_completed, project.task_total),
    }


def get_project_stats(project):
    """
    Status and priority breakdown of a project's tasks.

    Returns:
        dict: total/pending/in_progress/completed counts, completion_rate and
        priority_stats ({low, medium, high, urgent} counts)
    """
    owner = project.owner
    total = count_tasks(owner, project=project.pk)
    completed = count_tasks(owner, project=project.pk, status=Task.Status.COMPLETED)

    return {
        'total_tasks': total,
        'pending_tasks': count_tasks(owner, project=project.pk, status=Task.Status.PENDING),
        'in_progress_tasks': count_tasks(
            owner, project=project.pk, status=Task.Status.IN_PROGRESS
        ),
        'completed_tasks': completed,
        'completion_rate': rate(completed, total),
        'priority_stats': {
            priority.value: count_tasks(owner, project=project.pk, priority=priority.value)
            for priority in Task.Priority
        },
    }
