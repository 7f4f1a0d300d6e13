"""
Views for tasks app.

JSON endpoints under /api/tasks/, all scoped to request.user:
- Task list (filtered, sorted, paginated) and creation
- Task detail, update and delete
- Status changes, single and batch
- Batch delete
"""

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404

from apps.core.decorators import api_login_required, api_methods, parse_json_body
from apps.core.responses import (
    form_error_response,
    paginate,
    paginated_response,
    success_response,
    validation_error_response,
)

from .filters import TASK_SORT_FIELDS, TaskFilter, apply_sorting, get_order_params
from .forms import TaskForm, TaskStatusForm, task_form_data
from .models import Task
from .serializers import serialize_task
from .services import (
    batch_delete,
    batch_update_status,
    change_status,
    create_task,
    delete_task,
    update_task,
)


def get_owned_task(request, pk):
    """Fetch one of the user's tasks; anything else is a 404."""
    return get_object_or_404(
        Task.objects.select_related('category', 'project'),
        pk=pk,
        owner=request.user,
    )


# =============================================================================
# Collection Views
# =============================================================================

@api_login_required
@api_methods('GET', 'POST')
def task_list_view(request):
    """
    GET: Paginated task list.

    Query params:
        status, priority, category_id, project_id, keyword,
        start_date, end_date, due_before: see TaskFilter
        order_by, order_dir: default created_at desc
        page, page_size: see get_pagination_params

    POST: Create a task from a JSON body.
    """
    if request.method == 'POST':
        return _create_task(request)

    queryset = Task.objects.filter(owner=request.user).select_related('category', 'project')
    queryset = TaskFilter(request.GET, queryset=queryset).qs

    field, direction = get_order_params(request.GET, TASK_SORT_FIELDS)
    queryset = apply_sorting(queryset, field, direction)

    tasks, total, page, page_size = paginate(request, queryset)
    return paginated_response([serialize_task(t) for t in tasks], total, page, page_size)


def _create_task(request):
    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = TaskForm(
        task_form_data(payload),
        instance=Task(owner=request.user),
        owner=request.user,
    )
    if not form.is_valid():
        return form_error_response(form)

    task = create_task(form, request.user)
    return success_response(serialize_task(task), message='Task created', status=201)


# =============================================================================
# Detail Views
# =============================================================================

@api_login_required
@api_methods('GET', 'PUT', 'DELETE')
def task_detail_view(request, pk):
    """
    GET: Task detail.
    PUT: Replace the editable fields (title, description, priority,
         due_date, category_id, project_id). Status is changed separately.
    DELETE: Remove the task.
    """
    task = get_owned_task(request, pk)

    if request.method == 'GET':
        return success_response(serialize_task(task))

    if request.method == 'DELETE':
        delete_task(task)
        return success_response({'id': pk}, message='Task deleted')

    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = TaskForm(task_form_data(payload), instance=task, owner=request.user)
    if not form.is_valid():
        return form_error_response(form)

    task = update_task(form)
    return success_response(serialize_task(task), message='Task updated')


@api_login_required
@api_methods('PATCH')
def task_status_view(request, pk):
    """
    Change a task's status.

    Body:
        {"status": "pending" | "in_progress" | "completed"}
    """
    task = get_owned_task(request, pk)

    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = TaskStatusForm(payload)
    if not form.is_valid():
        return form_error_response(form)

    task = change_status(task, form.cleaned_data['status'])
    return success_response(serialize_task(task), message='Status updated')


# =============================================================================
# Batch Views
# =============================================================================

@api_login_required
@api_methods('PATCH')
def batch_status_view(request):
    """
    Change status of several tasks.

    Body:
        {"task_ids": [1, 2, 3], "status": "completed"}

    Ids that are missing or belong to other users are skipped.
    """
    try:
        payload = parse_json_body(request)
        affected = batch_update_status(
            request.user, payload.get('task_ids'), payload.get('status')
        )
    except ValidationError as e:
        return validation_error_response(e)

    return success_response({'affected_count': affected}, message='Tasks updated')


@api_login_required
@api_methods('DELETE')
def batch_delete_view(request):
    """
    Delete several tasks.

    Body:
        {"task_ids": [1, 2, 3]}
    """
    try:
        payload = parse_json_body(request)
        affected = batch_delete(request.user, payload.get('task_ids'))
    except ValidationError as e:
        return validation_error_response(e)

    return success_response({'affected_count': affected}, message='Tasks deleted')
