"""
Views for projects app.

JSON endpoints under /api/projects/, all scoped to request.user:
- Project list (filtered, sorted, paginated) and creation
- Project detail, update and delete
- A project's tasks and its statistics
"""

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404

from apps.core.decorators import api_login_required, api_methods, is_true, parse_json_body
from apps.core.exceptions import Conflict
from apps.core.responses import (
    error_response,
    form_error_response,
    paginate,
    paginated_response,
    success_response,
    validation_error_response,
)
from apps.tasks.filters import TASK_SORT_FIELDS, TaskFilter, apply_sorting, get_order_params
from apps.tasks.serializers import serialize_task

from .filters import PROJECT_SORT_FIELDS, ProjectFilter
from .forms import ProjectForm
from .models import Project
from .serializers import serialize_project
from .services import (
    annotate_progress,
    create_project,
    delete_project,
    get_project_stats,
    progress_stats,
    update_project,
)


def get_owned_project(request, pk):
    return get_object_or_404(Project, pk=pk, owner=request.user)


@api_login_required
@api_methods('GET', 'POST')
def project_list_view(request):
    """
    GET: Paginated project list.

    Query params:
        status, keyword: see ProjectFilter
        with_stats: add total_tasks, completed_tasks and progress
        order_by, order_dir: default created_at desc
        page, page_size: see get_pagination_params

    POST: Create a project. Duplicate names get a 409.
    """
    if request.method == 'POST':
        return _create_project(request)

    queryset = ProjectFilter(
        request.GET, queryset=Project.objects.filter(owner=request.user)
    ).qs
    field, direction = get_order_params(request.GET, PROJECT_SORT_FIELDS)
    queryset = apply_sorting(queryset, field, direction)

    with_stats = is_true(request.GET.get('with_stats'))
    if with_stats:
        queryset = annotate_progress(queryset)

    projects, total, page, page_size = paginate(request, queryset)
    items = [
        serialize_project(p, stats=progress_stats(p) if with_stats else None)
        for p in projects
    ]
    return paginated_response(items, total, page, page_size)


def _create_project(request):
    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = ProjectForm(payload)
    if not form.is_valid():
        return form_error_response(form)

    try:
        project = create_project(form, request.user)
    except Conflict as e:
        return error_response(409, 'Project name already exists', e)

    return success_response(serialize_project(project), message='Project created', status=201)


@api_login_required
@api_methods('GET', 'PUT', 'DELETE')
def project_detail_view(request, pk):
    """
    GET: Project detail; with_tasks=true embeds its tasks.
    PUT: Update name, description, status, start_date, end_date.
    DELETE: Remove the project. A project with tasks needs force=true,
            which detaches the tasks (they are not deleted).
    """
    project = get_owned_project(request, pk)

    if request.method == 'GET':
        data = serialize_project(project)
        if is_true(request.GET.get('with_tasks')):
            tasks = project.tasks.filter(owner=request.user).select_related('category', 'project')
            data['tasks'] = [serialize_task(t) for t in tasks]
        return success_response(data)

    if request.method == 'DELETE':
        try:
            delete_project(project, force=is_true(request.GET.get('force')))
        except Conflict as e:
            return error_response(409, 'Project still has tasks', e)
        return success_response({'id': pk}, message='Project deleted')

    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = ProjectForm(payload, instance=project)
    if not form.is_valid():
        return form_error_response(form)

    try:
        project = update_project(form)
    except Conflict as e:
        return error_response(409, 'Project name already exists', e)

    return success_response(serialize_project(project), message='Project updated')


@api_login_required
@api_methods('GET')
def project_tasks_view(request, pk):
    """
    Paginated tasks of one project.

    Query params:
        status, priority: unknown values are ignored
        order_by, order_dir: default created_at desc
    """
    project = get_owned_project(request, pk)

    queryset = project.tasks.filter(owner=request.user).select_related('category', 'project')
    queryset = TaskFilter(
        {key: request.GET[key] for key in ('status', 'priority') if key in request.GET},
        queryset=queryset,
    ).qs
    field, direction = get_order_params(request.GET, TASK_SORT_FIELDS)
    queryset = apply_sorting(queryset, field, direction)

    tasks, total, page, page_size = paginate(request, queryset)
    return paginated_response([serialize_task(t) for t in tasks], total, page, page_size)


@api_login_required
@api_methods('GET')
def project_stats_view(request, pk):
    """Status/priority breakdown and completion rate for one project."""
    project = get_owned_project(request, pk)
    return success_response({
        'project': serialize_project(project),
        **get_project_stats(project),
    })
