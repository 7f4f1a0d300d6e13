"""
Views for categories.

JSON endpoints under /api/categories/, all scoped to request.user.
"""

from django.core.exceptions import ValidationError
from django.db.models import Count
from django.shortcuts import get_object_or_404

from apps.core.decorators import api_login_required, api_methods, is_true, parse_json_body
from apps.core.exceptions import Conflict
from apps.core.responses import (
    error_response,
    form_error_response,
    success_response,
    validation_error_response,
)

from .filters import filter_categories
from .forms import CategoryForm
from .models import Category
from .serializers import serialize_category, serialize_task
from .services import (
    create_category,
    delete_category,
    get_category_stats,
    update_category,
)


def get_owned_category(request, pk):
    return get_object_or_404(Category, pk=pk, owner=request.user)


@api_login_required
@api_methods('GET', 'POST')
def category_list_view(request):
    """
    GET: All of the user's categories (not paginated).

    Query params:
        with_count: include task_count per category
        order_by, order_dir: default created_at asc

    POST: Create a category. Duplicate names get a 409.
    """
    if request.method == 'POST':
        return _create_category(request)

    categories = filter_categories(request.user, request.GET)
    with_count = is_true(request.GET.get('with_count'))
    if with_count:
        categories = categories.annotate(task_count=Count('tasks'))

    return success_response([
        serialize_category(c, task_count=c.task_count if with_count else None)
        for c in categories
    ])


def _create_category(request):
    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = CategoryForm(payload)
    if not form.is_valid():
        return form_error_response(form)

    try:
        category = create_category(form, request.user)
    except Conflict as e:
        return error_response(409, 'Category name already exists', e)

    return success_response(serialize_category(category), message='Category created', status=201)


@api_login_required
@api_methods('GET', 'PUT', 'DELETE')
def category_detail_view(request, pk):
    """
    GET: Category detail; with_tasks=true embeds its tasks.
    PUT: Update name, description, color.
    DELETE: Remove the category. A category with tasks needs force=true,
            which detaches the tasks (they are not deleted).
    """
    category = get_owned_category(request, pk)

    if request.method == 'GET':
        data = serialize_category(category)
        if is_true(request.GET.get('with_tasks')):
            tasks = category.tasks.filter(owner=request.user).select_related('category', 'project')
            data['tasks'] = [serialize_task(t) for t in tasks]
        return success_response(data)

    if request.method == 'DELETE':
        try:
            delete_category(category, force=is_true(request.GET.get('force')))
        except Conflict as e:
            return error_response(409, 'Category still has tasks', e)
        return success_response({'id': pk}, message='Category deleted')

    try:
        payload = parse_json_body(request)
    except ValidationError as e:
        return validation_error_response(e)

    form = CategoryForm(payload, instance=category)
    if not form.is_valid():
        return form_error_response(form)

    try:
        category = update_category(form)
    except Conflict as e:
        return error_response(409, 'Category name already exists', e)

    return success_response(serialize_category(category), message='Category updated')


@api_login_required
@api_methods('GET')
def category_stats_view(request, pk):
    """Status breakdown and completion rate for one category."""
    category = get_owned_category(request, pk)

    stats = get_category_stats(category)
    return success_response({'category': serialize_category(category), **stats})
