"""
Plain-dict representations of tasks and categories for JSON responses.

Datetimes are left as datetime objects; DjangoJSONEncoder renders them as
ISO-8601 strings.
"""


def serialize_category(category, task_count=None):
    data = {
        'id': category.pk,
        'name': category.name,
        'description': category.description,
        'color': category.color,
        'created_at': category.created_at,
        'updated_at': category.updated_at,
    }
    if task_count is not None:
        data['task_count'] = task_count
    return data


def serialize_project_ref(project):
    """Short project representation embedded in task payloads."""
    return {
        'id': project.pk,
        'name': project.name,
        'status': project.status,
    }


def serialize_task(task):
    """
    Full task representation.

    Category and project are embedded as small objects (or None); callers
    should select_related('category', 'project') when serializing lists.
    """
    return {
        'id': task.pk,
        'title': task.title,
        'description': task.description,
        'status': task.status,
        'priority': task.priority,
        'due_date': task.due_date,
        'completed_at': task.completed_at,
        'category_id': task.category_id,
        'category': serialize_category(task.category) if task.category_id else None,
        'project_id': task.project_id,
        'project': serialize_project_ref(task.project) if task.project_id else None,
        'is_overdue': task.is_overdue(),
        'created_at': task.created_at,
        'updated_at': task.updated_at,
    }
