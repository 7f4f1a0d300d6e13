"""
Plain-dict representation of projects for JSON responses.
"""


def serialize_project(project, stats=None):
    """
    Args:
        project: Project instance
        stats: Optional dict merged into the payload (e.g. total_tasks,
            completed_tasks, progress)
    """
    data = {
        'id': project.pk,
        'name': project.name,
        'description': project.description,
        'status': project.status,
        'start_date': project.start_date,
        'end_date': project.end_date,
        'created_at': project.created_at,
        'updated_at': project.updated_at,
    }
    if stats:
        data.update(stats)
    return data
