from django.http import JsonResponse
from django.views.decorators.http import require_GET


@require_GET
def health_view(request):
    """Liveness probe; no authentication, no envelope."""
    return JsonResponse({
        'status': 'ok',
        'message': 'Personal Task Tracker API is running',
    })
