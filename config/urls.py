"""
URL configuration for task_tracker project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings

from apps.core.views import health_view

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_view, name='health'),

    # API
    path('api/tasks/', include('apps.tasks.urls', namespace='tasks')),
    path('api/categories/', include('apps.tasks.category_urls', namespace='categories')),
    path('api/projects/', include('apps.projects.urls', namespace='projects')),
    path('api/stats/', include('apps.reports.urls', namespace='reports')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Task Tracker Administration'
admin.site.site_title = 'Task Tracker Admin'
admin.site.index_title = 'Welcome to Task Tracker Admin'
