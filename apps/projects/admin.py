"""
Admin configuration for projects app.
"""

from django.contrib import admin

from .models import Project
from .services import annotate_progress, progress_stats


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    """Admin for Project model."""

    list_display = (
        'name', 'owner', 'status', 'start_date', 'end_date',
        'task_total', 'progress_display', 'created_at'
    )
    list_filter = ('status', 'created_at')
    search_fields = ('name', 'description', 'owner__email')
    ordering = ('-created_at',)
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('name', 'description', 'owner')
        }),
        ('Schedule', {
            'fields': ('status', 'start_date', 'end_date')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        return annotate_progress(super().get_queryset(request).select_related('owner'))

    def task_total(self, obj):
        return obj.task_total
    task_total.short_description = 'Tasks'
    task_total.admin_order_field = 'task_total'

    def progress_display(self, obj):
        return f"{progress_stats(obj)['progress']:.0f}%"
    progress_display.short_description = 'Progress'
