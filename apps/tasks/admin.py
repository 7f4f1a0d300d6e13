"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html

from .models import Category, Task


class TaskInline(admin.TabularInline):
    """Read-only list of a category's tasks."""
    model = Task
    fk_name = 'category'
    extra = 0
    fields = ('title', 'status', 'priority', 'due_date', 'completed_at')
    readonly_fields = fields
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    """Admin for Category model."""

    list_display = ('name', 'owner', 'color_display', 'task_count', 'created_at')
    list_filter = ('created_at',)
    search_fields = ('name', 'description', 'owner__email')
    ordering = ('owner', 'name')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [TaskInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('owner').annotate(
            _task_count=Count('tasks')
        )

    def color_display(self, obj):
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            obj.color, obj.color
        )
    color_display.short_description = 'Color'

    def task_count(self, obj):
        return obj._task_count
    task_count.short_description = 'Tasks'
    task_count.admin_order_field = '_task_count'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'title', 'owner', 'status_display', 'priority_display',
        'category', 'project', 'due_date', 'is_overdue_display', 'created_at'
    )
    list_filter = ('status', 'priority', 'created_at', 'due_date')
    search_fields = ('title', 'description', 'owner__email')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('completed_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('title', 'description', 'owner')
        }),
        ('Grouping', {
            'fields': ('category', 'project')
        }),
        ('Status & Priority', {
            'fields': ('status', 'priority', 'due_date')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'completed_at'),
            'classes': ('collapse',),
        }),
    )

    actions = ['mark_completed', 'mark_pending']

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('owner', 'category', 'project')

    def save_model(self, request, obj, form, change):
        """Keep completed_at in step with a status edited in the admin."""
        obj.set_status(obj.status)
        super().save_model(request, obj, form, change)

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'pending': '#FFA500',
            'in_progress': '#3498db',
            'completed': '#27ae60',
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def priority_display(self, obj):
        """Display priority with color coding."""
        colors = {
            'low': '#95a5a6',
            'medium': '#3498db',
            'high': '#e67e22',
            'urgent': '#e74c3c',
        }
        color = colors.get(obj.priority, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_priority_display()
        )
    priority_display.short_description = 'Priority'
    priority_display.admin_order_field = 'priority'

    def is_overdue_display(self, obj):
        if obj.is_overdue():
            return format_html('<span style="color: red;">{}</span>', 'OVERDUE')
        return ''
    is_overdue_display.short_description = 'Overdue'

    @admin.action(description='Mark selected tasks as completed')
    def mark_completed(self, request, queryset):
        self._set_status(request, queryset, Task.Status.COMPLETED)

    @admin.action(description='Mark selected tasks as pending')
    def mark_pending(self, request, queryset):
        self._set_status(request, queryset, Task.Status.PENDING)

    def _set_status(self, request, queryset, status):
        count = 0
        for task in queryset:
            task.set_status(status)
            task.save(update_fields=['status', 'completed_at', 'updated_at'])
            count += 1
        self.message_user(request, f'{count} task(s) marked as {status}.')
