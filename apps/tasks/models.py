"""
Task management models.

Models:
- Category: Owner-defined label for grouping tasks
- Task: Unit of work with status workflow, priority and optional due date
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class Category(models.Model):
    """
    Owner-defined task category.

    Names are unique per owner. Deleting a category detaches its tasks
    (category becomes NULL) rather than deleting them.
    """

    DEFAULT_COLOR = '#007bff'

    name = models.CharField(max_length=50)
    description = models.TextField(blank=True, default='')
    color = models.CharField(max_length=7, default=DEFAULT_COLOR)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='categories',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'category'
        verbose_name_plural = 'categories'
        ordering = ['created_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['owner', 'name'],
                name='unique_category_name_per_owner',
            ),
        ]

    def __str__(self):
        return self.name


class Task(models.Model):
    """
    Main Task model.

    Status workflow: pending -> in_progress -> completed, with any status
    reachable from any other (reopening a completed task is allowed).

    Invariant: completed_at is set if and only if status == completed.
    Use set_status() rather than assigning status directly.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    # Core fields
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')

    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
        db_index=True,
    )

    # Relationships
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tasks',
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks',
    )
    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks',
    )

    # Deadline and timing
    due_date = models.DateTimeField(null=True, blank=True, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', 'status'], name='task_owner_status_idx'),
            models.Index(fields=['owner', 'created_at'], name='task_owner_created_idx'),
            models.Index(fields=['owner', 'completed_at'], name='task_owner_completed_idx'),
            models.Index(fields=['owner', 'due_date'], name='task_owner_due_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(status='completed', completed_at__isnull=False)
                    | (~models.Q(status='completed') & models.Q(completed_at__isnull=True))
                ),
                name='task_completed_at_matches_status',
            ),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        """Validate that category and project belong to the task owner."""
        errors = {}
        if self.category_id and self.category.owner_id != self.owner_id:
            errors['category'] = 'Category does not exist or belongs to another user.'
        if self.project_id and self.project.owner_id != self.owner_id:
            errors['project'] = 'Project does not exist or belongs to another user.'
        if errors:
            raise ValidationError(errors)

    # ==========================================================================
    # Status Properties
    # ==========================================================================

    @property
    def is_completed(self):
        return self.status == self.Status.COMPLETED

    def is_overdue(self, now=None):
        """Check if task is past its due date and not completed."""
        if not self.due_date or self.is_completed:
            return False
        now = now or timezone.now()
        return self.due_date < now

    @property
    def completion_hours(self):
        """Hours from creation to completion, or None if not completed."""
        if not self.completed_at or not self.created_at:
            return None
        return (self.completed_at - self.created_at).total_seconds() / 3600

    # ==========================================================================
    # Status Workflow Methods
    # ==========================================================================

    def set_status(self, new_status, now=None):
        """
        Change status while keeping completed_at consistent.

        Entering completed stamps completed_at (an existing stamp is kept);
        any other status clears it. Does not save.

        Raises:
            ValidationError: If new_status is not a known status
        """
        if new_status not in self.Status.values:
            raise ValidationError(f"Invalid status: {new_status}")

        self.status = new_status
        if new_status == self.Status.COMPLETED:
            if self.completed_at is None:
                self.completed_at = now or timezone.now()
        else:
            self.completed_at = None
