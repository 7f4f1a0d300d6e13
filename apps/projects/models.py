"""
Project model.

Projects group tasks under a named goal. Names are unique per owner.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Project(models.Model):
    """
    A named body of work owned by one user.

    Status is informational only: tasks can still be added to completed
    or archived projects.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        ARCHIVED = 'archived', 'Archived'

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='projects',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'project'
        verbose_name_plural = 'projects'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['owner', 'name'],
                name='unique_project_name_per_owner',
            ),
        ]
        indexes = [
            models.Index(fields=['owner', 'status'], name='project_owner_status_idx'),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        """Validate that the date range is ordered."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({
                'end_date': 'End date cannot be before start date.'
            })
