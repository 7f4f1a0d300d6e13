"""
Forms for projects app.
"""

from django import forms
from django.core.exceptions import ValidationError

from .models import Project


class ProjectForm(forms.ModelForm):
    """
    Form for creating and updating projects.

    Status is optional; a missing status keeps the current one (active for
    new projects). Name uniqueness per owner is checked by the service layer.
    """

    class Meta:
        model = Project
        fields = ['name', 'description', 'status', 'start_date', 'end_date']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['status'].required = False

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if not name:
            raise ValidationError('Project name cannot be empty.')
        return name

    def clean_status(self):
        return self.cleaned_data.get('status') or self.instance.status or Project.Status.ACTIVE
