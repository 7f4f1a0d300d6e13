"""
Forms for tasks app.

Forms validate decoded JSON payloads rather than HTML posts.

Includes:
- TaskForm: Create and update tasks; category/project limited to the owner's
- TaskStatusForm: Change task status
- CategoryForm: Create and update categories
"""

import re

from django import forms
from django.core.exceptions import ValidationError

from .models import Category, Task

HEX_COLOR_RE = re.compile(r'#[0-9a-fA-F]{6}')

# JSON payload key -> form field name
TASK_PAYLOAD_ALIASES = {
    'category_id': 'category',
    'project_id': 'project',
}


def task_form_data(payload):
    """Map API payload keys (category_id, project_id) onto TaskForm fields."""
    data = dict(payload)
    for key, field in TASK_PAYLOAD_ALIASES.items():
        if key in data:
            data[field] = data.pop(key)
    return data


class TaskForm(forms.ModelForm):
    """
    Form for creating and updating tasks.

    Category and project choices are limited to the owner's own records, so
    a foreign or missing id fails validation like any other bad choice.
    """

    class Meta:
        model = Task
        fields = ['title', 'description', 'priority', 'due_date', 'category', 'project']

    def __init__(self, *args, owner=None, **kwargs):
        """
        Args:
            owner: User the task belongs to (required)
        """
        super().__init__(*args, **kwargs)
        self.owner = owner

        self.fields['category'].queryset = owner.categories.all()
        self.fields['project'].queryset = owner.projects.all()
        self.fields['priority'].required = False

    def clean_title(self):
        title = self.cleaned_data.get('title', '').strip()
        if not title:
            raise ValidationError('Task title cannot be empty.')
        return title

    def clean_priority(self):
        return self.cleaned_data.get('priority') or Task.Priority.MEDIUM


class TaskStatusForm(forms.Form):
    """Form for changing task status."""

    status = forms.ChoiceField(choices=Task.Status.choices)


class CategoryForm(forms.ModelForm):
    """
    Form for creating and updating categories.

    Name uniqueness per owner is enforced by the service layer (409), not
    here (400).
    """

    class Meta:
        model = Category
        fields = ['name', 'description', 'color']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['color'].required = False

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if not name:
            raise ValidationError('Category name cannot be empty.')
        return name

    def clean_color(self):
        color = self.cleaned_data.get('color') or Category.DEFAULT_COLOR
        if not HEX_COLOR_RE.fullmatch(color):
            raise ValidationError('Color must be a hex value like #007bff.')
        return color
