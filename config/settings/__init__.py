"""
Settings package for task_tracker project.

Pick a module explicitly through DJANGO_SETTINGS_MODULE:
- config.settings.development (default in manage.py)
- config.settings.test
- config.settings.production
"""
