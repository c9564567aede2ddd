"""
Settings package for the daily_updates project.

Select a module explicitly through DJANGO_SETTINGS_MODULE:
- config.settings.development (default in manage.py and wsgi.py)
- config.settings.production
- config.settings.test (pytest)
"""
