"""
Context processors for updates app.

Provides permission flags for navigation and the polling cadence used by
the dashboards' silent refresh.
"""

from django.conf import settings


def user_permissions(request):
    """
    Context processor to provide user permission flags for templates.
    """
    context = {
        'is_admin': False,
        'is_manager_or_above': False,
    }

    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return context

    context['is_admin'] = user.is_admin()
    context['is_manager_or_above'] = user.is_manager_or_above()
    return context


def feed_settings(request):
    """Polling interval (seconds) for the hx-trigger of the dashboards."""
    return {
        'feed_poll_interval': settings.FEED_POLL_INTERVAL,
    }
