"""
Custom template tags and filters for updates app.

Usage in templates:
    {% load update_tags %}

    {# Filters #}
    {% if update|can_edit:request.user %}
    {{ update.status|status_display }}
    {{ update.status|status_class }}

    {# Tags #}
    {% status_badge update %}
    {% priority_badge update %}
    {% blocker_badge update %}
"""

from django import template
from django.utils.html import format_html

from apps.updates.models import DailyUpdate

register = template.Library()

STATUS_LABELS = dict(DailyUpdate.Status.choices)


# =============================================================================
# FILTERS
# =============================================================================

@register.filter
def can_edit(update, user):
    """
    Check if user can edit the update.

    The list rows and the detail page both render their edit link through
    this filter.

    Usage: {% if update|can_edit:request.user %}
    """
    if not update or not user:
        return False

    from apps.updates.permissions import can_edit_update
    return can_edit_update(user, update)


@register.filter
def status_display(status):
    """
    Return human-readable status label.

    Usage: {{ update.status|status_display }}
    """
    return STATUS_LABELS.get(status, status)


@register.filter
def status_class(status):
    """
    Return CSS class for update status.

    Usage: {{ update.status|status_class }}
    """
    return f'status-{status}' if status in STATUS_LABELS else ''


# =============================================================================
# SIMPLE TAGS - Badge Generation
# =============================================================================

@register.simple_tag
def status_badge(update):
    """
    Generate HTML badge for update status.

    Usage: {% status_badge update %}
    """
    if not update or not update.status:
        return ''

    colors = {
        'to-do': 'bg-gray-100 text-gray-800',
        'in-progress': 'bg-blue-100 text-blue-800',
        'completed': 'bg-green-100 text-green-800',
        'blocked': 'bg-red-100 text-red-800',
        'reopen': 'bg-yellow-100 text-yellow-800',
    }

    return format_html(
        '<span class="badge {}">{}</span>',
        colors.get(update.status, 'bg-gray-100 text-gray-800'),
        status_display(update.status),
    )


@register.simple_tag
def priority_badge(update):
    """
    Generate HTML badge for update priority.

    Usage: {% priority_badge update %}
    """
    if not update or not update.priority:
        return ''

    colors = {
        'Low': 'bg-green-100 text-green-800',
        'Medium': 'bg-yellow-100 text-yellow-800',
        'High': 'bg-red-100 text-red-800',
    }

    return format_html(
        '<span class="badge {}">{}</span>',
        colors.get(update.priority, 'bg-gray-100 text-gray-800'),
        update.priority,
    )


@register.simple_tag
def blocker_badge(update):
    """
    Generate HTML badge for the blocker type, empty without one.

    Usage: {% blocker_badge update %}
    """
    if not update or not update.blocker_type:
        return ''

    colors = {
        'Risk': 'bg-amber-100 text-amber-800',
        'Issue': 'bg-red-100 text-red-800',
        'Dependency': 'bg-purple-100 text-purple-800',
        'Blocker': 'bg-red-200 text-red-900',
    }

    return format_html(
        '<span class="badge {}" title="{}">{}</span>',
        colors.get(update.blocker_type, 'bg-gray-100 text-gray-800'),
        update.blocker_description or '',
        update.blocker_type,
    )
