"""
Daily update filters.

Two layers, shared by the personal and the team dashboard:
- DailyUpdateFilter: django-filter FilterSet that turns a fetch into a
  store query (created_at range, team, owner email)
- filter_updates: pure in-memory filter engine reducing a fetched set to
  the displayed subset (date range, team, tab)
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta

import django_filters
from django.db import models
from django.utils import timezone

from .models import DailyUpdate

RECENT_WINDOW = timedelta(days=7)


class FeedTab(models.TextChoices):
    ALL = 'all', 'All Updates'
    RECENT = 'recent', 'Recent'
    BLOCKERS = 'blockers', 'Blockers'
    COMPLETED = 'completed', 'Completed'
    IN_PROGRESS = 'in-progress', 'In Progress'
    BLOCKED = 'blocked', 'Blocked'


PERSONAL_TABS = (FeedTab.ALL, FeedTab.COMPLETED, FeedTab.IN_PROGRESS, FeedTab.BLOCKED)
TEAM_TABS = tuple(FeedTab)

# Tabs that select on a single status value
_STATUS_TABS = {
    FeedTab.COMPLETED: DailyUpdate.Status.COMPLETED,
    FeedTab.IN_PROGRESS: DailyUpdate.Status.IN_PROGRESS,
    FeedTab.BLOCKED: DailyUpdate.Status.BLOCKED,
}


# =============================================================================
# Date Helpers
# =============================================================================

def day_start(day):
    """Aware datetime for 00:00:00.000000 of ``day`` in the current time zone."""
    return timezone.make_aware(datetime.combine(day, time.min))


def day_end(day):
    """Aware datetime for 23:59:59.999999 of ``day`` in the current time zone."""
    return timezone.make_aware(datetime.combine(day, time.max))


def local_date(value):
    """Calendar date of ``value`` in the current time zone."""
    if timezone.is_aware(value):
        return timezone.localtime(value).date()
    return value.date()


def default_range(days, today=None):
    """``days``-long window ending today, both ends included."""
    today = today or timezone.localdate()
    return today - timedelta(days=days - 1), today


# =============================================================================
# Store Query
# =============================================================================

class DailyUpdateFilter(django_filters.FilterSet):
    """
    Store-side query for the update fetcher.

    Usage:
        filterset = DailyUpdateFilter(
            {'start': start, 'end': end, 'employee_email': email},
            queryset=DailyUpdate.objects.select_related('team'),
        )
        updates = filterset.qs
    """

    start = django_filters.DateFilter(method='filter_start', label='From')
    end = django_filters.DateFilter(method='filter_end', label='To')
    team = django_filters.UUIDFilter(field_name='team_id', label='Team')
    employee_email = django_filters.CharFilter(lookup_expr='iexact', label='Employee')

    class Meta:
        model = DailyUpdate
        fields = ['start', 'end', 'team', 'employee_email']

    def filter_start(self, queryset, name, value):
        """created_at at or after the start of the day."""
        if not value:
            return queryset
        return queryset.filter(created_at__gte=day_start(value))

    def filter_end(self, queryset, name, value):
        """created_at at or before the last instant of the day."""
        if not value:
            return queryset
        return queryset.filter(created_at__lte=day_end(value))


# =============================================================================
# Filter Engine
# =============================================================================

@dataclass(frozen=True)
class FeedFilter:
    """What the dashboard currently displays."""

    start: date
    end: date
    team_id: str = ''
    tab: str = FeedTab.ALL

    def with_team(self, team_id):
        return replace(self, team_id=str(team_id) if team_id else '')


def matches_date_range(update, start, end):
    return start <= local_date(update.created_at) <= end


def matches_team(update, team_id):
    if not team_id:
        return True
    return str(update.team_id or '') == str(team_id)


def matches_tab(update, tab, now):
    """
    Check ``update`` against a dashboard tab.

    Raises:
        ValueError: unknown tab
    """
    if tab == FeedTab.ALL:
        return True
    if tab == FeedTab.RECENT:
        return update.created_at >= now - RECENT_WINDOW
    if tab == FeedTab.BLOCKERS:
        return bool(update.blocker_type)
    if tab in _STATUS_TABS:
        return update.status == _STATUS_TABS[tab]
    raise ValueError(f'Unknown tab: {tab!r}')


def filter_updates(updates, feed_filter, now=None):
    """
    Reduce ``updates`` to the rows ``feed_filter`` selects.

    Keeps the input order and never mutates its input, so applying the
    same filter to its own output returns the same rows.

    Args:
        updates: iterable of UpdateRecord (or DailyUpdate)
        feed_filter: FeedFilter
        now: reference instant for the 'recent' tab (defaults to now)

    Returns:
        New list of the selected rows
    """
    if feed_filter.tab not in FeedTab.values:
        raise ValueError(f'Unknown tab: {feed_filter.tab!r}')

    now = now or timezone.now()
    return [
        update for update in updates
        if matches_date_range(update, feed_filter.start, feed_filter.end)
        and matches_team(update, feed_filter.team_id)
        and matches_tab(update, feed_filter.tab, now)
    ]
