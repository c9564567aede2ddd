"""
Views for updates app.

Includes:
- Personal dashboard ("Your Daily Updates") and team dashboard, both
  driven by one UpdateFeed
- Silent refresh endpoint polled by the dashboards
- Clear Cache action
- Update detail and edit
- CSV export of the team dashboard
"""

import csv
from dataclasses import dataclass

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger
from django.http import Http404, HttpResponse
from django.shortcuts import render, redirect, get_object_or_404
from django.urls import reverse
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.views.decorators.http import require_GET, require_POST

from apps.accounts.middleware import get_auth_redirect_response
from apps.accounts.session import SessionUnavailable, refresh_session_user, resolve_session_user
from apps.accounts.views import role_required
from apps.teams.services import get_teams_for_user
from .feed import FeedContext, UpdateFeed
from .filters import PERSONAL_TABS, TEAM_TABS
from .forms import DailyUpdateForm, FeedFilterForm
from .models import DailyUpdate
from .permissions import can_edit_update, can_view_update
from .recovery import RecoveryCache
from .services import export_rows, update_daily_update


# =============================================================================
# Feed Helpers
# =============================================================================

@dataclass(frozen=True)
class FeedScope:
    name: str
    title: str
    own_only: bool
    tabs: tuple
    template: str
    url_name: str

    @property
    def default_days(self):
        if self.own_only:
            return settings.FEED_PERSONAL_WINDOW_DAYS
        return settings.FEED_TEAM_WINDOW_DAYS


SCOPES = {
    'mine': FeedScope(
        name='mine',
        title='Your Daily Updates',
        own_only=True,
        tabs=PERSONAL_TABS,
        template='updates/my_updates.html',
        url_name='updates:my_updates',
    ),
    'team': FeedScope(
        name='team',
        title='Team Updates',
        own_only=False,
        tabs=TEAM_TABS,
        template='updates/team_updates.html',
        url_name='updates:team_updates',
    ),
}


def _get_scope(name):
    try:
        return SCOPES[name]
    except KeyError:
        raise Http404('Unknown dashboard')


def _refreshed_key(scope):
    return f'feed:{scope.name}:last_refreshed'


def _feed_context(request, scope, user):
    raw = request.session.get(_refreshed_key(scope)) if hasattr(request, 'session') else None
    context = FeedContext(user=user, last_refreshed=parse_datetime(raw) if raw else None)
    context.set_visibility(request.GET.get('visible', 'true').lower() != 'false')
    return context


def _remember_refresh(request, scope, feed):
    if feed.context.last_refreshed is not None:
        request.session[_refreshed_key(scope)] = feed.context.last_refreshed.isoformat()


def _build_feed(request, scope, user, *, params=None, notify=True):
    """Feed and filter form for ``scope`` as seen by ``user``."""
    params = request.GET if params is None else params
    form = FeedFilterForm(params or None, tabs=scope.tabs, default_days=scope.default_days)
    feed = UpdateFeed(
        _feed_context(request, scope, user),
        form.feed_filter(),
        own_only=scope.own_only,
        recovery=RecoveryCache.for_request(request),
        team_resolver=None if scope.own_only else get_teams_for_user,
        on_error=(lambda exc: messages.error(request, exc.user_message)) if notify else None,
    )
    return feed, form


def _paginate(items, page):
    paginator = Paginator(items, settings.FEED_PAGE_SIZE)
    try:
        return paginator.page(page or 1)
    except PageNotAnInteger:
        return paginator.page(1)
    except EmptyPage:
        return paginator.page(paginator.num_pages)


def _render_feed(request, scope, feed, form, *, partial=False):
    state = feed.state
    context = {
        'scope': scope,
        'feed': feed,
        'state': state,
        'stats': state.stats,
        'updates': _paginate(state.displayed, request.GET.get('page')),
        'filter_form': form,
        'feed_filter': feed.feed_filter,
        'tabs': scope.tabs,
        'teams': feed.teams or [],
        'last_refreshed': feed.context.last_refreshed,
    }

    if partial or request.htmx:
        return render(request, 'updates/partials/feed.html', context)
    return render(request, scope.template, context)


def _dashboard(request, scope):
    user = resolve_session_user(request)
    feed, form = _build_feed(request, scope, user)
    feed.open()
    _remember_refresh(request, scope, feed)
    return _render_feed(request, scope, feed, form)


# =============================================================================
# Dashboard Views
# =============================================================================

@login_required
def my_updates(request):
    """Personal dashboard: the current user's own updates, last 30 days."""
    return _dashboard(request, SCOPES['mine'])


@role_required('manager', 'admin')
def team_updates(request):
    """
    Team dashboard for managers and admins, last 7 days.

    Admins pick from every team, managers from the teams they manage.
    """
    return _dashboard(request, SCOPES['team'])


@require_GET
def feed_refresh(request, scope):
    """
    Silent refresh polled by the dashboards every FEED_POLL_INTERVAL seconds.

    Answers 204 (keep what is shown) unless fresh data was loaded. Without
    a verifiable session it serves the browser's recovery snapshot, if any.
    """
    scope = _get_scope(scope)

    try:
        user = resolve_session_user(request)
    except SessionUnavailable:
        try:
            user = refresh_session_user(request)
        except SessionUnavailable:
            user = None

    if user is None:
        feed, form = _build_feed(request, scope, None, notify=False)
        if feed.open():
            return _render_feed(request, scope, feed, form, partial=True)
        return get_auth_redirect_response(request, reverse('accounts:login'))

    if not scope.own_only and not user.is_manager_or_above():
        return HttpResponse(status=204)

    feed, form = _build_feed(request, scope, user, notify=False)
    if not feed.tick():
        return HttpResponse(status=204)

    _remember_refresh(request, scope, feed)
    return _render_feed(request, scope, feed, form, partial=True)


@login_required
@require_POST
def feed_clear(request, scope):
    """Clear Cache: drop the feed state and load again from the store."""
    scope = _get_scope(scope)
    user = resolve_session_user(request)
    if not scope.own_only and not user.is_manager_or_above():
        return redirect('updates:my_updates')

    request.session.pop(_refreshed_key(scope), None)
    feed, form = _build_feed(request, scope, user, params=request.POST)
    if feed.clear_cache():
        messages.success(request, 'Updates reloaded.')
    _remember_refresh(request, scope, feed)
    return _render_feed(request, scope, feed, form)


# =============================================================================
# Update Views
# =============================================================================

@login_required
def update_detail(request, pk):
    """View a single daily update."""
    update = get_object_or_404(DailyUpdate.objects.select_related('team'), pk=pk)

    if not can_view_update(request.user, update):
        messages.error(request, 'You do not have permission to view this update.')
        return redirect('updates:my_updates')

    template = 'updates/partials/update_detail.html' if request.htmx else 'updates/update_detail.html'
    return render(request, template, {'update': update})


@login_required
def update_edit(request, pk):
    """Edit an existing daily update."""
    update = get_object_or_404(DailyUpdate.objects.select_related('team'), pk=pk)

    if not can_view_update(request.user, update):
        messages.error(request, 'You do not have permission to view this update.')
        return redirect('updates:my_updates')

    if not can_edit_update(request.user, update):
        messages.error(request, 'You do not have permission to edit this update.')
        return redirect('updates:update_detail', pk=pk)

    if request.method == 'POST':
        form = DailyUpdateForm(request.POST)
        if form.is_valid():
            try:
                changes = update_daily_update(update, request.user, **form.cleaned_data)
            except PermissionDenied as e:
                messages.error(request, str(e))
                return redirect('updates:update_detail', pk=pk)
            except ValidationError as e:
                form.add_error(None, e)
            else:
                if changes:
                    messages.success(request, 'Update saved successfully.')
                else:
                    messages.info(request, 'No changes to save.')
                return redirect('updates:update_detail', pk=pk)
    else:
        form = DailyUpdateForm(initial=DailyUpdateForm.initial_for(update))

    return render(request, 'updates/update_form.html', {
        'form': form,
        'update': update,
        'title': f'Edit update of {update.employee_name}',
        'submit_text': 'Save Changes',
    })


# =============================================================================
# Export
# =============================================================================

@role_required('manager', 'admin')
def export_csv(request):
    """Download the team dashboard's displayed updates as CSV."""
    scope = SCOPES['team']
    feed, form = _build_feed(request, scope, resolve_session_user(request))
    feed.open()

    if feed.state.error is not None:
        return redirect(scope.url_name)

    filename = f'daily-updates-{timezone.localdate():%Y-%m-%d}.csv'
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    csv.writer(response).writerows(export_rows(feed.state.displayed))
    return response
