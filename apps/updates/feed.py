"""
Update feed controller.

One ``UpdateFeed`` drives both dashboards. It owns the fetched set, the
displayed subset, the stats, the loading flag and the error state, and
coordinates the team lookup, the fetcher, the filter engine, the stats
aggregator and the recovery cache.

State that a browser would keep implicitly (who is logged in, whether the
page is visible, when data was last refreshed) lives in ``FeedContext``
and is passed in explicitly.
"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone

from .exceptions import FeedError, FetchTimeout, RecoveryFailed
from .fetcher import UpdateFetcher, UpdateQuery
from .filters import filter_updates
from .services import EMPTY_STATS, compute_stats

logger = logging.getLogger(__name__)


@dataclass
class FeedContext:
    """
    Who is looking, whether they can see the page, and when the data was
    last refreshed from the store.
    """

    user: object = None
    visible: bool = True
    last_refreshed: datetime | None = None

    def set_visibility(self, visible):
        self.visible = bool(visible)


@dataclass(frozen=True)
class PendingFetch:
    token: int
    query: UpdateQuery
    silent: bool = False


@dataclass
class FeedState:
    updates: list = field(default_factory=list)
    displayed: list = field(default_factory=list)
    stats: object = EMPTY_STATS
    is_loading: bool = False
    error: FeedError | None = None
    data_loaded: bool = False
    recovered: bool = False


class UpdateFeed:
    """
    Controller behind the personal and the team dashboard.

    Usage:
        feed = UpdateFeed(context, feed_filter, own_only=True)
        feed.open()
        feed.state.displayed, feed.state.stats
    """

    def __init__(self, context, feed_filter, *, own_only=False, fetcher=None,
                 recovery=None, team_resolver=None, on_error=None,
                 refresh_interval=None, clock=timezone.now):
        self.context = context
        self.feed_filter = feed_filter
        self.own_only = own_only
        self.scope = 'mine' if own_only else 'team'
        self.fetcher = fetcher or UpdateFetcher()
        self.recovery = recovery
        self.team_resolver = team_resolver
        self.on_error = on_error
        self.refresh_interval = timedelta(
            seconds=settings.FEED_REFRESH_INTERVAL if refresh_interval is None else refresh_interval
        )
        self.clock = clock
        self.state = FeedState()
        self.teams = None
        self._tokens = itertools.count(1)
        self._latest_token = 0

    # ==========================================================================
    # Queries
    # ==========================================================================

    def resolve_teams(self):
        """
        Teams the user may pick, looked up once per feed.

        Raises:
            QueryFailed: the team store could not be read
        """
        if self.teams is None:
            self.teams = list(self.team_resolver(self.context.user)) if self.team_resolver else []
        return self.teams

    def build_query(self):
        """
        Query for the current user and filter.

        A manager with exactly one team gets that team selected when no
        team is picked.
        """
        user = self.context.user
        team_ids = []
        if not self.own_only:
            teams = self.resolve_teams()
            team_ids = [str(team.pk) for team in teams]
            if user.role == 'manager' and len(teams) == 1 and not self.feed_filter.team_id:
                self.feed_filter = self.feed_filter.with_team(team_ids[0])
        return UpdateQuery.for_user(
            user, self.feed_filter, own_only=self.own_only, manager_team_ids=team_ids
        )

    # ==========================================================================
    # Request tokens
    # ==========================================================================

    def start_fetch(self, *, silent=False):
        """Issue a new request token; older in-flight requests become stale."""
        token = next(self._tokens)
        self._latest_token = token
        return PendingFetch(token=token, query=self.build_query(), silent=silent)

    def is_current(self, pending):
        return pending.token == self._latest_token

    def finish_fetch(self, pending, records):
        """
        Apply the result of ``pending`` unless a newer request was issued.

        Returns:
            True when the records replaced the fetched set
        """
        if not self.is_current(pending):
            logger.info('Discarding stale update fetch #%d (latest #%d)',
                        pending.token, self._latest_token)
            return False

        self.state.updates = list(records)
        self.state.data_loaded = True
        self.state.recovered = False
        self.state.error = None
        self.context.last_refreshed = self.clock()
        self.apply_filter()

        if self.recovery is not None:
            self.recovery.save(self.context.user, self.state.updates, self.scope)
        return True

    # ==========================================================================
    # Operations
    # ==========================================================================

    def open(self):
        """Initial load, or recovery when there is no verified user."""
        if self.context.user is None:
            return self.recover()
        return self.load()

    def load(self, *, silent=False):
        """
        Fetch from the store and apply the result.

        Interactive loads show the loading flag and report failures through
        ``on_error``. Silent loads never touch the loading flag or the
        error state; a failure just leaves the displayed data as it was.

        Returns:
            True when fresh data was applied
        """
        if not silent:
            self.state.is_loading = True
            self.state.error = None
        try:
            pending = self.start_fetch(silent=silent)
            records = self.fetcher.fetch(pending.query, interactive=not silent)
        except FeedError as exc:
            if silent:
                logger.info('Silent refresh failed: %s', exc)
                return False
            self._fail(exc)
            if isinstance(exc, FetchTimeout) and not self.state.data_loaded:
                self.recover()
            return False
        finally:
            if not silent:
                self.state.is_loading = False
        return self.finish_fetch(pending, records)

    def apply_filter(self, feed_filter=None):
        """Re-derive the displayed set and stats from the fetched set."""
        if feed_filter is not None:
            self.feed_filter = feed_filter
        try:
            displayed = filter_updates(self.state.updates, self.feed_filter, now=self.clock())
            stats = compute_stats(displayed)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.exception('Could not filter %d update(s)', len(self.state.updates))
            self.state.displayed = []
            self.state.stats = EMPTY_STATS
            self._fail(FeedError(f'Could not prepare updates: {exc}'))
            return False
        self.state.displayed = displayed
        self.state.stats = stats
        return True

    def should_refresh(self):
        """Silent refresh gate: loaded once, visible, and the interval passed."""
        if self.context.last_refreshed is None:
            return False
        if not self.context.visible:
            return False
        return self.clock() - self.context.last_refreshed >= self.refresh_interval

    def tick(self):
        """
        Periodic check; refreshes silently when ``should_refresh()``.

        Returns:
            True when fresh data was applied
        """
        if not self.should_refresh():
            return False
        logger.debug('Silent refresh for %s', getattr(self.context.user, 'email', None))
        return self.load(silent=True)

    def retry(self):
        return self.load()

    def clear_cache(self):
        """Forget everything held in memory and load again."""
        self.state = FeedState()
        self.teams = None
        self.context.last_refreshed = None
        return self.load()

    def recover(self):
        """
        Show the last cached snapshot of this dashboard instead of live data.

        The personal dashboard only keeps rows owned by the viewer. An error
        already in the state, such as a fetch timeout, stays next to the
        recovered flag.

        Returns:
            True when a snapshot was applied
        """
        try:
            if self.recovery is None:
                raise RecoveryFailed('No recovery cache for this client.')
            email = getattr(self.context.user, 'email', None)
            snapshot = self.recovery.recover(self.scope, email)
            records = list(snapshot.records)
            if self.own_only:
                owner = (email or snapshot.email).lower()
                records = [record for record in records if record.employee_email.lower() == owner]
            if not records:
                raise RecoveryFailed(f'No cached updates of your own for {snapshot.email}.')
        except RecoveryFailed as exc:
            logger.warning('Recovery failed: %s', exc)
            if self.state.error is None:
                self._fail(exc)
            return False

        self.state.updates = records
        self.state.data_loaded = True
        self.state.recovered = True
        self.apply_filter()
        return True

    def _fail(self, exc):
        self.state.error = exc
        if self.on_error is not None:
            self.on_error(exc)
