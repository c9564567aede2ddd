"""
Update fetcher.

Turns an ``UpdateQuery`` into a list of ``UpdateRecord``:
- OrmUpdateStore runs the query against the database
- UpdateFetcher retries transient failures with a growing delay and
  bounds the whole fetch with a deadline

On a deadline the caller stops waiting and gets ``FetchTimeout``; the
worker thread is left to finish on its own.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass

from django.conf import settings
from django.db import DatabaseError, connections

from .exceptions import FetchTimeout, QueryFailed
from .filters import DailyUpdateFilter
from .models import DailyUpdate
from .records import UpdateRecord

logger = logging.getLogger(__name__)

# Failures worth another attempt
RETRYABLE_ERRORS = (DatabaseError, QueryFailed)


@dataclass(frozen=True)
class UpdateQuery:
    """
    One fetch request.

    ``owner_email`` limits the result to one employee's updates (always
    set for role=user). ``manager_team_ids`` is the team scope of a
    manager's team-wide query.
    """

    start: object
    end: object
    role: str
    owner_email: str | None = None
    team_id: str = ''
    manager_team_ids: tuple = ()

    @classmethod
    def for_user(cls, user, feed_filter, *, own_only=False, manager_team_ids=()):
        """Build the query a dashboard issues for ``user``."""
        owner_email = user.email if (own_only or user.role == 'user') else None
        return cls(
            start=feed_filter.start,
            end=feed_filter.end,
            role=user.role,
            owner_email=owner_email,
            team_id=feed_filter.team_id,
            manager_team_ids=tuple(str(pk) for pk in manager_team_ids),
        )


class OrmUpdateStore:
    """Reads daily updates through the ORM, newest first."""

    def query(self, query):
        """
        Run ``query``.

        Raises:
            QueryFailed: the query parameters were rejected
            DatabaseError: the database failed
        """
        if query.role == 'user' and not query.owner_email:
            raise QueryFailed('A user query must be limited to the owner.')

        queryset = DailyUpdate.objects.select_related('team')

        # A manager's team-wide query never leaves the manager's teams
        if query.role == 'manager' and not query.owner_email:
            queryset = queryset.filter(team_id__in=list(query.manager_team_ids))

        data = {'start': query.start, 'end': query.end}
        if query.team_id:
            data['team'] = query.team_id
        if query.owner_email:
            data['employee_email'] = query.owner_email

        filterset = DailyUpdateFilter(data, queryset=queryset)
        if not filterset.is_valid():
            raise QueryFailed(f'Invalid update query: {filterset.errors.as_text()}')

        return list(filterset.qs.order_by('-created_at'))


class UpdateFetcher:
    """
    Fetch updates with retry and a deadline.

    Usage:
        fetcher = UpdateFetcher()
        records = fetcher.fetch(query, interactive=True)
    """

    def __init__(self, store=None, *, base_delay=None, timeout=None,
                 interactive_attempts=None, background_attempts=None, sleep=time.sleep):
        self.store = store or OrmUpdateStore()
        self.base_delay = settings.FEED_RETRY_BASE_DELAY if base_delay is None else base_delay
        self.timeout = settings.FEED_FETCH_TIMEOUT if timeout is None else timeout
        self.interactive_attempts = interactive_attempts or settings.FEED_INTERACTIVE_MAX_ATTEMPTS
        self.background_attempts = background_attempts or settings.FEED_BACKGROUND_MAX_ATTEMPTS
        self.sleep = sleep

    def max_attempts(self, interactive):
        return self.interactive_attempts if interactive else self.background_attempts

    def fetch(self, query, *, interactive=True):
        """
        Fetch the updates ``query`` selects.

        Args:
            query: UpdateQuery
            interactive: user-initiated load (bigger retry budget) vs
                background refresh

        Returns:
            List of UpdateRecord, newest first

        Raises:
            QueryFailed: every attempt failed
            FetchTimeout: no result within ``timeout`` seconds
        """
        attempts = self.max_attempts(interactive)
        if not self.timeout:
            return self._fetch_with_retry(query, attempts)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='update-fetch')
        future = executor.submit(self._fetch_in_worker, query, attempts)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError:
            logger.warning('Update fetch exceeded %ss (%s)', self.timeout, query)
            raise FetchTimeout() from None
        finally:
            # Do not wait for the worker; it finishes in the background
            executor.shutdown(wait=False)

    def _fetch_in_worker(self, query, attempts):
        try:
            return self._fetch_with_retry(query, attempts)
        finally:
            # Connections opened by this thread are its own
            connections.close_all()

    def _fetch_with_retry(self, query, attempts):
        attempt = 0
        while True:
            attempt += 1
            try:
                rows = self.store.query(query)
            except RETRYABLE_ERRORS as exc:
                if attempt >= attempts:
                    logger.error(
                        'Update fetch failed after %d attempt(s): %s', attempt, exc
                    )
                    if isinstance(exc, QueryFailed):
                        raise
                    raise QueryFailed() from exc
                delay = self.base_delay * attempt
                logger.warning(
                    'Update fetch attempt %d/%d failed (%s), retrying in %ss',
                    attempt, attempts, exc, delay
                )
                if delay:
                    self.sleep(delay)
                continue
            return self.normalize(rows)

    @staticmethod
    def normalize(rows):
        """Convert store rows to records, leaving records untouched."""
        return [
            row if isinstance(row, UpdateRecord) else UpdateRecord.from_model(row)
            for row in rows
        ]
