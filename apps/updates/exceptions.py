"""
Errors raised while loading the update feed.

Every failure is non-fatal: the dashboards render a failure panel that
offers Retry and Clear Cache instead of crashing.
"""


class FeedError(Exception):
    """Base class for feed failures."""

    kind = 'error'
    user_message = 'Something went wrong while loading updates.'

    def __init__(self, message=None):
        super().__init__(message or self.user_message)


class QueryFailed(FeedError):
    """The update store rejected or failed the request."""

    kind = 'query'
    user_message = 'Failed to load updates. Please try again.'


class FetchTimeout(FeedError):
    """No response from the update store within the patience window."""

    kind = 'timeout'
    user_message = 'Loading updates is taking too long. Please try again.'


class RecoveryFailed(FeedError):
    """No cached updates could be recovered for the current identity."""

    kind = 'recovery'
    user_message = 'Could not restore your previous session. Please log in again.'
