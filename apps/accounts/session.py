"""
Session gate: resolve the acting user before any data operation.

Dashboards call ``resolve_session_user`` first; when it raises
``SessionUnavailable`` they may try ``refresh_session_user`` once before
falling back to the local recovery cache.
"""

import logging

from django.contrib.auth import get_user

from .models import User

logger = logging.getLogger(__name__)


class SessionUnavailable(Exception):
    """The request carries no usable authenticated session."""

    user_message = 'Your session could not be verified. Please log in again.'


def _check(user):
    if user is None or not user.is_authenticated:
        raise SessionUnavailable('No authenticated user on the request.')
    if not user.is_active:
        raise SessionUnavailable(f'User {user.email} is inactive.')
    if user.role not in User.Role.values:
        raise SessionUnavailable(f'User {user.email} has unknown role {user.role!r}.')
    return user


def resolve_session_user(request):
    """
    Return the authenticated user of ``request``.

    Raises:
        SessionUnavailable: anonymous, inactive or role-less user
    """
    return _check(getattr(request, 'user', None))


def refresh_session_user(request):
    """
    Re-read the user from the session store, bypassing the cached
    ``request.user``.

    Raises:
        SessionUnavailable: the session no longer maps to a valid user
    """
    if not hasattr(request, 'session'):
        raise SessionUnavailable('Request has no session.')

    user = _check(get_user(request))
    request.user = user
    logger.info('Session for %s refreshed', user.email)
    return user
