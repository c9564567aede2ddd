"""
Team lookups used by the dashboards.
"""

import logging

from django.db import DatabaseError

from apps.updates.exceptions import QueryFailed
from .models import Team

logger = logging.getLogger(__name__)


def get_teams_for_user(user):
    """
    Return the teams ``user`` may pick on the team dashboard.

    - Admin: every team, by name
    - Manager: teams whose manager_email is the manager's email
    - User: none

    Raises:
        QueryFailed: the team store could not be read
    """
    if not user.is_authenticated:
        return []

    if user.role == 'admin':
        queryset = Team.objects.order_by('team_name')
    elif user.role == 'manager':
        queryset = Team.objects.filter(manager_email__iexact=user.email).order_by('team_name')
    else:
        return []

    try:
        return list(queryset)
    except DatabaseError as exc:
        logger.error('Could not load teams for %s: %s', user.email, exc)
        raise QueryFailed('Failed to load teams.') from exc


def get_team_ids_for_user(user):
    """Ids (as strings) of the teams returned by ``get_teams_for_user``."""
    return [str(team.pk) for team in get_teams_for_user(user)]
