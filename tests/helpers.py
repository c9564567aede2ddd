"""
Shared builders for the test suite.
"""

import itertools
import uuid
from datetime import datetime

from django.utils import timezone

from apps.accounts.models import User
from apps.teams.models import Team
from apps.updates.models import DailyUpdate
from apps.updates.records import UpdateRecord

_counter = itertools.count(1)


def aware(*args):
    """Aware datetime in the current time zone."""
    return timezone.make_aware(datetime(*args))


def make_user(role=User.Role.USER, email=None, password='pass-word-123', **extra):
    n = next(_counter)
    return User.objects.create_user(
        email=email or f'person{n}@example.com',
        password=password,
        first_name=extra.pop('first_name', f'Person{n}'),
        last_name=extra.pop('last_name', 'Test'),
        role=role,
        **extra
    )


def make_team(manager=None, name=None):
    n = next(_counter)
    return Team.objects.create(
        team_name=name or f'Team {n}',
        manager_email=manager.email if manager else f'manager{n}@example.com',
        manager_name=manager.get_full_name() if manager else f'Manager {n}',
    )


def make_update(user=None, team=None, created_at=None, **fields):
    email = user.email if user else fields.pop('employee_email', 'someone@example.com')
    name = user.get_full_name() if user else fields.pop('employee_name', 'Someone')
    fields.setdefault('tasks_completed', 'Worked on things')
    update = DailyUpdate.objects.create(
        employee_email=email,
        employee_name=name,
        team=team,
        **fields
    )
    if created_at is not None:
        DailyUpdate.objects.filter(pk=update.pk).update(created_at=created_at)
        update.refresh_from_db()
    return update


def make_record(status='in-progress', created_at=None, **fields):
    """UpdateRecord without touching the database."""
    defaults = {
        'id': str(uuid.uuid4()),
        'employee_email': 'someone@example.com',
        'employee_name': 'Someone',
        'team_id': None,
        'team_name': 'Unknown Team',
        'created_at': created_at or timezone.now(),
        'tasks_completed': 'Worked on things',
        'status': status,
    }
    defaults.update(fields)
    return UpdateRecord(**defaults)


class FakeUser:
    """Minimal stand-in for an authenticated user."""

    is_authenticated = True
    is_active = True

    def __init__(self, role='user', email='someone@example.com'):
        self.role = role
        self.email = email

    def get_full_name(self):
        return self.email


class ScriptedStore:
    """
    Update store that replays a script of outcomes.

    Each entry is either an exception instance (raised) or a list of rows
    (returned). The last entry repeats once the script runs out.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def query(self, query):
        self.calls.append(query)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return list(outcome)
