"""
Normalized daily update rows.

The feed, the filter engine, the stats aggregator and the recovery cache
all work on ``UpdateRecord`` rather than model instances, so rows fetched
live and rows restored from the cache behave the same.
"""

from dataclasses import asdict, dataclass, fields
from datetime import date, datetime

from django.utils.dateparse import parse_date, parse_datetime

UNKNOWN_TEAM = 'Unknown Team'

_DATE_FIELDS = ('start_date', 'end_date', 'expected_resolution_date')


@dataclass(frozen=True)
class UpdateRecord:
    id: str
    employee_email: str
    employee_name: str
    team_id: str | None
    team_name: str
    created_at: datetime
    tasks_completed: str
    status: str
    priority: str = 'Medium'
    story_points: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    blocker_type: str | None = None
    blocker_description: str | None = None
    expected_resolution_date: date | None = None
    additional_notes: str = ''

    @classmethod
    def from_model(cls, update):
        """Build a record from a ``DailyUpdate`` fetched with its team."""
        return cls(
            id=str(update.pk),
            employee_email=update.employee_email,
            employee_name=update.employee_name,
            team_id=str(update.team_id) if update.team_id else None,
            team_name=update.team_name or UNKNOWN_TEAM,
            created_at=update.created_at,
            tasks_completed=update.tasks_completed,
            status=update.status,
            priority=update.priority,
            story_points=update.story_points,
            start_date=update.start_date,
            end_date=update.end_date,
            blocker_type=update.blocker_type or None,
            blocker_description=update.blocker_description or None,
            expected_resolution_date=update.expected_resolution_date,
            additional_notes=update.additional_notes or '',
        )

    @property
    def has_blocker(self):
        return bool(self.blocker_type)

    @property
    def pk(self):
        return self.id

    def to_dict(self):
        """Plain, cache-safe representation (ISO strings for dates)."""
        data = asdict(self)
        data['created_at'] = self.created_at.isoformat()
        for name in _DATE_FIELDS:
            value = data[name]
            data[name] = value.isoformat() if value else None
        return data

    @classmethod
    def from_dict(cls, data):
        """
        Inverse of ``to_dict``.

        Unknown keys are ignored so older snapshots keep loading.

        Raises:
            ValueError: a required field is missing or malformed
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}

        created_at = values.get('created_at')
        if isinstance(created_at, str):
            created_at = parse_datetime(created_at)
        if not isinstance(created_at, datetime):
            raise ValueError(f'Record {values.get("id")!r} has no valid created_at')
        values['created_at'] = created_at

        for name in _DATE_FIELDS:
            value = values.get(name)
            if isinstance(value, str):
                values[name] = parse_date(value)

        values.setdefault('team_name', UNKNOWN_TEAM)
        values['team_name'] = values['team_name'] or UNKNOWN_TEAM
        try:
            return cls(**values)
        except TypeError as exc:
            raise ValueError(f'Malformed update record: {exc}') from exc
