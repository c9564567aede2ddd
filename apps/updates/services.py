"""
Service layer for updates app.

Services:
- compute_stats: Counts shown above the dashboards
- update_daily_update: Edit an update with permission and blocker checks
- export_rows: CSV rows for the team dashboard export
"""

import logging
from dataclasses import dataclass

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from .models import DailyUpdate
from .permissions import can_edit_update

logger = logging.getLogger(__name__)


# =============================================================================
# Stats
# =============================================================================

@dataclass(frozen=True)
class FeedStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    blocked: int = 0
    blockers: int = 0


EMPTY_STATS = FeedStats()


def compute_stats(updates):
    """
    Count updates by status in a single pass.

    ``blockers`` counts updates carrying any blocker type, independently of
    their status.
    """
    total = completed = in_progress = blocked = blockers = 0
    for update in updates:
        total += 1
        if update.status == DailyUpdate.Status.COMPLETED:
            completed += 1
        elif update.status == DailyUpdate.Status.IN_PROGRESS:
            in_progress += 1
        elif update.status == DailyUpdate.Status.BLOCKED:
            blocked += 1
        if update.blocker_type:
            blockers += 1
    return FeedStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        blocked=blocked,
        blockers=blockers,
    )


# =============================================================================
# Editing
# =============================================================================

EDITABLE_FIELDS = [
    'tasks_completed', 'story_points', 'priority', 'status',
    'start_date', 'end_date', 'blocker_type', 'blocker_description',
    'expected_resolution_date', 'additional_notes',
]


def update_daily_update(update, user, **kwargs):
    """
    Update the editable fields of a daily update.

    The submitter, team and creation time never change. Clearing the
    blocker type clears its description and resolution date too.

    Args:
        update: DailyUpdate instance to update
        user: User performing the update
        **kwargs: Fields to update (see EDITABLE_FIELDS)

    Returns:
        List of changed field names

    Raises:
        PermissionDenied: If user cannot edit the update
        ValidationError: If validation fails
    """
    if not can_edit_update(user, update):
        raise PermissionDenied("You don't have permission to edit this update.")

    unknown = set(kwargs) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    changes = []

    with transaction.atomic():
        for field in EDITABLE_FIELDS:
            if field not in kwargs:
                continue
            new_value = kwargs[field]

            if field == 'tasks_completed':
                if not new_value or not new_value.strip():
                    raise ValidationError("Tasks completed cannot be empty.")
                new_value = new_value.strip()

            elif field == 'status' and new_value not in DailyUpdate.Status.values:
                raise ValidationError(f"Invalid status: {new_value}")

            elif field == 'priority' and new_value not in DailyUpdate.Priority.values:
                raise ValidationError(f"Invalid priority: {new_value}")

            elif field == 'blocker_type':
                new_value = new_value or None
                if new_value and new_value not in DailyUpdate.BlockerType.values:
                    raise ValidationError(f"Invalid blocker type: {new_value}")

            elif field == 'blocker_description':
                new_value = (new_value or '').strip() or None

            elif field == 'additional_notes':
                new_value = (new_value or '').strip()

            if getattr(update, field) != new_value:
                changes.append(field)
                setattr(update, field, new_value)

        # Blocker details only exist alongside a blocker type
        if not update.blocker_type:
            for field in ('blocker_description', 'expected_resolution_date'):
                if getattr(update, field):
                    setattr(update, field, None)
                    if field not in changes:
                        changes.append(field)

        update.clean()

        if changes:
            update.save()
            logger.info(
                'Update %s edited by %s: %s',
                update.pk, user.email, ', '.join(changes)
            )

    return changes


# =============================================================================
# Export
# =============================================================================

EXPORT_HEADERS = [
    'Date', 'Start Date', 'End Date', 'Story Points', 'Team', 'Employee',
    'Tasks Completed', 'Status', 'Priority', 'Blocker Type', 'Additional Notes',
]


def _format_date(value):
    return value.strftime('%Y-%m-%d') if value else ''


def export_rows(updates):
    """Yield CSV rows (header first) for ``updates``."""
    yield EXPORT_HEADERS
    for update in updates:
        yield [
            _format_date(timezone.localtime(update.created_at)),
            _format_date(update.start_date),
            _format_date(update.end_date),
            '' if update.story_points is None else update.story_points,
            update.team_name,
            update.employee_name,
            update.tasks_completed,
            update.status,
            update.priority,
            update.blocker_type or '',
            update.additional_notes or '',
        ]
