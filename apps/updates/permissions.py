"""
Permission helpers for updates app.

Role-based access control for daily updates:
- Admin: views and edits every update
- Manager: views updates of the teams they manage plus their own,
  edits any update
- User: views own updates, edits them while still to-do or in-progress

``can_edit_update`` is the one edit rule. The list rows, the detail page,
the edit view and the edit service all ask it.
"""

from .models import DailyUpdate

OWNER_EDITABLE_STATUSES = {status.value for status in DailyUpdate.OWNER_EDITABLE_STATUSES}


def is_owner(user, update):
    """Check if ``user`` submitted ``update`` (emails compared case-insensitively)."""
    email = (getattr(user, 'email', '') or '').lower()
    return bool(email) and email == (update.employee_email or '').lower()


# =============================================================================
# View Permissions
# =============================================================================

def can_view_update(user, update, managed_team_ids=None):
    """
    Check if user can view a specific update.

    Rules:
    - Admin: Can view all updates
    - Manager: Can view updates of managed teams + own updates
    - User: Can view own updates

    ``managed_team_ids`` saves a query when the caller already resolved
    the manager's teams.
    """
    if not user.is_authenticated:
        return False

    if user.role == 'admin':
        return True

    if is_owner(user, update):
        return True

    if user.role == 'manager':
        if managed_team_ids is None:
            from apps.teams.services import get_team_ids_for_user
            managed_team_ids = get_team_ids_for_user(user)
        return bool(update.team_id) and str(update.team_id) in {str(pk) for pk in managed_team_ids}

    return False


# =============================================================================
# Edit Permissions
# =============================================================================

def can_edit_update(user, update):
    """
    Check if user can edit an update.

    Rules:
    - Admin and Manager can edit any update
    - Owner can edit while status is to-do or in-progress
    - Nobody else can edit
    """
    if user is None or not user.is_authenticated:
        return False

    if user.role in ('admin', 'manager'):
        return True

    return is_owner(user, update) and update.status in OWNER_EDITABLE_STATUSES
