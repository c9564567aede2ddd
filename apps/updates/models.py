"""
Daily update models.

Models:
- DailyUpdate: one daily report of one employee, optionally carrying a
  blocker (risk, issue, dependency or blocker) with its description
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class DailyUpdate(models.Model):
    """
    A daily status report.

    The blocker fields form a dependent group: ``blocker_description`` and
    ``expected_resolution_date`` only carry a value when ``blocker_type``
    is set, and a blocker type always comes with a description.
    """

    class Status(models.TextChoices):
        TO_DO = 'to-do', 'To Do'
        IN_PROGRESS = 'in-progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        BLOCKED = 'blocked', 'Blocked'
        REOPEN = 'reopen', 'Reopened'

    class Priority(models.TextChoices):
        LOW = 'Low', 'Low'
        MEDIUM = 'Medium', 'Medium'
        HIGH = 'High', 'High'

    class BlockerType(models.TextChoices):
        RISK = 'Risk', 'Risk'
        ISSUE = 'Issue', 'Issue'
        DEPENDENCY = 'Dependency', 'Dependency'
        BLOCKER = 'Blocker', 'Blocker'

    # Statuses in which the owning employee may still edit the update
    OWNER_EDITABLE_STATUSES = (Status.TO_DO, Status.IN_PROGRESS)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Submitter, fixed at creation
    employee_email = models.EmailField(db_index=True)
    employee_name = models.CharField(max_length=150)
    team = models.ForeignKey(
        'teams.Team',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='updates',
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Report body
    tasks_completed = models.TextField()
    story_points = models.PositiveIntegerField(null=True, blank=True)
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.IN_PROGRESS,
        db_index=True,
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    # Blocker group
    blocker_type = models.CharField(
        max_length=15,
        choices=BlockerType.choices,
        null=True,
        blank=True,
    )
    blocker_description = models.TextField(
        null=True,
        blank=True,
        help_text='Required when a blocker type is set'
    )
    expected_resolution_date = models.DateField(
        null=True,
        blank=True,
        help_text='Only meaningful when a blocker type is set'
    )

    additional_notes = models.TextField(blank=True)

    class Meta:
        verbose_name = 'daily update'
        verbose_name_plural = 'daily updates'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['employee_email', 'created_at'], name='updates_owner_created_idx'),
            models.Index(fields=['team', 'created_at'], name='updates_team_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(
                        blocker_type__isnull=True,
                        blocker_description__isnull=True,
                        expected_resolution_date__isnull=True,
                    )
                    | (
                        Q(blocker_type__isnull=False, blocker_description__isnull=False)
                        & ~Q(blocker_description='')
                    )
                ),
                name='daily_update_blocker_fields_paired',
            ),
        ]

    def __str__(self):
        return f"{self.employee_name} - {timezone.localtime(self.created_at):%d %b %Y}"

    def clean(self):
        """Validate the blocker group and the date span."""
        errors = {}
        if self.blocker_type and not (self.blocker_description or '').strip():
            errors['blocker_description'] = 'Describe the blocker.'
        if self.start_date and self.end_date and self.end_date < self.start_date:
            errors['end_date'] = 'End date cannot be before the start date.'
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        # Blank choices arrive as empty strings from forms
        self.blocker_type = self.blocker_type or None
        if self.blocker_type:
            self.blocker_description = (self.blocker_description or '').strip() or None
        else:
            self.blocker_description = None
            self.expected_resolution_date = None
        if self.employee_email:
            self.employee_email = self.employee_email.lower().strip()
        super().save(*args, **kwargs)

    @property
    def has_blocker(self):
        return bool(self.blocker_type)

    @property
    def team_name(self):
        """Team display name, 'Unknown Team' when the team is missing."""
        if self.team_id and self.team:
            return self.team.team_name
        return 'Unknown Team'
