"""
Team models.

Teams are flat and reference their manager by email, so a team can be set
up before its manager has logged in for the first time.
"""

import uuid

from django.db import models


class Team(models.Model):
    """
    A group of employees reporting to one manager.

    Managers see the daily updates of every team whose ``manager_email``
    matches their login email.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    team_name = models.CharField(
        max_length=150,
        help_text='Display name of the team'
    )
    manager_email = models.EmailField(
        db_index=True,
        help_text='Login email of the team manager'
    )
    manager_name = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'team'
        verbose_name_plural = 'teams'
        ordering = ['team_name']

    def __str__(self):
        return self.team_name

    def save(self, *args, **kwargs):
        # Emails are compared case-insensitively everywhere else
        if self.manager_email:
            self.manager_email = self.manager_email.lower().strip()
        super().save(*args, **kwargs)

    @property
    def member_count(self):
        """Return the number of members in this team."""
        return self.members.count()


class TeamMember(models.Model):
    """Links an employee to a team."""

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='members',
    )
    employee_email = models.EmailField()
    employee_name = models.CharField(max_length=150)
    manager_name = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'team member'
        verbose_name_plural = 'team members'
        ordering = ['employee_name']
        constraints = [
            models.UniqueConstraint(
                fields=['team', 'employee_email'],
                name='unique_team_member_email',
            ),
        ]
        indexes = [
            models.Index(fields=['employee_email'], name='teams_member_email_idx'),
        ]

    def __str__(self):
        return f"{self.employee_name} ({self.team})"

    def save(self, *args, **kwargs):
        if self.employee_email:
            self.employee_email = self.employee_email.lower().strip()
        if not self.manager_name and self.team_id:
            self.manager_name = self.team.manager_name
        super().save(*args, **kwargs)
