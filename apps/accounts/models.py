"""
User model for daily_updates.

Employees log in with their work email. The same email ties a user to the
daily updates they submitted and, for managers, to the teams they run.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Manager for email-keyed users (no username)."""

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('Users need an email address to log in.')
        user = self.model(email=self.normalize_email(email).lower(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.Role.ADMIN)
        if not (extra_fields['is_staff'] and extra_fields['is_superuser']):
            raise ValueError('A superuser needs is_staff=True and is_superuser=True.')
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    An employee who reports daily.

    Roles:
    - Admin: sees every team's updates, edits any update
    - Manager: sees the updates of the teams they manage, edits any update
    - User: sees their own updates, edits them while still open
    """

    class Role(models.TextChoices):
        USER = 'user', 'User'
        MANAGER = 'manager', 'Manager'
        ADMIN = 'admin', 'Admin'

    username = None
    email = models.EmailField(
        'email address',
        unique=True,
        error_messages={'unique': 'A user with that email already exists.'},
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        verbose_name = 'user'
        verbose_name_plural = 'users'
        ordering = ['first_name', 'last_name']
        indexes = [
            models.Index(fields=['is_active'], name='accounts_user_active_idx'),
        ]

    def __str__(self):
        return f"{self.get_full_name()} <{self.email}>"

    def get_full_name(self):
        """Display name; falls back to the email when no name is set."""
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def get_short_name(self):
        return self.first_name or self.email.split('@')[0]

    def is_admin(self):
        return self.role == self.Role.ADMIN

    def is_manager(self):
        return self.role == self.Role.MANAGER

    def is_manager_or_above(self):
        """Managers and admins get the team dashboard."""
        return self.role in (self.Role.MANAGER, self.Role.ADMIN)
