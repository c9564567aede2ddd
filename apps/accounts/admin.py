"""
Admin configuration for accounts app.

Admins manage logins and roles here; teams reference their manager by
email, so the user list shows which teams each manager runs.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from apps.teams.models import Team
from apps.updates.models import DailyUpdate
from .models import User

ROLE_COLORS = {
    User.Role.ADMIN: '#7C3AED',
    User.Role.MANAGER: '#2563EB',
    User.Role.USER: '#059669',
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Users log in by email; the role decides which dashboards they see."""

    list_display = ('email', 'name_display', 'role_badge', 'managed_teams', 'last_update', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)
    list_per_page = 50

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Name'), {'fields': ('first_name', 'last_name')}),
        (_('Access'), {'fields': ('role', 'is_active', 'is_staff', 'is_superuser')}),
        (_('Activity'), {'fields': ('last_login', 'created_at', 'updated_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'role', 'password1', 'password2'),
        }),
    )
    readonly_fields = ('last_login', 'created_at', 'updated_at')
    actions = ['activate_users', 'deactivate_users']

    @admin.display(description='Name', ordering='first_name')
    def name_display(self, obj):
        return obj.get_full_name()

    @admin.display(description='Role', ordering='role')
    def role_badge(self, obj):
        return format_html(
            '<span style="background:{}; color:white; padding:1px 6px; border-radius:3px;">{}</span>',
            ROLE_COLORS.get(obj.role, '#6B7280'), obj.get_role_display()
        )

    @admin.display(description='Teams managed')
    def managed_teams(self, obj):
        if obj.role != User.Role.MANAGER:
            return '-'
        names = Team.objects.filter(manager_email__iexact=obj.email).values_list('team_name', flat=True)
        return ', '.join(names) or '-'

    @admin.display(description='Last update')
    def last_update(self, obj):
        latest = (
            DailyUpdate.objects.filter(employee_email__iexact=obj.email)
            .order_by('-created_at')
            .values_list('created_at', flat=True)
            .first()
        )
        return latest or '-'

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'{count} user(s) activated.')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f'{count} user(s) deactivated; their dashboards stop loading.')
