"""
Admin configuration for teams app.
"""

from django.contrib import admin
from .models import Team, TeamMember


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 1
    fields = ('employee_name', 'employee_email', 'manager_name')


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    """Admin for Team model."""

    list_display = ('team_name', 'manager_name', 'manager_email', 'member_count', 'created_at')
    search_fields = ('team_name', 'manager_email', 'manager_name')
    ordering = ('team_name',)
    inlines = [TeamMemberInline]

    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('team_name', 'manager_name', 'manager_email')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )


@admin.register(TeamMember)
class TeamMemberAdmin(admin.ModelAdmin):
    """Admin for TeamMember model."""

    list_display = ('employee_name', 'employee_email', 'team', 'manager_name')
    list_filter = ('team',)
    search_fields = ('employee_name', 'employee_email')

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('team')
