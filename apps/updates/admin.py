"""
Admin configuration for updates app.
"""

from django.contrib import admin
from django.utils.html import format_html
from .models import DailyUpdate


@admin.register(DailyUpdate)
class DailyUpdateAdmin(admin.ModelAdmin):
    """Admin for DailyUpdate model."""

    list_display = (
        'employee_name', 'employee_email', 'team', 'status_display',
        'priority_display', 'blocker_type', 'story_points', 'created_at'
    )
    list_filter = ('status', 'priority', 'blocker_type', 'team', 'created_at')
    search_fields = ('employee_name', 'employee_email', 'tasks_completed')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('employee_name', 'employee_email', 'team')
        }),
        ('Report', {
            'fields': (
                'tasks_completed', 'story_points', 'status', 'priority',
                'start_date', 'end_date', 'additional_notes'
            )
        }),
        ('Blocker', {
            'fields': ('blocker_type', 'blocker_description', 'expected_resolution_date'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('team')

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            'to-do': '#95a5a6',        # Gray
            'in-progress': '#3498db',  # Blue
            'completed': '#27ae60',    # Green
            'blocked': '#e74c3c',      # Red
            'reopen': '#FFA500',       # Orange
        }
        color = colors.get(obj.status, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = 'Status'
    status_display.admin_order_field = 'status'

    def priority_display(self, obj):
        """Display priority with color coding."""
        colors = {
            'Low': '#27ae60',
            'Medium': '#e67e22',
            'High': '#e74c3c',
        }
        color = colors.get(obj.priority, '#000')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_priority_display()
        )
    priority_display.short_description = 'Priority'
    priority_display.admin_order_field = 'priority'
