"""
Forms for updates app.

Includes:
- DailyUpdateForm: Edit a daily update, blocker fields kept consistent
- FeedFilterForm: Dashboard filters (date range, team, tab) from the query string
"""

from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone

from .filters import FeedFilter, FeedTab, default_range
from .models import DailyUpdate

INPUT_CLASS = 'block w-full rounded-md border-gray-300 shadow-sm sm:text-sm'


class DailyUpdateForm(forms.Form):
    """
    Form for editing a daily update.

    A plain form rather than a ModelForm: the edit service compares the
    cleaned values against the stored instance to find what changed.
    """

    tasks_completed = forms.CharField(
        widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 4}),
    )
    status = forms.ChoiceField(
        choices=DailyUpdate.Status.choices,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
    )
    priority = forms.ChoiceField(
        choices=DailyUpdate.Priority.choices,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
    )
    story_points = forms.IntegerField(
        min_value=0,
        required=False,
        widget=forms.NumberInput(attrs={'class': INPUT_CLASS}),
    )
    start_date = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': INPUT_CLASS}),
    )
    end_date = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': INPUT_CLASS}),
    )
    blocker_type = forms.ChoiceField(
        choices=[('', 'None')] + list(DailyUpdate.BlockerType.choices),
        required=False,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
    )
    blocker_description = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 3}),
    )
    expected_resolution_date = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': INPUT_CLASS}),
    )
    additional_notes = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 3}),
    )

    @classmethod
    def initial_for(cls, update):
        """Initial data mirroring ``update``."""
        return {name: getattr(update, name) for name in cls.base_fields}

    def clean_tasks_completed(self):
        value = self.cleaned_data.get('tasks_completed', '').strip()
        if not value:
            raise ValidationError('Tasks completed cannot be empty.')
        return value

    def clean(self):
        cleaned_data = super().clean()
        blocker_type = cleaned_data.get('blocker_type') or None
        cleaned_data['blocker_type'] = blocker_type

        if blocker_type:
            if not (cleaned_data.get('blocker_description') or '').strip():
                self.add_error('blocker_description', 'Describe the blocker.')
        else:
            # Details without a blocker type are dropped
            cleaned_data['blocker_description'] = None
            cleaned_data['expected_resolution_date'] = None

        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and end_date < start_date:
            self.add_error('end_date', 'End date cannot be before the start date.')

        return cleaned_data


class FeedFilterForm(forms.Form):
    """
    Dashboard filters read from the query string.

    Invalid or missing values fall back to the dashboard's default window
    and the 'all' tab.
    """

    start = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': INPUT_CLASS}),
    )
    end = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': INPUT_CLASS}),
    )
    team = forms.UUIDField(required=False)
    tab = forms.ChoiceField(required=False, choices=FeedTab.choices)

    def __init__(self, data=None, *, tabs=tuple(FeedTab), default_days=7, today=None, **kwargs):
        super().__init__(data, **kwargs)
        self.default_days = default_days
        self.today = today or timezone.localdate()
        self.fields['tab'].choices = [(tab.value, tab.label) for tab in tabs]

    def clean(self):
        cleaned_data = super().clean()
        default_start, default_end = default_range(self.default_days, self.today)
        start = cleaned_data.get('start') or default_start
        end = cleaned_data.get('end') or default_end
        if start > end:
            raise ValidationError('The start date must not be after the end date.')
        return cleaned_data

    def feed_filter(self):
        """FeedFilter for the submitted values, defaults where missing."""
        default_start, default_end = default_range(self.default_days, self.today)

        if not self.is_bound or not self.is_valid():
            tab = self.cleaned_data.get('tab') if self.is_bound else None
            return FeedFilter(start=default_start, end=default_end, tab=tab or FeedTab.ALL)

        data = self.cleaned_data
        team = data.get('team')
        return FeedFilter(
            start=data.get('start') or default_start,
            end=data.get('end') or default_end,
            team_id=str(team) if team else '',
            tab=data.get('tab') or FeedTab.ALL,
        )
