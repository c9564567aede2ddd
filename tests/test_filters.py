"""
Tests for the filter engine, the store FilterSet and the filter form.
"""

from datetime import date, timedelta

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from apps.updates.filters import (
    DailyUpdateFilter, FeedFilter, FeedTab, PERSONAL_TABS,
    default_range, filter_updates,
)
from apps.updates.forms import FeedFilterForm
from apps.updates.models import DailyUpdate
from .helpers import aware, make_record, make_team, make_update


DAY = date(2024, 3, 10)


def _filter(**overrides):
    values = {'start': DAY, 'end': DAY, 'team_id': '', 'tab': FeedTab.ALL}
    values.update(overrides)
    return FeedFilter(**values)


# =============================================================================
# Date range
# =============================================================================

class DateRangeBoundaryTests(SimpleTestCase):
    """Both ends of the range are whole local days."""

    def test_first_instant_of_start_day_is_included(self):
        record = make_record(created_at=aware(2024, 3, 10, 0, 0, 0, 0))
        self.assertEqual(filter_updates([record], _filter()), [record])

    def test_last_millisecond_of_end_day_is_included(self):
        record = make_record(created_at=aware(2024, 3, 10, 23, 59, 59, 999000))
        self.assertEqual(filter_updates([record], _filter()), [record])

    def test_one_millisecond_before_start_is_excluded(self):
        record = make_record(created_at=aware(2024, 3, 10) - timedelta(milliseconds=1))
        self.assertEqual(filter_updates([record], _filter()), [])

    def test_one_millisecond_after_end_is_excluded(self):
        record = make_record(created_at=aware(2024, 3, 10, 23, 59, 59, 999000) + timedelta(milliseconds=1))
        self.assertEqual(filter_updates([record], _filter()), [])

    def test_multi_day_range(self):
        inside = make_record(created_at=aware(2024, 3, 12, 9))
        outside = make_record(created_at=aware(2024, 3, 14, 9))
        result = filter_updates([inside, outside], _filter(end=date(2024, 3, 13)))
        self.assertEqual(result, [inside])


# =============================================================================
# Team and tabs
# =============================================================================

class TeamAndTabTests(SimpleTestCase):

    def setUp(self):
        self.now = aware(2024, 3, 20, 12)
        self.team_id = 'a7c3a4a4-0d55-4c36-9d8a-2f7d0b3f0c11'
        self.records = [
            make_record('completed', created_at=aware(2024, 3, 19, 9), team_id=self.team_id),
            make_record('in-progress', created_at=aware(2024, 3, 2, 9)),
            make_record('blocked', created_at=aware(2024, 3, 18, 9), blocker_type='Issue',
                        blocker_description='Waiting on API keys'),
            make_record('to-do', created_at=aware(2024, 3, 15, 9), blocker_type='Risk',
                        blocker_description='Vendor may slip', team_id=self.team_id),
        ]
        self.base = FeedFilter(start=date(2024, 3, 1), end=date(2024, 3, 20))

    def _run(self, **overrides):
        feed_filter = FeedFilter(**{**self.base.__dict__, **overrides})
        return filter_updates(self.records, feed_filter, now=self.now)

    def test_all_tab_keeps_everything_in_range(self):
        self.assertEqual(self._run(), self.records)

    def test_team_filter(self):
        result = self._run(team_id=self.team_id)
        self.assertEqual(result, [self.records[0], self.records[3]])

    def test_recent_tab_is_last_seven_days(self):
        result = self._run(tab=FeedTab.RECENT)
        self.assertEqual(result, [self.records[0], self.records[2], self.records[3]])

    def test_blockers_tab_selects_any_blocker_type(self):
        result = self._run(tab=FeedTab.BLOCKERS)
        self.assertEqual(result, [self.records[2], self.records[3]])

    def test_status_tabs(self):
        self.assertEqual(self._run(tab=FeedTab.COMPLETED), [self.records[0]])
        self.assertEqual(self._run(tab=FeedTab.IN_PROGRESS), [self.records[1]])
        self.assertEqual(self._run(tab=FeedTab.BLOCKED), [self.records[2]])

    def test_unknown_tab_raises(self):
        with self.assertRaises(ValueError):
            self._run(tab='archived')

    def test_filter_is_idempotent_for_every_tab(self):
        for tab in FeedTab:
            for team_id in ('', self.team_id):
                with self.subTest(tab=tab, team_id=team_id):
                    feed_filter = FeedFilter(
                        start=date(2024, 3, 10), end=date(2024, 3, 20), team_id=team_id, tab=tab
                    )
                    once = filter_updates(self.records, feed_filter, now=self.now)
                    twice = filter_updates(once, feed_filter, now=self.now)
                    self.assertEqual(once, twice)

    def test_input_is_not_mutated(self):
        records = list(self.records)
        self._run(tab=FeedTab.COMPLETED)
        self.assertEqual(self.records, records)


# =============================================================================
# Store FilterSet
# =============================================================================

class DailyUpdateFilterTests(TestCase):

    def test_range_covers_whole_days(self):
        first = make_update(created_at=aware(2024, 3, 10, 0, 0, 0, 0))
        last = make_update(created_at=aware(2024, 3, 10, 23, 59, 59, 999000))
        make_update(created_at=aware(2024, 3, 10) - timedelta(milliseconds=1))
        make_update(created_at=aware(2024, 3, 11))

        filterset = DailyUpdateFilter(
            {'start': '2024-03-10', 'end': '2024-03-10'},
            queryset=DailyUpdate.objects.all(),
        )
        self.assertTrue(filterset.is_valid())
        self.assertEqual(set(filterset.qs), {first, last})

    def test_team_and_owner(self):
        team = make_team()
        mine = make_update(team=team, employee_email='me@example.com')
        make_update(team=team, employee_email='other@example.com')
        make_update(employee_email='me@example.com')

        filterset = DailyUpdateFilter(
            {'team': str(team.pk), 'employee_email': 'ME@example.com'},
            queryset=DailyUpdate.objects.all(),
        )
        self.assertEqual(list(filterset.qs), [mine])

    def test_invalid_team_is_rejected(self):
        filterset = DailyUpdateFilter({'team': 'not-a-uuid'}, queryset=DailyUpdate.objects.all())
        self.assertFalse(filterset.is_valid())


# =============================================================================
# Filter form
# =============================================================================

class FeedFilterFormTests(SimpleTestCase):

    today = date(2024, 3, 20)

    def test_defaults_when_unbound(self):
        feed_filter = FeedFilterForm(default_days=30, today=self.today).feed_filter()
        self.assertEqual((feed_filter.start, feed_filter.end), default_range(30, self.today))
        self.assertEqual(feed_filter.start, date(2024, 2, 20))
        self.assertEqual(feed_filter.tab, FeedTab.ALL)

    def test_submitted_values(self):
        team_id = 'a7c3a4a4-0d55-4c36-9d8a-2f7d0b3f0c11'
        form = FeedFilterForm(
            {'start': '2024-03-01', 'end': '2024-03-05', 'team': team_id, 'tab': 'blockers'},
            default_days=7, today=self.today,
        )
        feed_filter = form.feed_filter()
        self.assertEqual(feed_filter, FeedFilter(date(2024, 3, 1), date(2024, 3, 5), team_id, 'blockers'))

    def test_reversed_range_falls_back_to_defaults(self):
        form = FeedFilterForm({'start': '2024-03-10', 'end': '2024-03-01', 'tab': 'completed'},
                              default_days=7, today=self.today)
        feed_filter = form.feed_filter()
        self.assertFalse(form.is_valid())
        self.assertEqual((feed_filter.start, feed_filter.end), (date(2024, 3, 14), self.today))
        self.assertEqual(feed_filter.tab, 'completed')

    def test_future_start_without_end_is_rejected(self):
        form = FeedFilterForm({'start': '2024-03-25', 'tab': 'completed'}, default_days=7, today=self.today)
        feed_filter = form.feed_filter()
        self.assertFalse(form.is_valid())
        self.assertIn('The start date must not be after the end date.', form.non_field_errors())
        self.assertLessEqual(feed_filter.start, feed_filter.end)
        self.assertEqual((feed_filter.start, feed_filter.end), (date(2024, 3, 14), self.today))
        self.assertEqual(feed_filter.tab, 'completed')

    def test_end_before_default_start_is_rejected(self):
        form = FeedFilterForm({'end': '2024-03-01'}, default_days=7, today=self.today)
        self.assertFalse(form.is_valid())
        self.assertEqual(form.feed_filter().end, self.today)

    def test_start_alone_in_the_past_is_accepted(self):
        form = FeedFilterForm({'start': '2024-03-18'}, default_days=7, today=self.today)
        self.assertTrue(form.is_valid())
        self.assertEqual(form.feed_filter().end, self.today)

    def test_personal_dashboard_rejects_team_only_tabs(self):
        form = FeedFilterForm({'tab': 'blockers'}, tabs=PERSONAL_TABS, default_days=30, today=self.today)
        self.assertEqual(form.feed_filter().tab, FeedTab.ALL)

    def test_default_range_uses_local_today(self):
        start, end = default_range(7)
        self.assertEqual(end, timezone.localdate())
        self.assertEqual((end - start).days, 6)
