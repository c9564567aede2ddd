"""
Tests for the stats aggregator and the CSV export rows.
"""

from datetime import date

from django.test import SimpleTestCase

from apps.updates.filters import FeedFilter, FeedTab, filter_updates
from apps.updates.services import EMPTY_STATS, EXPORT_HEADERS, FeedStats, compute_stats, export_rows
from .helpers import aware, make_record


class ComputeStatsTests(SimpleTestCase):

    def test_empty(self):
        self.assertEqual(compute_stats([]), EMPTY_STATS)

    def test_counts_by_status(self):
        records = [
            make_record('completed'),
            make_record('completed'),
            make_record('in-progress'),
            make_record('blocked', blocker_type='Blocker', blocker_description='Build broken'),
            make_record('to-do'),
            make_record('reopen', blocker_type='Risk', blocker_description='Scope creep'),
        ]
        self.assertEqual(
            compute_stats(records),
            FeedStats(total=6, completed=2, in_progress=1, blocked=1, blockers=2),
        )

    def test_status_counts_never_exceed_total(self):
        statuses = ['to-do', 'in-progress', 'completed', 'blocked', 'reopen']
        for size in range(len(statuses) + 1):
            with self.subTest(size=size):
                records = [make_record(status) for status in statuses[:size]]
                stats = compute_stats(records)
                self.assertEqual(stats.total, len(records))
                self.assertLessEqual(stats.completed + stats.in_progress + stats.blocked, stats.total)

    def test_accepts_any_iterable(self):
        stats = compute_stats(make_record('completed') for _ in range(3))
        self.assertEqual((stats.total, stats.completed), (3, 3))


class BlockedTabScenarioTests(SimpleTestCase):
    """A user's three updates, narrowed to the 'blocked' tab."""

    def test_stats_follow_the_filtered_set(self):
        created = aware(2024, 3, 10, 9)
        records = [
            make_record('completed', created_at=created),
            make_record('in-progress', created_at=created),
            make_record('blocked', created_at=created),
        ]
        feed_filter = FeedFilter(start=date(2024, 3, 1), end=date(2024, 3, 31), tab=FeedTab.BLOCKED)

        displayed = filter_updates(records, feed_filter, now=aware(2024, 3, 31, 12))

        self.assertEqual(displayed, [records[2]])
        self.assertEqual(
            compute_stats(displayed),
            FeedStats(total=1, completed=0, in_progress=0, blocked=1, blockers=0),
        )


class ExportRowsTests(SimpleTestCase):

    def test_header_then_one_row_per_update(self):
        record = make_record(
            'blocked',
            created_at=aware(2024, 3, 10, 9, 30),
            team_name='Platform',
            employee_name='Asha Rao',
            tasks_completed='Migrated the queue',
            priority='High',
            story_points=5,
            start_date=date(2024, 3, 8),
            end_date=date(2024, 3, 12),
            blocker_type='Dependency',
            blocker_description='Waiting on infra',
            additional_notes='Pairing tomorrow',
        )

        rows = list(export_rows([record]))

        self.assertEqual(rows[0], EXPORT_HEADERS)
        self.assertEqual(rows[1], [
            '2024-03-10', '2024-03-08', '2024-03-12', 5, 'Platform', 'Asha Rao',
            'Migrated the queue', 'blocked', 'High', 'Dependency', 'Pairing tomorrow',
        ])

    def test_missing_values_are_blank(self):
        rows = list(export_rows([make_record(created_at=aware(2024, 3, 10, 9))]))
        self.assertEqual(rows[1][1:4], ['', '', ''])
        self.assertEqual(rows[1][-2:], ['', ''])
