"""
Tests for the local recovery cache.
"""

from django.core.cache import cache
from django.test import SimpleTestCase

from apps.updates.exceptions import RecoveryFailed
from apps.updates.recovery import (
    IDENTITY_KEY, SNAPSHOT_VERSION, RecoveryCache, RecoveryStore,
    chunk_key, legacy_key, meta_key,
)
from .helpers import FakeUser, aware, make_record

EMAIL = 'dev@example.com'
SCOPE = 'mine'


class BrokenStore:

    def get(self, key, default=None):
        raise ConnectionError('cache down')

    set = delete = keys = get


class RecoveryCacheTests(SimpleTestCase):

    def setUp(self):
        cache.clear()
        self.store = RecoveryStore('client-a')
        self.recovery = RecoveryCache(self.store, chunk_size=2)
        self.user = FakeUser('user', EMAIL)
        self.records = [
            make_record('completed', created_at=aware(2024, 3, day, 9), employee_email=EMAIL)
            for day in (1, 2, 3, 4, 5)
        ]

    # ==========================================================================
    # Write path
    # ==========================================================================

    def test_snapshot_is_chunked_and_versioned(self):
        self.assertTrue(self.recovery.save(self.user, self.records, SCOPE))

        meta = self.store.get(meta_key(SCOPE, EMAIL))
        self.assertEqual(meta['version'], SNAPSHOT_VERSION)
        self.assertEqual((meta['chunk_count'], meta['total']), (3, 5))
        self.assertEqual([len(self.store.get(chunk_key(SCOPE, EMAIL, i))) for i in range(3)], [2, 2, 1])
        self.assertEqual(self.store.get(IDENTITY_KEY)['email'], EMAIL)

    def test_round_trip_keeps_order(self):
        self.recovery.save(self.user, self.records, SCOPE)
        snapshot = self.recovery.recover(SCOPE, EMAIL)
        self.assertEqual(snapshot.records, self.records)
        self.assertFalse(snapshot.legacy)
        self.assertIsNotNone(snapshot.saved_at)

    def test_smaller_snapshot_removes_stale_chunks(self):
        self.recovery.save(self.user, self.records, SCOPE)
        self.recovery.save(self.user, self.records[:1], SCOPE)

        self.assertIsNone(self.store.get(chunk_key(SCOPE, EMAIL, 1)))
        self.assertIsNone(self.store.get(chunk_key(SCOPE, EMAIL, 2)))
        self.assertEqual(self.recovery.recover(SCOPE, EMAIL).records, self.records[:1])

    def test_save_replaces_legacy_snapshot(self):
        self.store.set(legacy_key(EMAIL), [self.records[0].to_dict()])
        self.recovery.save(self.user, self.records, SCOPE)
        self.assertIsNone(self.store.get(legacy_key(EMAIL)))

    def test_save_failure_is_swallowed(self):
        self.assertFalse(RecoveryCache(BrokenStore(), chunk_size=2).save(self.user, self.records, SCOPE))

    def test_clients_are_isolated(self):
        self.recovery.save(self.user, self.records, SCOPE)
        other = RecoveryCache(RecoveryStore('client-b'))
        with self.assertRaises(RecoveryFailed):
            other.recover(SCOPE)

    def test_scopes_are_isolated(self):
        self.recovery.save(self.user, self.records[:2], 'team')
        self.recovery.save(self.user, self.records[2:], SCOPE)

        self.assertEqual(self.recovery.recover('team', EMAIL).records, self.records[:2])
        self.assertEqual(self.recovery.recover(SCOPE, EMAIL).records, self.records[2:])

    def test_team_snapshot_is_not_read_for_personal_scope(self):
        self.recovery.save(self.user, self.records, 'team')
        with self.assertRaises(RecoveryFailed):
            self.recovery.recover(SCOPE, EMAIL)

    def test_clear_forgets_every_snapshot(self):
        self.recovery.save(self.user, self.records, SCOPE)
        self.recovery.save(self.user, self.records, 'team')

        self.assertGreater(self.recovery.clear(), 0)
        self.assertEqual(self.store.keys(), [])
        self.assertIsNone(self.store.get(IDENTITY_KEY))
        self.assertIsNone(self.store.get(meta_key('team', EMAIL)))
        with self.assertRaises(RecoveryFailed):
            self.recovery.recover(SCOPE)

    def test_clear_leaves_other_clients_alone(self):
        other = RecoveryCache(RecoveryStore('client-b'))
        other.save(self.user, self.records, SCOPE)
        self.recovery.save(self.user, self.records, SCOPE)

        self.recovery.clear()
        self.assertEqual(other.recover(SCOPE).records, self.records)

    # ==========================================================================
    # Read path
    # ==========================================================================

    def test_identity_record_resolves_email(self):
        self.recovery.save(self.user, self.records, SCOPE)
        self.assertEqual(self.recovery.recover(SCOPE).email, EMAIL)

    def test_key_pattern_resolves_email_without_identity(self):
        self.recovery.save(self.user, self.records, SCOPE)
        self.store.delete(IDENTITY_KEY)
        self.assertEqual(self.recovery.resolve_email(SCOPE), EMAIL)
        self.assertEqual(len(self.recovery.recover(SCOPE).records), 5)

    def test_key_pattern_ignores_other_scopes(self):
        self.recovery.save(self.user, self.records, 'team')
        self.store.delete(IDENTITY_KEY)
        self.assertIsNone(self.recovery.resolve_email(SCOPE))

    def test_legacy_snapshot_is_still_read(self):
        self.store.set(legacy_key(EMAIL), [record.to_dict() for record in self.records])
        snapshot = self.recovery.recover(SCOPE)
        self.assertTrue(snapshot.legacy)
        self.assertEqual(snapshot.records, self.records)

    def test_missing_chunk_falls_back_to_legacy(self):
        self.recovery.save(self.user, self.records, SCOPE)
        self.store.set(legacy_key(EMAIL), [self.records[0].to_dict()])
        self.store.delete(chunk_key(SCOPE, EMAIL, 1))
        snapshot = self.recovery.recover(SCOPE, EMAIL)
        self.assertTrue(snapshot.legacy)
        self.assertEqual(snapshot.records, self.records[:1])

    def test_unknown_version_is_ignored(self):
        self.recovery.save(self.user, self.records, SCOPE)
        meta = self.store.get(meta_key(SCOPE, EMAIL))
        self.store.set(meta_key(SCOPE, EMAIL), {**meta, 'version': SNAPSHOT_VERSION + 1})
        with self.assertRaises(RecoveryFailed):
            self.recovery.recover(SCOPE, EMAIL)

    def test_unreadable_rows_fail_recovery(self):
        self.store.set(legacy_key(EMAIL), [{'id': 'x', 'created_at': 'yesterday'}])
        with self.assertRaises(RecoveryFailed):
            self.recovery.recover(SCOPE, EMAIL)

    def test_nothing_cached(self):
        with self.assertRaises(RecoveryFailed) as ctx:
            self.recovery.recover(SCOPE)
        self.assertEqual(ctx.exception.kind, 'recovery')

    def test_broken_cache_raises_recovery_failed(self):
        with self.assertRaises(RecoveryFailed):
            RecoveryCache(BrokenStore()).recover(SCOPE)
