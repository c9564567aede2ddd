"""
Local recovery cache.

A best-effort copy of the last successful fetch, kept per browser so a
dashboard can still show something when the session cannot be verified
or the fetch deadline passes before any data arrived. It is never the
source of truth: recovered rows are flagged and replaced by the next
live fetch.

Layout, all keys relative to the browser's namespace:
- ``identity``: {email, name, role} of the last user who loaded data
- ``snapshot:<scope>:<email>:meta``: {version, chunk_count, total, saved_at}
- ``snapshot:<scope>:<email>:chunk:<i>``: list of serialized UpdateRecord
- ``snapshot:<email>``: legacy whole-set list, read only

The scope is the dashboard that wrote the snapshot (``mine`` or ``team``),
so a personal view never reads what the team view saved.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.conf import settings
from django.core.cache import cache as default_cache
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .exceptions import RecoveryFailed
from .records import UpdateRecord

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
IDENTITY_KEY = 'identity'
SNAPSHOT_PREFIX = 'snapshot:'
_INDEX_KEY = '__keys__'


def meta_key(scope, email):
    return f'{SNAPSHOT_PREFIX}{scope}:{email}:meta'


def chunk_key(scope, email, index):
    return f'{SNAPSHOT_PREFIX}{scope}:{email}:chunk:{index}'


def legacy_key(email):
    return f'{SNAPSHOT_PREFIX}{email}'


class RecoveryStore:
    """
    Key/value store over the Django cache, namespaced by client id.

    The cache API cannot list keys, so the store keeps an index of the keys
    it wrote; ``keys()`` reads that index.
    """

    def __init__(self, client_id, cache=None, timeout=None):
        self.client_id = client_id
        self.cache = cache or default_cache
        self.timeout = settings.RECOVERY_CACHE_TIMEOUT if timeout is None else timeout

    def _key(self, key):
        return f'recovery:{self.client_id}:{key}'

    def get(self, key, default=None):
        return self.cache.get(self._key(key), default)

    def set(self, key, value):
        self.cache.set(self._key(key), value, self.timeout)
        index = set(self.keys())
        if key not in index:
            index.add(key)
            self.cache.set(self._key(_INDEX_KEY), sorted(index), self.timeout)

    def delete(self, key):
        self.cache.delete(self._key(key))
        index = set(self.keys())
        if key in index:
            index.discard(key)
            self.cache.set(self._key(_INDEX_KEY), sorted(index), self.timeout)

    def keys(self, prefix=''):
        return [key for key in self.cache.get(self._key(_INDEX_KEY), []) if key.startswith(prefix)]

    def clear(self):
        """Drop every key this client wrote, then the index itself."""
        keys = self.keys()
        self.cache.delete_many([self._key(key) for key in keys] + [self._key(_INDEX_KEY)])
        return len(keys)


@dataclass(frozen=True)
class RecoveredSnapshot:
    email: str
    records: list
    saved_at: datetime | None = None
    legacy: bool = False


class RecoveryCache:
    """
    Versioned snapshot of one user's fetched updates, per dashboard scope.

    Usage:
        recovery = RecoveryCache.for_request(request)
        recovery.save(user, records, 'mine')   # after a successful fetch
        snapshot = recovery.recover('mine')    # on session or deadline failure
    """

    def __init__(self, store, chunk_size=None):
        self.store = store
        self.chunk_size = chunk_size or settings.RECOVERY_CHUNK_SIZE

    @classmethod
    def for_request(cls, request):
        client_id = getattr(request, 'client_id', '')
        return cls(RecoveryStore(client_id)) if client_id else None

    def clear(self):
        """Forget every snapshot and the identity record for this browser."""
        removed = self.store.clear()
        logger.info('Cleared %d recovery key(s) for client %s', removed, self.store.client_id)
        return removed

    # ==========================================================================
    # Write path
    # ==========================================================================

    def save(self, user, records, scope):
        """
        Replace the ``scope`` snapshot of ``user`` with ``records``.

        Failures are logged and swallowed; the live data is already on screen.
        """
        email = user.email.lower()
        try:
            self._write(user, email, scope, list(records))
        except Exception:
            logger.warning('Could not write %s recovery snapshot for %s', scope, email, exc_info=True)
            return False
        return True

    def _write(self, user, email, scope, records):
        previous = self.store.get(meta_key(scope, email)) or {}
        chunks = [
            records[i:i + self.chunk_size]
            for i in range(0, len(records), self.chunk_size)
        ]
        for index, chunk in enumerate(chunks):
            self.store.set(chunk_key(scope, email, index), [record.to_dict() for record in chunk])

        # Chunks of a previous, larger snapshot
        for index in range(len(chunks), previous.get('chunk_count', 0)):
            self.store.delete(chunk_key(scope, email, index))
        self.store.delete(legacy_key(email))

        self.store.set(meta_key(scope, email), {
            'version': SNAPSHOT_VERSION,
            'chunk_count': len(chunks),
            'total': len(records),
            'saved_at': timezone.now().isoformat(),
        })
        self.store.set(IDENTITY_KEY, {
            'email': email,
            'name': user.get_full_name() if hasattr(user, 'get_full_name') else '',
            'role': getattr(user, 'role', ''),
        })
        logger.debug('Recovery snapshot %s for %s: %d record(s) in %d chunk(s)',
                     scope, email, len(records), len(chunks))

    # ==========================================================================
    # Read path
    # ==========================================================================

    def resolve_email(self, scope, email=None):
        """
        Work out whose snapshot to read.

        Order: the given email, the identity record, then any ``scope`` or
        legacy snapshot key that contains an email address.
        """
        if email:
            return email.lower()

        identity = self.store.get(IDENTITY_KEY) or {}
        if identity.get('email'):
            return identity['email']

        scoped = f'{SNAPSHOT_PREFIX}{scope}:'
        for key in self.store.keys(SNAPSHOT_PREFIX):
            rest = key[len(scoped):] if key.startswith(scoped) else key[len(SNAPSHOT_PREFIX):]
            candidate = rest.split(':', 1)[0]
            if '@' in candidate:
                logger.info('Recovery identity matched from key %s', key)
                return candidate
        return None

    def recover(self, scope, email=None):
        """
        Read the ``scope`` snapshot for ``email`` (or the resolved identity).

        Returns:
            RecoveredSnapshot with at least one record

        Raises:
            RecoveryFailed: no identity, or nothing usable cached for it
        """
        try:
            resolved = self.resolve_email(scope, email)
        except Exception as exc:
            raise RecoveryFailed('Recovery cache unavailable.') from exc
        if not resolved:
            raise RecoveryFailed('No cached identity to recover.')

        snapshot = self._read_chunked(scope, resolved) or self._read_legacy(resolved)
        if snapshot is None:
            raise RecoveryFailed(f'No cached updates for {resolved}.')

        logger.info('Recovered %d cached %s update(s) for %s%s', len(snapshot.records), scope,
                    resolved, ' (legacy format)' if snapshot.legacy else '')
        return snapshot

    def _read_chunked(self, scope, email):
        meta = self.store.get(meta_key(scope, email))
        if not meta or meta.get('version') != SNAPSHOT_VERSION:
            return None

        rows = []
        for index in range(meta.get('chunk_count', 0)):
            chunk = self.store.get(chunk_key(scope, email, index))
            if chunk is None:
                logger.warning('Recovery snapshot %s for %s is missing chunk %d', scope, email, index)
                return None
            rows.extend(chunk)

        records = self._deserialize(rows, email)
        if not records:
            return None
        saved_at = parse_datetime(meta['saved_at']) if meta.get('saved_at') else None
        return RecoveredSnapshot(email=email, records=records, saved_at=saved_at)

    def _read_legacy(self, email):
        rows = self.store.get(legacy_key(email))
        if not rows:
            return None
        records = self._deserialize(rows, email)
        if not records:
            return None
        return RecoveredSnapshot(email=email, records=records, legacy=True)

    def _deserialize(self, rows, email):
        try:
            return [UpdateRecord.from_dict(row) for row in rows]
        except (TypeError, ValueError, AttributeError):
            logger.warning('Discarding unreadable recovery snapshot for %s', email, exc_info=True)
            return []
