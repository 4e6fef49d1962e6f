# core/cache.py

"""
Durable local snapshot cache.

Keeps the last known state of the seven cached collections as one JSON
blob under a fixed cache key. The blob is rewritten after every committed
change and can be read back when the database is unreachable.
"""

import json
import logging

from django.conf import settings
from django.core.cache import caches
from django.db import transaction

from core.serializers import serialize_snapshot

logger = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = 'law-firm-os-data'

CACHED_COLLECTIONS = (
    'employees',
    'taskLogs',
    'financials',
    'clients',
    'cashboxTransactions',
    'tickets',
    'caseTypes',
)


class SnapshotCache:

    def __init__(self, repository, cache_alias='default', key=None):
        self.repository = repository
        self.cache_alias = cache_alias
        self.key = key or getattr(settings, 'FIRM_SNAPSHOT_CACHE_KEY', DEFAULT_CACHE_KEY)
        self._unsubscribe = None

    @property
    def cache(self):
        return caches[self.cache_alias]

    # -------------------------------------------------------------------------
    # SUBSCRIPTION
    # -------------------------------------------------------------------------

    def start(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.repository.subscribe(self.handle_change)
        return self

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_change(self, collection_name, instance, action):
        """Schedule one refresh per transaction, after it commits."""
        if collection_name not in CACHED_COLLECTIONS and collection_name != 'customExpenses':
            return
        if self._refresh_queued():
            return
        transaction.on_commit(self._flush)

    def _refresh_queued(self):
        # A rollback drops its on_commit callbacks, so only a callback still
        # queued on the connection counts as pending
        connection = transaction.get_connection()
        return any(entry[1] == self._flush for entry in connection.run_on_commit)

    def _flush(self):
        self.refresh()

    # -------------------------------------------------------------------------
    # READ / WRITE
    # -------------------------------------------------------------------------

    def refresh(self):
        """Rewrite the blob from a fresh repository snapshot."""
        data = serialize_snapshot(self.repository.snapshot())
        self.cache.set(self.key, json.dumps(data), timeout=None)
        logger.debug(f"Snapshot cache '{self.key}' refreshed")
        return data

    def load(self):
        """
        Last stored blob, or None when nothing has been cached.
        Unreadable blobs are discarded.
        """
        raw = self.cache.get(self.key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            data = None
        if not isinstance(data, dict):
            logger.warning(f"Discarding unreadable snapshot cache '{self.key}'")
            self.cache.delete(self.key)
            return None
        return {name: data.get(name) for name in CACHED_COLLECTIONS}

    def clear(self):
        self.cache.delete(self.key)


_snapshot_cache = None


def get_snapshot_cache():
    global _snapshot_cache
    if _snapshot_cache is None:
        from core.repository import get_repository
        _snapshot_cache = SnapshotCache(get_repository())
    return _snapshot_cache
