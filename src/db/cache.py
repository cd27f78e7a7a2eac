"""
Execution result cache.

Charts on a dashboard often share a query (same source, fields and filters,
different chart type or styling), so results are cached on the canonical
JSON of the ``DataQuery`` alone.  Encodings and options never reach the key.

Entries expire after ``ttl`` seconds; beyond ``max_size`` the least recently
used entry is dropped.  ``invalidate_source`` flushes everything read from one
table, e.g. after the demo tables are re-seeded.
"""
from __future__ import annotations

import hashlib
import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from src.charts.spec import DataQuery
from src.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_MAX_SIZE = 256


@dataclass
class _Slot:
    source: str
    value: Any
    expires_at: float


class ResultCache:
    """Thread-safe TTL + LRU cache of chart execution results.

    Parameters
    ----------
    ttl : float
        Seconds an entry stays valid.
    max_size : int
        Entry limit; the least recently used entry is evicted past it.
    clock : callable, optional
        Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: OrderedDict[str, _Slot] = OrderedDict()
        self._lock = threading.Lock()
        self._ttl = ttl
        self._max_size = max_size
        self._clock = clock
        self._hits = self._misses = self._evictions = 0

    @staticmethod
    def make_key(query: DataQuery) -> str:
        """sha256 of the query's canonical (sorted, alias-keyed) JSON."""
        canonical = json.dumps(
            query.model_dump(mode="json", by_alias=True, exclude_none=True),
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode()).hexdigest()

    # ── Lookup / store ──────────────────────────────────

    def get(self, query: DataQuery) -> Any | None:
        key = self.make_key(query)
        with self._lock:
            slot = self._entries.get(key)
            if slot is None or slot.expires_at <= self._clock():
                if slot is not None:
                    del self._entries[key]
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
        logger.debug("Result cache hit  source=%s key=%s", query.source, key[:12])
        return slot.value

    def put(self, query: DataQuery, value: Any) -> None:
        key = self.make_key(query)
        with self._lock:
            self._entries[key] = _Slot(query.source, value, self._clock() + self._ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)
                self._evictions += 1

    # ── Invalidation ────────────────────────────────────

    def invalidate(self, query: DataQuery | None = None) -> int:
        """Drop the entry for *query*, or every entry when omitted. Returns the count removed."""
        with self._lock:
            if query is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                removed = 0 if self._entries.pop(self.make_key(query), None) is None else 1
        if removed:
            logger.info("Result cache invalidated  entries=%d", removed)
        return removed

    def invalidate_source(self, source: str) -> int:
        """Drop every entry whose query reads from *source*."""
        with self._lock:
            stale = [k for k, slot in self._entries.items() if slot.source == source]
            for key in stale:
                del self._entries[key]
        logger.info("Result cache invalidated  source=%s entries=%d", source, len(stale))
        return len(stale)

    def cleanup_expired(self) -> int:
        """Drop entries past their TTL so ``stats()`` reports live entries only."""
        now = self._clock()
        with self._lock:
            expired = [k for k, slot in self._entries.items() if slot.expires_at <= now]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Result cache expired  entries=%d", len(expired))
        return len(expired)

    def stats(self) -> dict[str, Any]:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "ttl_seconds": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": round(self._hits / lookups, 3) if lookups else 0.0,
            }
