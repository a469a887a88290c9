"""Short-lived memoization of scan reports.

Entries are keyed by the effective scan parameters and expire after a fixed
TTL. Any apply invalidates the whole cache, since removals change files the
cache does not track individually.
"""

import hashlib
import json
import os
import threading
import time
from typing import Callable, Iterable

from diskcleaner.models import Category, ScanReport

CACHE_TTL = 300  # 5 minutes


def make_key(
    home: str | os.PathLike,
    min_size_bytes: int,
    min_age_days: float,
    categories: Iterable[Category | str],
) -> str:
    """
    Build a deterministic cache key.

    Categories are sorted first, so the same selection in a different order
    shares one entry. The home root is part of the key, so one cache can be
    shared by engines scoped to different homes.
    """
    names = sorted({c.value if isinstance(c, Category) else str(c) for c in categories})
    payload = json.dumps(
        {
            "home": os.fspath(home),
            "min_size": int(min_size_bytes),
            "min_age": float(min_age_days),
            "categories": names,
        },
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ScanCache:
    """Thread-safe TTL cache of scan reports."""

    def __init__(self, ttl_seconds: float = CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, ScanReport]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> ScanReport | None:
        """Return a live report for the key, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, report = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return report

    def put(self, key: str, report: ScanReport) -> None:
        """Store a report under the key."""
        with self._lock:
            self._entries[key] = (self._clock(), report)

    def invalidate(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
