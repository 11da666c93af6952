"""Single-slot TTL cache of the last pipeline output."""

import threading
from datetime import datetime, timedelta
from typing import Iterable

from build_news_feed.models import EnrichedArticle, ResultCacheEntry

RESULT_TTL = timedelta(minutes=10)


class ResultCache:
    def __init__(self, ttl: timedelta = RESULT_TTL):
        self.ttl = ttl
        self._entry: ResultCacheEntry | None = None
        self._lock = threading.Lock()

    @property
    def entry(self) -> ResultCacheEntry | None:
        return self._entry

    def get(self, now: datetime) -> tuple[EnrichedArticle, ...] | None:
        """Return the cached payload if it is younger than the TTL, else None."""
        with self._lock:
            entry = self._entry
        if entry is None or now - entry.built_at >= self.ttl:
            return None
        return entry.payload

    def put(self, payload: Iterable[EnrichedArticle], now: datetime) -> ResultCacheEntry:
        """Replace the slot with a new payload."""
        entry = ResultCacheEntry(built_at=now, payload=tuple(payload))
        with self._lock:
            self._entry = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None
