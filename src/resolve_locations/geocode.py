"""Place name geocoding with a TTL cache."""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from resolve_locations.models import GeoCacheEntry, GeoPoint

logger = logging.getLogger(__name__)

GEOCODE_TTL = timedelta(days=7)

LOCK_STRIPES = 64


class GeocodeProvider(Protocol):
    def geocode(self, name: str) -> list[GeoPoint]:
        ...


class NominatimGeocodeProvider:
    """OpenStreetMap Nominatim lookups, spaced by a rate limiter and never retried."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 10,
        min_delay_seconds: float = 1.0,
    ):
        self._geocoder = Nominatim(user_agent=user_agent, timeout=timeout)
        self._geocode = RateLimiter(
            self._geocoder.geocode,
            min_delay_seconds=min_delay_seconds,
            max_retries=0,
            swallow_exceptions=False,
        )

    def geocode(self, name: str) -> list[GeoPoint]:
        locations = self._geocode(name, exactly_one=False)
        if not locations:
            return []
        return [GeoPoint(latitude=loc.latitude, longitude=loc.longitude) for loc in locations]


class GeoCache:
    """Coordinates keyed by the exact place name string."""

    def __init__(self, ttl: timedelta = GEOCODE_TTL):
        self.ttl = ttl
        self._entries: dict[str, GeoCacheEntry] = {}

    def get(self, name: str, now: datetime) -> GeoCacheEntry | None:
        """Return the entry for `name` if it is younger than the TTL."""
        entry = self._entries.get(name)
        if entry is None or now - entry.resolved_at >= self.ttl:
            return None
        return entry

    def put(self, name: str, point: GeoPoint, now: datetime) -> GeoCacheEntry:
        entry = GeoCacheEntry(
            latitude=point.latitude,
            longitude=point.longitude,
            resolved_at=now,
        )
        self._entries[name] = entry
        return entry

    def __len__(self) -> int:
        return len(self._entries)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class Geocoder:
    """Resolves place names to coordinates, owning the GeoCache.

    Lookups for the same name are serialized so a cache miss triggers at
    most one provider call. Names share a fixed pool of striped locks.
    Failed or invalid lookups are not cached.
    """

    def __init__(
        self,
        provider: GeocodeProvider,
        cache: GeoCache,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._provider = provider
        self._cache = cache
        self._clock = clock
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))

    def _lock_for(self, name: str) -> threading.Lock:
        return self._locks[hash(name) % len(self._locks)]

    def resolve(self, place_name: str | None) -> GeoPoint | None:
        if not place_name:
            return None

        with self._lock_for(place_name):
            cached = self._cache.get(place_name, self._clock())
            if cached is not None:
                return GeoPoint(latitude=cached.latitude, longitude=cached.longitude)

            try:
                results = self._provider.geocode(place_name)
            except Exception as e:
                logger.debug("Geocoder error for %s: %s", place_name, e)
                return None

            if not results:
                logger.debug("No geocode result for %s", place_name)
                return None

            first = results[0]
            if not (_is_finite_number(first.latitude) and _is_finite_number(first.longitude)):
                logger.debug("Invalid coordinates for %s: %r", place_name, first)
                return None

            point = GeoPoint(latitude=float(first.latitude), longitude=float(first.longitude))
            self._cache.put(place_name, point, self._clock())
            return point
