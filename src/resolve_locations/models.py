from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeoCacheEntry:
    latitude: float
    longitude: float
    resolved_at: datetime
