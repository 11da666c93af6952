"""Data models for ingest_news pipeline stage."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from classify_news.models import Category


@dataclass
class RawItem:
    """News item normalized from a feed entry or a scraped link."""
    id: str
    title: str
    link: str
    published_at: datetime
    snippet: str
    source_name: str
    forced_category: Optional[Category] = None


@dataclass
class AdapterOutcome:
    """Result of running one source adapter; `error` is set when it failed."""
    source: str
    items: list[RawItem] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None
