"""Data models for build_news_feed pipeline stage."""

from dataclasses import dataclass
from datetime import datetime

from classify_news.models import Category


@dataclass(frozen=True)
class EnrichedArticle:
    """News item with a category and resolved coordinates, ready for display."""
    id: str
    title: str
    link: str
    published_at: datetime
    category: Category
    source_name: str
    location_name: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ResultCacheEntry:
    """Output of the last successful pipeline run."""
    built_at: datetime
    payload: tuple[EnrichedArticle, ...]


class PipelineError(RuntimeError):
    """A pipeline run failed outside per-source and per-item handling."""
