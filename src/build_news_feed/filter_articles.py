"""Narrow a built news feed by category, source, and recency."""

from datetime import datetime, timedelta, timezone
from typing import Iterable

from build_news_feed.models import EnrichedArticle
from classify_news.models import Category


def filter_articles(
    articles: Iterable[EnrichedArticle],
    category: Category | None = None,
    source: str | None = None,
    days: int | None = None,
    now: datetime | None = None,
) -> list[EnrichedArticle]:
    """
    Filter articles, preserving their order.

    Args:
        articles: Built feed, newest first
        category: Keep only this category
        source: Keep only this source name (exact match)
        days: Keep only articles published within the last `days` days
        now: Reference time for `days` (default: current UTC time)

    Returns:
        Articles matching every given filter
    """
    cutoff = None
    if days is not None:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days)

    return [
        article
        for article in articles
        if (category is None or article.category == category)
        and (source is None or article.source_name == source)
        and (cutoff is None or article.published_at >= cutoff)
    ]
