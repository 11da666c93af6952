"""News article Pydantic models."""

from datetime import datetime

from pydantic import BaseModel

from build_news_feed.models import EnrichedArticle
from classify_news.models import Category


class NewsArticleResponse(BaseModel):
    """Enriched article as served to the map."""

    id: str
    title: str
    link: str
    date: datetime
    category: Category
    source: str
    location: str
    lat: float
    lng: float

    @classmethod
    def from_article(cls, article: EnrichedArticle) -> "NewsArticleResponse":
        return cls(
            id=article.id,
            title=article.title,
            link=article.link,
            date=article.published_at,
            category=article.category,
            source=article.source_name,
            location=article.location_name,
            lat=article.latitude,
            lng=article.longitude,
        )


class ErrorResponse(BaseModel):
    error: str
