"""News feed API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from build_news_feed.build_news_feed import NewsFeedPipeline
from build_news_feed.filter_articles import filter_articles
from build_news_feed.models import PipelineError
from classify_news.models import Category
from news_api.dependencies import get_pipeline
from news_api.models.article import ErrorResponse, NewsArticleResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["news"])

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
CACHE_HEADERS = {**CORS_HEADERS, "Cache-Control": "public, max-age=600"}

FAILURE_MESSAGE = "Failed to fetch news feeds"


@router.get(
    "/get-news",
    response_model=list[NewsArticleResponse],
    responses={500: {"model": ErrorResponse}},
)
def get_news(
    pipeline: Annotated[NewsFeedPipeline, Depends(get_pipeline)],
    category: Annotated[Category | None, Query(description='"Major Loss" or "M&A"')] = None,
    source: Annotated[str | None, Query(description="Filter by source name")] = None,
    days: Annotated[int | None, Query(ge=1, description="Only the last N days")] = None,
):
    """Get the enriched news feed, newest first.

    The feed is rebuilt at most once per cache TTL; filters are applied to
    the cached feed and never trigger a rebuild.
    """
    try:
        articles = pipeline.run()
    except PipelineError:
        logger.exception("get-news error")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=FAILURE_MESSAGE).model_dump(),
            headers=CORS_HEADERS,
        )

    articles = filter_articles(articles, category=category, source=source, days=days)
    body = [NewsArticleResponse.from_article(a).model_dump(mode="json") for a in articles]
    return JSONResponse(content=body, headers=CACHE_HEADERS)
