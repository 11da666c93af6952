"""FastAPI dependencies."""

from fastapi import Request

from build_news_feed.build_news_feed import NewsFeedPipeline


def get_pipeline(request: Request) -> NewsFeedPipeline:
    """Dependency to get the pipeline created at startup."""
    return request.app.state.pipeline
