"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from build_news_feed.build_news_feed import create_pipeline
from common.cli_helpers import setup_logging
from news_api.config import get_config
from news_api.routers import health, news

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the pipeline (and its caches) once per process."""
    setup_logging()
    config = get_config()
    app.state.pipeline = create_pipeline(config.pipeline)
    logger.info("News API ready")
    yield


app = FastAPI(
    title="Insurance News Map API",
    description="Major loss and M&A insurance news, classified and geocoded for mapping",
    version="1.0.0",
    lifespan=lifespan,
)

# Register routers
app.include_router(health.router)
app.include_router(news.router)


def main():
    """Run the API server."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "news_api.main:app",
        host=config.server.host,
        port=config.server.port,
    )


if __name__ == "__main__":
    main()
