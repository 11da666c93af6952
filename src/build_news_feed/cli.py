"""CLI for building the enriched news feed once."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from build_news_feed.build_news_feed import create_pipeline
from build_news_feed.config import load_pipeline_config
from build_news_feed.filter_articles import filter_articles
from build_news_feed.helpers import parse_build_news_feed_args
from build_news_feed.models import PipelineError
from common.cli_helpers import setup_logging
from common.local_io import save_jsonl_records_local

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    args = parse_build_news_feed_args(argv)

    config = load_pipeline_config(args.config)
    pipeline = create_pipeline(config)

    try:
        articles = pipeline.run()
    except PipelineError:
        logger.exception("Failed to build news feed")
        return 1

    articles = filter_articles(
        articles,
        category=args.category,
        source=args.source,
        days=args.days,
    )
    if not articles:
        logger.warning("No articles to show")
        return 0

    for article in articles:
        logger.info(
            "  %s | %s | %s | %s (%.4f, %.4f)",
            article.published_at.isoformat(),
            article.category.value,
            article.title,
            article.location_name,
            article.latitude,
            article.longitude,
        )

    if args.load_local:
        save_jsonl_records_local(articles, "news_feed")

    return 0


if __name__ == "__main__":
    sys.exit(main())
