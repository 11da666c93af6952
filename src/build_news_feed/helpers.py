"""Helper functions for build_news_feed CLI."""

from __future__ import annotations

import argparse
from functools import partial

from classify_news.models import Category
from common.cli_helpers import parse_positive_int


def parse_category(value: str) -> Category:
    '''Parse a category given by wire value ("Major Loss", "M&A") or member name.'''
    for category in Category:
        if value in (category.value, category.name):
            return category
    valid = ", ".join(c.value for c in Category)
    raise argparse.ArgumentTypeError(f"category must be one of: {valid}")


def parse_build_news_feed_args(argv: list[str] | None = None) -> argparse.Namespace:
    '''Parse CLI arguments for build_news_feed.'''

    parser = argparse.ArgumentParser()

    # Input options
    parser.add_argument(
        "--config",
        default=None,
        help="Config name under configs/ (default: $NEWS_MAP_CONFIG or prod)",
    )

    # Filter options
    parser.add_argument(
        "--category",
        type=parse_category,
        default=None,
        help='Only show this category ("Major Loss" or "M&A")',
    )
    parser.add_argument("--source", default=None, help="Only show this source name")
    parser.add_argument(
        "--days",
        type=partial(parse_positive_int, field_name="days"),
        default=None,
        help="Only show articles from the last N days",
    )

    # Output options
    parser.add_argument("--load-local", action="store_true", help="Save results to local file")

    return parser.parse_args(argv)
