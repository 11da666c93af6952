"""Concurrent ingestion of all news sources."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol, Sequence

from ingest_news.models import AdapterOutcome, RawItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_RAW_ITEMS = 400


class SourceAdapter(Protocol):
    source: str

    def fetch(self) -> list[RawItem]:
        ...


def _run_adapter(adapter: SourceAdapter) -> AdapterOutcome:
    try:
        items = adapter.fetch()
    except Exception as e:
        logger.error("Failed to fetch %s: %s", adapter.source, e)
        return AdapterOutcome(source=adapter.source, error=e)
    return AdapterOutcome(source=adapter.source, items=list(items))


def fetch_all(
    adapters: Sequence[SourceAdapter],
    max_workers: int | None = None,
) -> list[AdapterOutcome]:
    """
    Run all adapters concurrently and collect one outcome per adapter.

    A failing adapter yields an outcome with `error` set and no items; it
    never prevents the other adapters from completing.

    Args:
        adapters: Source adapters, in merge order
        max_workers: Thread pool size (default: one per adapter)

    Returns:
        AdapterOutcome list in the same order as `adapters`
    """
    if not adapters:
        return []

    workers = max_workers or len(adapters)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as executor:
        outcomes = list(executor.map(_run_adapter, adapters))

    failed = [o.source for o in outcomes if not o.ok]
    logger.info(
        "Fetched %d sources (%d failed%s)",
        len(outcomes),
        len(failed),
        f": {', '.join(failed)}" if failed else "",
    )
    return outcomes


def merge_items(
    outcomes: Sequence[AdapterOutcome],
    max_items: int = DEFAULT_MAX_RAW_ITEMS,
) -> list[RawItem]:
    """Concatenate outcomes in order, drop items without title or link, cap to `max_items`."""
    merged = [
        item
        for outcome in outcomes
        for item in outcome.items
        if item.title and item.link
    ]

    if len(merged) > max_items:
        logger.info("Truncating %d raw items to %d", len(merged), max_items)
        merged = merged[:max_items]

    return merged


def ingest_news(
    adapters: Sequence[SourceAdapter],
    max_items: int = DEFAULT_MAX_RAW_ITEMS,
    max_workers: int | None = None,
) -> list[RawItem]:
    """Fetch every source concurrently and return the merged, capped raw item list."""
    logger.info("Ingesting news from %d sources", len(adapters))

    outcomes = fetch_all(adapters, max_workers=max_workers)
    items = merge_items(outcomes, max_items=max_items)

    if not items:
        logger.warning("0 raw items ingested")
    else:
        logger.info("%d raw items ingested", len(items))
    return items
