"""Build the enriched news feed: ingest, classify, locate, geocode, cache."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Callable, Sequence

from build_news_feed.config import PipelineConfig
from build_news_feed.models import EnrichedArticle, PipelineError
from build_news_feed.result_cache import ResultCache
from classify_news.classify_news import classify
from classify_news.models import Category
from ingest_news.fetch_feed_items import FeedAdapter
from ingest_news.ingest_news import SourceAdapter, ingest_news
from ingest_news.models import RawItem
from ingest_news.scrape_press_releases import PressReleaseScraper
from resolve_locations.extract_location import (
    PlaceExtractor,
    SpacyPlaceExtractor,
    extract_location,
    match_city_region,
)
from resolve_locations.geocode import GeoCache, Geocoder, NominatimGeocodeProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_ARTICLES = 200


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def enrich_item(
    item: RawItem,
    place_extractors: Sequence[PlaceExtractor],
    geocoder: Geocoder,
) -> EnrichedArticle | None:
    """
    Classify, locate, and geocode one raw item.

    Args:
        item: Raw item with title and link
        place_extractors: Location extraction strategies, tried in order
        geocoder: Geocoder used to resolve the extracted place

    Returns:
        EnrichedArticle, or None if the item has no category, no location,
        or no coordinates
    """
    text = f"{item.title} {item.snippet or ''}"

    category = item.forced_category or classify(text)
    if category is None:
        logger.debug("Dropped %s: no category", item.id)
        return None

    location = extract_location(text, place_extractors)
    if location is None:
        logger.debug("Dropped %s: no location", item.id)
        return None

    point = geocoder.resolve(location)
    if point is None:
        logger.debug("Dropped %s: could not geocode %r", item.id, location)
        return None

    return EnrichedArticle(
        id=item.id,
        title=item.title,
        link=item.link,
        published_at=item.published_at,
        category=category,
        source_name=item.source_name,
        location_name=location,
        latitude=point.latitude,
        longitude=point.longitude,
    )


def finalize_articles(
    articles: Sequence[EnrichedArticle],
    max_articles: int = DEFAULT_MAX_ARTICLES,
) -> list[EnrichedArticle]:
    """Sort newest first and cap to `max_articles`."""
    ordered = sorted(articles, key=lambda a: a.published_at, reverse=True)
    return ordered[:max_articles]


class NewsFeedPipeline:
    """Runs the news feed pipeline and owns the result cache.

    A fresh cached payload is returned without touching any source.
    Rebuilds are serialized, so concurrent callers on a cold cache trigger
    a single run.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        geocoder: Geocoder,
        place_extractors: Sequence[PlaceExtractor],
        result_cache: ResultCache,
        max_raw_items: int = 400,
        max_articles: int = DEFAULT_MAX_ARTICLES,
        ingest_workers: int | None = None,
        enrich_workers: int = 1,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.adapters = list(adapters)
        self.geocoder = geocoder
        self.place_extractors = list(place_extractors)
        self.result_cache = result_cache
        self.max_raw_items = max_raw_items
        self.max_articles = max_articles
        self.ingest_workers = ingest_workers
        self.enrich_workers = enrich_workers
        self._clock = clock
        self._run_lock = threading.Lock()

    def run(self) -> list[EnrichedArticle]:
        """Return the cached feed if fresh, otherwise rebuild and cache it.

        Raises:
            PipelineError: If the rebuild fails; the cache is left unchanged.
        """
        cached = self.result_cache.get(self._clock())
        if cached is not None:
            logger.info("Serving %d cached articles", len(cached))
            return list(cached)

        with self._run_lock:
            # Another caller may have rebuilt while we waited
            cached = self.result_cache.get(self._clock())
            if cached is not None:
                return list(cached)

            try:
                articles = self._build()
            except Exception as e:
                raise PipelineError("Failed to build news feed") from e

            entry = self.result_cache.put(articles, self._clock())
            return list(entry.payload)

    def _build(self) -> list[EnrichedArticle]:
        raw_items = ingest_news(
            self.adapters,
            max_items=self.max_raw_items,
            max_workers=self.ingest_workers,
        )

        enriched = self._enrich(raw_items)
        articles = finalize_articles(enriched, self.max_articles)

        logger.info(
            "Built %d articles from %d raw items (%d dropped)",
            len(articles),
            len(raw_items),
            len(raw_items) - len(enriched),
        )
        return articles

    def _enrich(self, items: Sequence[RawItem]) -> list[EnrichedArticle]:
        enrich = partial(
            enrich_item,
            place_extractors=self.place_extractors,
            geocoder=self.geocoder,
        )

        if self.enrich_workers <= 1:
            results = [enrich(item) for item in items]
        else:
            # Provider rate limiter still spaces the outbound calls
            with ThreadPoolExecutor(
                max_workers=self.enrich_workers, thread_name_prefix="enrich"
            ) as executor:
                results = list(executor.map(enrich, items))

        return [article for article in results if article is not None]


def create_pipeline(config: PipelineConfig) -> NewsFeedPipeline:
    """Wire adapters, extractors, geocoder, and caches from config."""
    limits = config.limits

    adapters: list[SourceAdapter] = [
        FeedAdapter(
            source=feed.key,
            url=feed.url,
            prefix=feed.prefix,
            source_name=feed.source_name,
            forced_category=Category(feed.category) if feed.category else None,
            timeout=limits.request_timeout,
        )
        for feed in config.feeds
    ]
    if config.scrape.enabled:
        adapters.append(
            PressReleaseScraper(
                source=config.scrape.key,
                url=config.scrape.url,
                prefix=config.scrape.prefix,
                source_name=config.scrape.source_name,
                host=config.scrape.host,
                max_links=limits.max_scraped_links,
                timeout=limits.request_timeout,
            )
        )

    provider = NominatimGeocodeProvider(
        user_agent=config.geocoder.user_agent,
        timeout=config.geocoder.timeout,
        min_delay_seconds=config.geocoder.min_delay_seconds,
    )
    geocoder = Geocoder(
        provider,
        GeoCache(ttl=timedelta(seconds=config.cache.geocode_ttl_seconds)),
    )

    place_extractors: list[PlaceExtractor] = [
        SpacyPlaceExtractor(model=config.extractor.spacy_model),
        match_city_region,
    ]

    logger.info(
        "Created pipeline with %d sources: %s",
        len(adapters),
        ", ".join(a.source for a in adapters),
    )
    return NewsFeedPipeline(
        adapters=adapters,
        geocoder=geocoder,
        place_extractors=place_extractors,
        result_cache=ResultCache(ttl=timedelta(seconds=config.cache.result_ttl_seconds)),
        max_raw_items=limits.max_raw_items,
        max_articles=limits.max_articles,
        ingest_workers=limits.ingest_workers,
        enrich_workers=limits.enrich_workers,
    )
