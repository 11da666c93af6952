"""Tests for build_news_feed.build_news_feed module."""

import dataclasses
import math
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from build_news_feed.build_news_feed import (
    NewsFeedPipeline,
    create_pipeline,
    enrich_item,
    finalize_articles,
)
from build_news_feed.config import PipelineConfig
from build_news_feed.models import EnrichedArticle, PipelineError
from build_news_feed.result_cache import ResultCache
from classify_news.models import Category
from ingest_news.fetch_feed_items import FeedAdapter
from ingest_news.models import RawItem
from ingest_news.scrape_press_releases import PressReleaseScraper
from resolve_locations.extract_location import match_city_region
from resolve_locations.geocode import GeoCache, Geocoder
from resolve_locations.models import GeoPoint

T0 = datetime(2024, 6, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class StubAdapter:
    def __init__(self, source: str, items=None, error: Exception | None = None):
        self.source = source
        self._items = items or []
        self._error = error
        self.calls = 0

    def fetch(self) -> list[RawItem]:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return list(self._items)


def _item(
    id: str,
    title: str,
    snippet: str = "",
    hours_ago: int = 0,
    forced_category: Category | None = None,
    source_name: str = "Google News",
) -> RawItem:
    return RawItem(
        id=id,
        title=title,
        link=f"https://example.com/{id}",
        published_at=T0 - timedelta(hours=hours_ago),
        snippet=snippet,
        source_name=source_name,
        forced_category=forced_category,
    )


def _provider(point: GeoPoint | None = GeoPoint(51.5074, -0.1278)) -> Mock:
    provider = Mock()
    provider.geocode.return_value = [point] if point else []
    return provider


def _pipeline(adapters, provider=None, clock=None, **kwargs) -> NewsFeedPipeline:
    clock = clock or FakeClock(T0)
    return NewsFeedPipeline(
        adapters=adapters,
        geocoder=Geocoder(provider or _provider(), GeoCache(), clock=clock),
        place_extractors=[match_city_region],
        result_cache=ResultCache(),
        clock=clock,
        **kwargs,
    )


class TestEnrichItem:
    def _geocoder(self, provider=None) -> Geocoder:
        return Geocoder(provider or _provider(), GeoCache(), clock=lambda: T0)

    def test_enriches_classified_item(self) -> None:
        item = _item("a", "Insurer acquires rival in London, England")
        result = enrich_item(item, [match_city_region], self._geocoder())

        assert result == EnrichedArticle(
            id="a",
            title="Insurer acquires rival in London, England",
            link="https://example.com/a",
            published_at=T0,
            category=Category.MERGER_ACQUISITION,
            source_name="Google News",
            location_name="London, England",
            latitude=51.5074,
            longitude=-0.1278,
        )

    def test_forced_category_bypasses_classifier(self) -> None:
        item = _item(
            "a",
            "Hurricane damage in Miami, Florida",
            forced_category=Category.MERGER_ACQUISITION,
        )
        result = enrich_item(item, [match_city_region], self._geocoder())
        assert result.category == Category.MERGER_ACQUISITION

    def test_uses_snippet_for_classification_and_location(self) -> None:
        item = _item("a", "Quarterly update", snippet="Flood losses in Leeds, England")
        result = enrich_item(item, [match_city_region], self._geocoder())
        assert result.category == Category.MAJOR_LOSS
        assert result.location_name == "Leeds, England"

    def test_drops_unclassified_item(self) -> None:
        extractor = Mock(return_value="London")
        item = _item("a", "Steady premiums reported in London, England")
        assert enrich_item(item, [extractor], self._geocoder()) is None
        extractor.assert_not_called()

    def test_drops_item_without_location(self) -> None:
        provider = _provider()
        item = _item("a", "major loss reported")
        assert enrich_item(item, [match_city_region], self._geocoder(provider)) is None
        provider.geocode.assert_not_called()

    def test_drops_item_without_coordinates(self) -> None:
        item = _item("a", "Storm hits Lagos, Nigeria")
        assert enrich_item(item, [match_city_region], self._geocoder(_provider(None))) is None


class TestFinalizeArticles:
    def _article(self, id: str, hours_ago: int) -> EnrichedArticle:
        return EnrichedArticle(
            id=id,
            title=id,
            link=id,
            published_at=T0 - timedelta(hours=hours_ago),
            category=Category.MAJOR_LOSS,
            source_name="s",
            location_name="l",
            latitude=0.0,
            longitude=0.0,
        )

    def test_sorts_newest_first(self) -> None:
        articles = [self._article("old", 5), self._article("new", 0), self._article("mid", 2)]
        assert [a.id for a in finalize_articles(articles)] == ["new", "mid", "old"]

    def test_caps(self) -> None:
        articles = [self._article(str(n), n) for n in range(250)]
        result = finalize_articles(articles)
        assert len(result) == 200
        assert result[0].id == "0"

        assert len(finalize_articles(articles, max_articles=10)) == 10


class TestNewsFeedPipeline:
    def _adapters(self):
        return [
            StubAdapter(
                "google-news-loss",
                [
                    _item("gnl-0", "Wildfire near Los Angeles, California", hours_ago=3,
                          forced_category=Category.MAJOR_LOSS),
                    _item("gnl-1", "Claims update", hours_ago=1,
                          forced_category=Category.MAJOR_LOSS),
                ],
            ),
            StubAdapter(
                "google-news-ma",
                [
                    _item("gnm-0", "Broker buyout agreed in London, England", hours_ago=2,
                          forced_category=Category.MERGER_ACQUISITION),
                ],
            ),
            StubAdapter(
                "haggie-press-releases",
                [
                    _item("hp-0", "ReCo acquires SmallCo in Hamilton, Bermuda",
                          source_name="Haggie Partners"),
                    _item("hp-1", "New office opens in Zurich, Switzerland",
                          source_name="Haggie Partners"),
                ],
            ),
        ]

    def test_builds_sorted_enriched_feed(self) -> None:
        pipeline = _pipeline(self._adapters())
        articles = pipeline.run()

        assert [a.id for a in articles] == ["hp-0", "gnm-0", "gnl-0"]
        assert articles[0].category == Category.MERGER_ACQUISITION
        assert articles[2].category == Category.MAJOR_LOSS
        for a in articles:
            assert a.category in (Category.MAJOR_LOSS, Category.MERGER_ACQUISITION)
            assert math.isfinite(a.latitude) and math.isfinite(a.longitude)
        dates = [a.published_at for a in articles]
        assert dates == sorted(dates, reverse=True)

    def test_continues_when_one_source_fails(self) -> None:
        adapters = self._adapters()
        adapters[1] = StubAdapter("google-news-ma", error=requests.ConnectionError("Network error"))
        articles = _pipeline(adapters).run()

        assert [a.id for a in articles] == ["hp-0", "gnl-0"]

    def test_second_run_within_ttl_uses_cache(self) -> None:
        adapters = self._adapters()
        provider = _provider()
        clock = FakeClock(T0)
        pipeline = _pipeline(adapters, provider=provider, clock=clock)

        first = pipeline.run()
        geocode_calls = provider.geocode.call_count

        clock.now = T0 + timedelta(minutes=9)
        second = pipeline.run()

        assert second == first
        assert all(a.calls == 1 for a in adapters)
        assert provider.geocode.call_count == geocode_calls

    def test_rebuilds_after_ttl(self) -> None:
        adapters = self._adapters()
        clock = FakeClock(T0)
        pipeline = _pipeline(adapters, clock=clock)

        pipeline.run()
        clock.now = T0 + timedelta(minutes=10)
        pipeline.run()

        assert all(a.calls == 2 for a in adapters)
        assert pipeline.result_cache.entry.built_at == T0 + timedelta(minutes=10)

    def test_geocodes_repeated_location_once(self) -> None:
        adapters = [
            StubAdapter(
                "loss",
                [
                    _item(f"gnl-{n}", "Flood in London, England", forced_category=Category.MAJOR_LOSS)
                    for n in range(5)
                ],
            ),
        ]
        provider = _provider()
        articles = _pipeline(adapters, provider=provider).run()

        assert len(articles) == 5
        provider.geocode.assert_called_once_with("London, England")

    def test_caps_raw_items_and_output(self) -> None:
        adapters = [
            StubAdapter(
                "loss",
                [
                    _item(f"gnl-{n}", "Flood in London, England", hours_ago=n,
                          forced_category=Category.MAJOR_LOSS)
                    for n in range(500)
                ],
            ),
        ]
        articles = _pipeline(adapters).run()
        assert len(articles) == 200
        assert articles[0].id == "gnl-0"

        articles = _pipeline(adapters, max_raw_items=3, max_articles=200).run()
        assert [a.id for a in articles] == ["gnl-0", "gnl-1", "gnl-2"]

    def test_parallel_enrichment_preserves_results(self) -> None:
        sequential = _pipeline(self._adapters()).run()
        parallel = _pipeline(self._adapters(), enrich_workers=4).run()
        assert parallel == sequential

    def test_provider_failure_drops_only_that_item(self) -> None:
        adapters = [
            StubAdapter(
                "loss",
                [
                    _item("i0", "Flood in London, England", hours_ago=1,
                          forced_category=Category.MAJOR_LOSS),
                    _item("i1", "Storm in Leeds, England",
                          forced_category=Category.MAJOR_LOSS),
                ],
            ),
        ]

        def geocode(name):
            if name == "Leeds, England":
                raise requests.ConnectionError("connection reset")
            return [GeoPoint(51.5074, -0.1278)]

        provider = Mock()
        provider.geocode.side_effect = geocode
        pipeline = _pipeline(adapters, provider=provider)

        assert [a.id for a in pipeline.run()] == ["i0"]
        assert pipeline.result_cache.entry is not None

    def test_failure_raises_and_keeps_cache_empty(self) -> None:
        pipeline = _pipeline(self._adapters())

        with patch(
            "build_news_feed.build_news_feed.finalize_articles",
            side_effect=RuntimeError("sort failed"),
        ):
            with pytest.raises(PipelineError) as exc_info:
                pipeline.run()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert pipeline.result_cache.entry is None

    def test_failure_after_ttl_does_not_serve_stale_payload(self) -> None:
        clock = FakeClock(T0)
        pipeline = _pipeline(self._adapters(), clock=clock)
        first = pipeline.run()

        clock.now = T0 + timedelta(minutes=11)
        with patch(
            "build_news_feed.build_news_feed.ingest_news",
            side_effect=RuntimeError("executor shut down"),
        ):
            with pytest.raises(PipelineError):
                pipeline.run()

        assert list(pipeline.result_cache.entry.payload) == first
        assert pipeline.result_cache.entry.built_at == T0

    def test_returned_articles_are_immutable(self) -> None:
        articles = _pipeline(self._adapters()).run()

        with pytest.raises(dataclasses.FrozenInstanceError):
            articles[0].title = "changed"


class TestCreatePipeline:
    @patch("resolve_locations.geocode.RateLimiter")
    @patch("resolve_locations.geocode.Nominatim")
    def test_wires_default_sources(self, mock_nominatim, mock_rate_limiter) -> None:
        pipeline = create_pipeline(PipelineConfig())

        assert [a.source for a in pipeline.adapters] == [
            "google-news-loss",
            "google-news-ma",
            "haggie-press-releases",
        ]
        assert isinstance(pipeline.adapters[0], FeedAdapter)
        assert pipeline.adapters[0].forced_category == Category.MAJOR_LOSS
        assert pipeline.adapters[1].forced_category == Category.MERGER_ACQUISITION
        assert isinstance(pipeline.adapters[2], PressReleaseScraper)
        assert pipeline.result_cache.ttl == timedelta(minutes=10)
        assert pipeline.max_raw_items == 400
        assert pipeline.max_articles == 200
        assert pipeline.enrich_workers == 1
        assert len(pipeline.place_extractors) == 2

    @patch("resolve_locations.geocode.RateLimiter")
    @patch("resolve_locations.geocode.Nominatim")
    def test_scrape_can_be_disabled(self, mock_nominatim, mock_rate_limiter) -> None:
        config = PipelineConfig()
        config.scrape.enabled = False
        pipeline = create_pipeline(config)
        assert [a.source for a in pipeline.adapters] == ["google-news-loss", "google-news-ma"]
