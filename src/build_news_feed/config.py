"""Pipeline configuration loaded from configs/<name>.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from common.config import find_config_path, get_section, load_yaml
from ingest_news.sources import FEED_SOURCES, PRESS_RELEASE_SOURCE

CONFIG_ENV_VAR = "NEWS_MAP_CONFIG"


@dataclass
class FeedSourceConfig:
    key: str
    url: str
    prefix: str
    source_name: str
    category: str | None = None  # forced category for every item of this feed


@dataclass
class ScrapeConfig:
    key: str = PRESS_RELEASE_SOURCE["key"]
    url: str = PRESS_RELEASE_SOURCE["url"]
    prefix: str = PRESS_RELEASE_SOURCE["prefix"]
    source_name: str = PRESS_RELEASE_SOURCE["source_name"]
    host: str = PRESS_RELEASE_SOURCE["host"]
    enabled: bool = True


@dataclass
class GeocoderConfig:
    user_agent: str = "insurance-news-map/1.0"
    timeout: float = 10.0
    min_delay_seconds: float = 1.0


@dataclass
class ExtractorConfig:
    spacy_model: str = "en_core_web_sm"


@dataclass
class CacheConfig:
    result_ttl_seconds: int = 600
    geocode_ttl_seconds: int = 7 * 24 * 60 * 60


@dataclass
class LimitsConfig:
    max_raw_items: int = 400
    max_articles: int = 200
    max_scraped_links: int = 50
    ingest_workers: int = 3
    enrich_workers: int = 1
    request_timeout: float = 30.0


def _default_feeds() -> list[FeedSourceConfig]:
    return [
        FeedSourceConfig(
            key=key,
            url=feed["url"],
            prefix=feed["prefix"],
            source_name=feed["source_name"],
            category=feed["category"],
        )
        for key, feed in FEED_SOURCES.items()
    ]


@dataclass
class PipelineConfig:
    feeds: list[FeedSourceConfig] = field(default_factory=_default_feeds)
    scrape: ScrapeConfig = field(default_factory=ScrapeConfig)
    geocoder: GeocoderConfig = field(default_factory=GeocoderConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)


def pipeline_config_from_dict(raw: dict[str, Any]) -> PipelineConfig:
    """Build a PipelineConfig from a parsed YAML mapping; missing keys keep their defaults."""
    feeds_raw = raw.get("feeds")
    if feeds_raw is None:
        feeds = _default_feeds()
    else:
        feeds = [
            FeedSourceConfig(
                key=f["key"],
                url=f["url"],
                prefix=f["prefix"],
                source_name=f["source_name"],
                category=f.get("category"),
            )
            for f in feeds_raw
        ]

    scrape_raw = get_section(raw, "scrape")
    scrape_defaults = ScrapeConfig()
    scrape = ScrapeConfig(
        key=scrape_raw.get("key", scrape_defaults.key),
        url=scrape_raw.get("url", scrape_defaults.url),
        prefix=scrape_raw.get("prefix", scrape_defaults.prefix),
        source_name=scrape_raw.get("source_name", scrape_defaults.source_name),
        host=scrape_raw.get("host", scrape_defaults.host),
        enabled=scrape_raw.get("enabled", True),
    )

    geocoder_raw = get_section(raw, "geocoder")
    geocoder = GeocoderConfig(
        user_agent=geocoder_raw.get("user_agent", "insurance-news-map/1.0"),
        timeout=float(geocoder_raw.get("timeout", 10.0)),
        min_delay_seconds=float(geocoder_raw.get("min_delay_seconds", 1.0)),
    )

    extractor_raw = get_section(raw, "extractor")
    extractor = ExtractorConfig(
        spacy_model=extractor_raw.get("spacy_model", "en_core_web_sm"),
    )

    cache_raw = get_section(raw, "cache")
    cache = CacheConfig(
        result_ttl_seconds=int(cache_raw.get("result_ttl_seconds", 600)),
        geocode_ttl_seconds=int(cache_raw.get("geocode_ttl_seconds", 7 * 24 * 60 * 60)),
    )

    limits_raw = get_section(raw, "limits")
    limits = LimitsConfig(
        max_raw_items=int(limits_raw.get("max_raw_items", 400)),
        max_articles=int(limits_raw.get("max_articles", 200)),
        max_scraped_links=int(limits_raw.get("max_scraped_links", 50)),
        ingest_workers=int(limits_raw.get("ingest_workers", 3)),
        enrich_workers=int(limits_raw.get("enrich_workers", 1)),
        request_timeout=float(limits_raw.get("request_timeout", 30.0)),
    )

    return PipelineConfig(
        feeds=feeds,
        scrape=scrape,
        geocoder=geocoder,
        extractor=extractor,
        cache=cache,
        limits=limits,
    )


def load_pipeline_config(config_name: str | None = None) -> PipelineConfig:
    """Load the pipeline config by name, falling back to $NEWS_MAP_CONFIG, then "prod"."""
    path = find_config_path(config_name, env_var=CONFIG_ENV_VAR)
    return pipeline_config_from_dict(load_yaml(path))
