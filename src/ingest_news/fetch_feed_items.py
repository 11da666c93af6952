"""RSS/Atom feed fetching."""

import logging
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any, Callable

import feedparser
import requests
from dateutil.parser import parse as parse_date
from lxml import etree
from lxml import html as lxml_html

from classify_news.models import Category
from ingest_news.models import RawItem
from ingest_news.sources import USER_AGENT

logger = logging.getLogger(__name__)

# Timezone abbreviations for date parsing
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def fetch_feed(url: str, timeout: float = 30) -> Any:
    """Download a feed and parse it with feedparser."""
    response = requests.get(
        url,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )
    response.raise_for_status()
    return feedparser.parse(response.content)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FeedAdapter:
    """Source adapter for a syndicated feed.

    Every entry becomes a RawItem; entries without title or link are kept
    here and dropped by the pipeline when the sources are merged.
    """

    def __init__(
        self,
        source: str,
        url: str,
        prefix: str,
        source_name: str,
        forced_category: Category | None = None,
        feed_parser: Callable[[str], Any] | None = None,
        timeout: float = 30,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.source = source
        self.url = url
        self.prefix = prefix
        self.source_name = source_name
        self.forced_category = forced_category
        self._parse_feed = feed_parser or partial(fetch_feed, timeout=timeout)
        self._clock = clock

    def fetch(self) -> list[RawItem]:
        feed = self._parse_feed(self.url)
        now = self._clock()

        items = [
            self._entry_to_item(entry, idx, now)
            for idx, entry in enumerate(feed.entries)
        ]
        logger.info("Found %d entries from %s", len(items), self.source)
        return items

    def _entry_to_item(self, entry, idx: int, now: datetime) -> RawItem:
        link = (entry.get("link") or "").strip()
        return RawItem(
            id=f"{self.prefix}-{idx}-{link}",
            title=(entry.get("title") or "").strip(),
            link=link,
            published_at=_parse_published_date(entry, now),
            snippet=_extract_snippet(entry),
            source_name=self.source_name,
            forced_category=self.forced_category,
        )


def _parse_published_date(entry, fallback: datetime) -> datetime:
    """Extract the published date from a feed entry, or `fallback` if missing/invalid."""
    published = entry.get("published") or entry.get("updated")
    if not published:
        return fallback

    try:
        dt = parse_date(published, tzinfos=TZINFOS)
    except (ValueError, OverflowError):
        logger.debug("Invalid entry date %r, using fetch time", published)
        return fallback

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _extract_snippet(entry) -> str:
    """Plain-text snippet from the entry summary, falling back to its content."""
    summary = entry.get("summary")
    if summary:
        return _html_to_text(summary)

    content = entry.get("content") or []
    if content:
        return _html_to_text(content[0].get("value") or "")
    return ""


def _html_to_text(value: str) -> str:
    if "<" not in value:
        return value.strip()
    try:
        text = lxml_html.fromstring(value).text_content()
    except etree.ParserError:
        return value.strip()
    return " ".join(text.split())
