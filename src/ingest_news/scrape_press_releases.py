"""Press release scraping from HTML listing pages."""

import logging
import re
from datetime import datetime, timezone
from functools import partial
from typing import Callable

import requests
from lxml import html as lxml_html

from ingest_news.models import RawItem
from ingest_news.sources import USER_AGENT

logger = logging.getLogger(__name__)

PRESS_RELEASE_PATH_PATTERN = re.compile(r"press-release|press-releases")
PRESS_RELEASE_TEXT_PATTERN = re.compile(r"press release", re.IGNORECASE)
DOMAIN_KEYWORD_PATTERN = re.compile(
    r"acquires|acquisition|merger|catastrophe|loss|reinsurance|insurance",
    re.IGNORECASE,
)

DEFAULT_MAX_LINKS = 50


def fetch_html(url: str, timeout: float = 30) -> str:
    """Fetch a page's HTML; non-2xx responses yield an empty string."""
    response = requests.get(
        url,
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
    )
    if not response.ok:
        logger.warning("GET %s returned HTTP %d", url, response.status_code)
        return ""
    return response.text


def parse_links(html: str, base_url: str) -> list[tuple[str, str]]:
    """Return (href, text) for every anchor, with hrefs made absolute."""
    if not html.strip():
        return []

    doc = lxml_html.fromstring(html)
    doc.make_links_absolute(base_url, handle_failures="ignore")

    links = []
    for anchor in doc.iter("a"):
        href = (anchor.get("href") or "").strip()
        text = " ".join(anchor.text_content().split())
        links.append((href, text))
    return links


def _is_press_release_link(href: str, host: str) -> bool:
    return host in href and PRESS_RELEASE_PATH_PATTERN.search(href) is not None


def _looks_like_press_release(text: str) -> bool:
    return (
        PRESS_RELEASE_TEXT_PATTERN.search(text) is not None
        or DOMAIN_KEYWORD_PATTERN.search(text) is not None
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PressReleaseScraper:
    """Source adapter for a press release listing page without a feed.

    The listing carries no reliable dates, so every item is stamped with
    the fetch time.
    """

    def __init__(
        self,
        source: str,
        url: str,
        prefix: str,
        source_name: str,
        host: str,
        max_links: int = DEFAULT_MAX_LINKS,
        html_fetcher: Callable[[str], str] | None = None,
        link_parser: Callable[[str, str], list[tuple[str, str]]] = parse_links,
        timeout: float = 30,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.source = source
        self.url = url
        self.prefix = prefix
        self.source_name = source_name
        self.host = host
        self.max_links = max_links
        self._fetch_html = html_fetcher or partial(fetch_html, timeout=timeout)
        self._parse_links = link_parser
        self._clock = clock

    def fetch(self) -> list[RawItem]:
        html = self._fetch_html(self.url)
        links = self._parse_links(html, self.url)

        # Later duplicates overwrite the text but keep the first position
        unique: dict[str, str] = {}
        for href, text in links:
            if not href or not text:
                continue
            if not _is_press_release_link(href, self.host):
                continue
            if not _looks_like_press_release(text):
                continue
            unique[href] = text

        selected = list(unique.items())[: self.max_links]
        now = self._clock()

        items = [
            RawItem(
                id=f"{self.prefix}-{idx}-{link}",
                title=text,
                link=link,
                published_at=now,
                snippet=text,
                source_name=self.source_name,
            )
            for idx, (link, text) in enumerate(selected)
        ]
        logger.info(
            "Found %d press releases from %s (%d links on page)",
            len(items),
            self.source,
            len(links),
        )
        return items
