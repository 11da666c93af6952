"""Best-guess place name extraction from news text."""

from __future__ import annotations

import logging
import re
import threading
from typing import Callable, Sequence

import spacy

logger = logging.getLogger(__name__)

PlaceExtractor = Callable[[str], "str | None"]

DEFAULT_SPACY_MODEL = "en_core_web_sm"

# "City, Region" or "City, Country": each part one to three capitalized words
CITY_REGION_PATTERN = re.compile(
    r"\b([A-Z][a-z]+(?:\s[A-Z][a-z]+){0,2}),\s([A-Z][a-z]+(?:\s[A-Z][a-z]+){0,2})\b"
)


class SpacyPlaceExtractor:
    """Returns the first place entity spaCy recognizes in the text."""

    def __init__(
        self,
        model: str = DEFAULT_SPACY_MODEL,
        labels: Sequence[str] = ("GPE", "LOC"),
    ):
        self.model = model
        self.labels = frozenset(labels)
        self._nlp = None
        self._load_lock = threading.Lock()

    def _get_nlp(self):
        with self._load_lock:
            if self._nlp is None:
                logger.info("Loading spaCy model: %s", self.model)
                self._nlp = spacy.load(self.model)
        return self._nlp

    def __call__(self, text: str) -> str | None:
        if not text:
            return None

        doc = self._get_nlp()(text)
        for ent in doc.ents:
            if ent.label_ not in self.labels:
                continue
            name = ent.text.strip()
            if name:
                return name
        return None


def match_city_region(text: str) -> str | None:
    """Return the first "City, Region" phrase in the text, verbatim."""
    if not text:
        return None

    match = CITY_REGION_PATTERN.search(text)
    if match is None:
        return None
    return f"{match.group(1)}, {match.group(2)}"


def extract_location(
    text: str,
    strategies: Sequence[PlaceExtractor],
) -> str | None:
    """
    Try each extraction strategy in order and return the first place found.

    Args:
        text: Free text, usually the item title and snippet joined by a space
        strategies: Place extractors, most trusted first

    Returns:
        Place name, or None if no strategy yields one
    """
    if not text:
        return None

    for strategy in strategies:
        place = strategy(text)
        if place:
            return place
    return None
