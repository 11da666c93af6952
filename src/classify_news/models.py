"""Data models for classify_news pipeline stage."""

from enum import Enum


class Category(str, Enum):
    """Event category of a news item; values are the wire strings."""
    MAJOR_LOSS = "Major Loss"
    MERGER_ACQUISITION = "M&A"
