"""Keyword classification of news items into event categories."""

import re

from classify_news.models import Category

MERGER_ACQUISITION_PATTERN = re.compile(
    r"(merger|acquisition|takeover|acquires|acquired|to acquire|buyout)",
    re.IGNORECASE,
)

MAJOR_LOSS_PATTERN = re.compile(
    r"(major loss|large loss|catastrophe|wildfire|flood|hurricane|earthquake"
    r"|typhoon|storm|explosion|fire|collapse|cyber)",
    re.IGNORECASE,
)

# Category used when text matches both keyword sets
TIE_BREAK_CATEGORY = Category.MAJOR_LOSS


def classify(text: str | None) -> Category | None:
    """
    Classify text as Major Loss, M&A, or neither.

    Args:
        text: Free text, usually the item title and snippet joined by a space

    Returns:
        The matching Category, TIE_BREAK_CATEGORY if both sets match,
        or None if neither does
    """
    if not text:
        return None

    is_ma = MERGER_ACQUISITION_PATTERN.search(text) is not None
    is_loss = MAJOR_LOSS_PATTERN.search(text) is not None

    if is_ma and is_loss:
        return TIE_BREAK_CATEGORY
    if is_loss:
        return Category.MAJOR_LOSS
    if is_ma:
        return Category.MERGER_ACQUISITION
    return None
