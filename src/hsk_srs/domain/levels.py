"""
Level partitioning.

Maps heterogeneous level labels ("hsk3", "HSK 7-9", "7–9", 4, "level 10")
onto one canonical tag space shared by the store, the queue builder and the
progress classifier. Normalization is fail-open: anything unrecognizable
becomes "1", and `parse_level` reports when that happened.
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from hsk_srs.domain.cards.models import Card
from hsk_srs.domain.constants import ADVANCED_LEVEL, DEFAULT_LEVEL

_ADVANCED_SPELLINGS = ("7-9", "7–9", "7—9")
_LEADING_NUMBER = re.compile(r"^\D*(\d+)")


@dataclass(frozen=True)
class LevelParseResult:
    """
    Outcome of normalizing a raw level label.

    Attributes:
        raw: The value as supplied.
        tag: Canonical tag, always one of HSK_LEVELS.
        recognized: False when the default tag was substituted for bad input.
    """

    raw: object
    tag: str
    recognized: bool


def _from_number(raw: object, value: float) -> LevelParseResult:
    if math.isnan(value):
        return LevelParseResult(raw, DEFAULT_LEVEL, False)
    if value >= 7:
        return LevelParseResult(raw, ADVANCED_LEVEL, True)
    if value >= 1:
        return LevelParseResult(raw, str(int(value)), True)
    return LevelParseResult(raw, DEFAULT_LEVEL, False)


def parse_level(raw: object) -> LevelParseResult:
    """
    Normalize ``raw`` and report whether it was understood.

    Rules, in order:
    1. Any spelling containing "7-9" (hyphen or dash, any case or prefix) -> "7-9".
    2. Strip a non-numeric prefix and read the leading integer:
       >= 7 -> "7-9", 1..6 -> that digit.
    3. Everything else (None, no digits, 0) -> "1", unrecognized.
    """
    if raw is None or isinstance(raw, bool):
        return LevelParseResult(raw, DEFAULT_LEVEL, False)

    if isinstance(raw, (int, float)):
        return _from_number(raw, float(raw))

    text = str(raw).strip().lower().replace(" ", "")
    if any(spelling in text for spelling in _ADVANCED_SPELLINGS):
        return LevelParseResult(raw, ADVANCED_LEVEL, True)

    match = _LEADING_NUMBER.match(text)
    if not match:
        return LevelParseResult(raw, DEFAULT_LEVEL, False)

    return _from_number(raw, int(match.group(1)))


def canonical_level(raw: object) -> str:
    """Return the canonical tag for ``raw``; idempotent."""
    return parse_level(raw).tag


def cards_in_level(cards: Iterable[Card], level: object) -> list[Card]:
    """Filter ``cards`` to those whose level normalizes to the same tag as ``level``."""
    target = canonical_level(level)
    return [card for card in cards if canonical_level(card.level) == target]
