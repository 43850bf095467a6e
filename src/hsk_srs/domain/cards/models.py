"""
Domain models for vocabulary scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from hsk_srs.domain.constants import DEFAULT_EASE, DEFAULT_LEVEL


class Rating(str, Enum):
    """The four review buttons shown after a card is flipped."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


@dataclass
class Card:
    """
    Scheduling state for one vocabulary key.

    Attributes:
        key: The word's written form. At most one card exists per key.
        level: Canonical level tag ("1".."6" or "7-9").
        easiness_factor: SM-2 difficulty multiplier, never below 1.3.
        interval: Days until the next review after the last success.
        repetitions: Consecutive successful reviews since the last lapse.
        next_review: Instant at or after which the card is due.
        last_review: Instant of the most recent review, None if never reviewed.
        friction: Whether the word was looked up too often before it was saved.
    """

    key: str
    next_review: datetime
    level: str = DEFAULT_LEVEL
    easiness_factor: float = DEFAULT_EASE
    interval: int = 0
    repetitions: int = 0
    last_review: datetime | None = None
    friction: bool = False

    # Content (for display purposes, never interpreted by the scheduler)
    pinyin: str = ""
    vi: str = ""
    en: str = ""

    @property
    def is_new(self) -> bool:
        return self.repetitions == 0

    def is_due(self, now: datetime) -> bool:
        """Never-reviewed cards are always due, whatever their next_review."""
        return self.next_review <= now or self.repetitions == 0


@dataclass(frozen=True)
class WordEntry:
    """A word as supplied by a catalog, before it becomes a Card."""

    key: str
    level: object = None
    pinyin: str = ""
    vi: str = ""
    en: str = ""


@dataclass(frozen=True)
class ProgressSummary:
    """Bucket counts for one level."""

    new_count: int = 0
    learning_count: int = 0
    mastered_count: int = 0
    total: int = 0
