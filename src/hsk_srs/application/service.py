"""
Scheduler Service — Application layer orchestrator.

Coordinates the card store, lookup counter and clock with the pure review
engine, queue builder and progress classifier.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from hsk_srs.domain.cards.models import Card, ProgressSummary, Rating, WordEntry
from hsk_srs.domain.cards.ports import CardStore, Clock, LookupCounter
from hsk_srs.domain.constants import (
    DEFAULT_EASE,
    FRICTION_PENALTY,
    HSK_LEVELS,
    LOOKUP_FRICTION_THRESHOLD,
    MIN_EASE,
)
from hsk_srs.domain.errors import CardNotFoundError, InvalidLevelError
from hsk_srs.domain.levels import parse_level
from hsk_srs.infrastructure.clock import SystemClock

from .progress import analytics
from .queue_builder import count_due, due_queue
from .review_engine import next_state, quality_for_rating, validate_quality

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class SchedulerService:
    """
    Application service for saving words, reviewing them and building queues.

    Follows Dependency Inversion: depends on the CardStore, LookupCounter and
    Clock abstractions, never on a module-level store. Read-then-write
    sequences are serialized per key so one instance can serve several threads.
    """

    def __init__(
        self,
        store: CardStore,
        lookups: LookupCounter,
        clock: Clock | None = None,
        friction_threshold: int = LOOKUP_FRICTION_THRESHOLD,
        strict_levels: bool = False,
    ):
        """
        Args:
            store: The repository (port) holding cards.
            lookups: Per-key manual lookup counts, consulted at creation.
            clock: Source of "now"; system UTC clock if not provided.
            friction_threshold: Lookups above this mark a new card as friction.
            strict_levels: Raise InvalidLevelError instead of defaulting to "1".
        """
        self._store = store
        self._lookups = lookups
        self._clock = clock or SystemClock()
        self.friction_threshold = friction_threshold
        self.strict_levels = strict_levels

        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    @staticmethod
    def _normalize_key(key: str) -> str:
        key = key.strip()
        if not key:
            raise ValueError("key must not be empty")
        return key

    # ------------------------------------------------------------------
    # Levels
    # ------------------------------------------------------------------

    def normalize_level(self, raw: object) -> str:
        result = parse_level(raw)
        if not result.recognized:
            if self.strict_levels:
                raise InvalidLevelError(f"Unrecognized level {raw!r}")
            logger.warning(f"Unrecognized level {raw!r}, using '{result.tag}'")
        return result.tag

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def get_card(self, key: str) -> Card | None:
        return self._store.get(key.strip())

    def is_saved(self, key: str) -> bool:
        return self._store.get(key.strip()) is not None

    def record_lookup(self, key: str) -> int:
        """Count a manual lookup of ``key``; returns the new total."""
        key = self._normalize_key(key)
        with self._lock_for(key):
            return self._lookups.increment(key)

    def save_word(
        self,
        key: str,
        level: object = None,
        *,
        pinyin: str = "",
        vi: str = "",
        en: str = "",
    ) -> bool:
        """
        Create a card for ``key`` unless one already exists.

        Friction is decided here, once: a word looked up more than
        ``friction_threshold`` times starts with a reduced easiness.

        Returns:
            True if a card was created, False if the key was already saved.
        """
        key = self._normalize_key(key)
        tag = self.normalize_level(level)

        with self._lock_for(key):
            if self._store.get(key) is not None:
                logger.info(f"'{key}' is already saved")
                return False

            now = self._clock.now()
            friction = self._lookups.get(key) > self.friction_threshold
            easiness = max(MIN_EASE, DEFAULT_EASE - FRICTION_PENALTY) if friction else DEFAULT_EASE

            card = Card(
                key=key,
                level=tag,
                easiness_factor=easiness,
                interval=0,
                repetitions=0,
                last_review=None,
                next_review=now,
                friction=friction,
                pinyin=pinyin,
                vi=vi,
                en=en,
            )
            self._store.put(key, card)

        logger.info(f"Saved '{key}' (level {tag}{', friction' if friction else ''})")
        return True

    def save_entry(self, entry: WordEntry) -> bool:
        return self.save_word(
            entry.key, entry.level, pinyin=entry.pinyin, vi=entry.vi, en=entry.en
        )

    def import_words(self, entries: Iterable[WordEntry]) -> ImportResult:
        result = ImportResult()
        for entry in entries:
            if self.save_entry(entry):
                result.created.append(entry.key)
            else:
                result.skipped.append(entry.key)
        return result

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def review(self, key: str, quality: int, friction: bool | None = None) -> Card:
        """
        Apply one completed review and persist the result.

        Args:
            key: Saved word.
            quality: Recall score in [1, 5]; anything else raises InvalidQualityError.
            friction: Override the friction flag. By default it is set only for
                the first review of a card created under lookup friction.

        Raises:
            CardNotFoundError: No card is saved under ``key``.
        """
        validate_quality(quality)
        key = self._normalize_key(key)

        with self._lock_for(key):
            card = self._store.get(key)
            if card is None:
                raise CardNotFoundError(key)

            if friction is None:
                friction = card.friction and card.last_review is None

            updated = next_state(card, quality, friction, now=self._clock.now())
            self._store.put(key, updated)

        logger.debug(
            f"Reviewed '{key}' q={quality}: reps={updated.repetitions} "
            f"interval={updated.interval}d ef={updated.easiness_factor:.2f}"
        )
        return updated

    def review_with_rating(self, key: str, rating: Rating | str) -> Card:
        return self.review(key, quality_for_rating(rating))

    # ------------------------------------------------------------------
    # Queues & analytics
    # ------------------------------------------------------------------

    def due_queue(self, level: object) -> list[Card]:
        tag = self.normalize_level(level)
        return due_queue(self._store.get_all(tag), tag, self._clock.now())

    def analytics(self, level: object) -> ProgressSummary:
        tag = self.normalize_level(level)
        return analytics(self._store.get_all(tag), tag, self._clock.now())

    def due_count(self) -> int:
        """Due cards across every level."""
        return count_due(self._store.get_all(), self._clock.now())

    def overview(self) -> dict[str, ProgressSummary]:
        """Progress summary for every canonical level, read at a single instant."""
        now = self._clock.now()
        cards = self._store.get_all()
        return {tag: analytics(cards, tag, now) for tag in HSK_LEVELS}
