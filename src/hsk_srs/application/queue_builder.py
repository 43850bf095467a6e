"""
Queue builder for level-based review sessions.

Builds the due queue for one level by:
1. Normalizing the requested level and filtering the card set to it
2. Keeping cards that are past their next_review or were never reviewed
3. Preserving the store's iteration order (no overdue-priority sorting)
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from hsk_srs.domain.cards.models import Card
from hsk_srs.domain.levels import canonical_level, cards_in_level

logger = logging.getLogger(__name__)


def due_queue(cards: Iterable[Card], level: object, now: datetime) -> list[Card]:
    """
    Select the cards of ``level`` that should be reviewed at ``now``.

    Args:
        cards: Candidate cards, in store order. May span several levels.
        level: Any level spelling; compared after normalization.
        now: The instant the session starts.

    Returns:
        Due cards in the same relative order as ``cards``.
    """
    in_level = cards_in_level(cards, level)
    queue = [card for card in in_level if card.is_due(now)]
    logger.debug(
        f"Level {canonical_level(level)}: {len(queue)}/{len(in_level)} cards due at {now.isoformat()}"
    )
    return queue


def count_due(cards: Iterable[Card], now: datetime) -> int:
    """Count due cards across every level."""
    return sum(1 for card in cards if card.is_due(now))
