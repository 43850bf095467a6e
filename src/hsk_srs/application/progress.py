"""
Progress classifier: buckets a level's cards into New / Learning / Mastered.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable
from datetime import datetime

from hsk_srs.domain.cards.models import Card, ProgressSummary
from hsk_srs.domain.levels import cards_in_level


def classify(card: Card, now: datetime) -> str:
    """
    Return "new", "learning" or "mastered" for one card.

    - new: never successfully reviewed since creation or the last lapse
    - learning: reviewed at least once and due again
    - mastered: reviewed at least once and not yet due
    """
    if card.is_new:
        return "new"
    if card.next_review <= now:
        return "learning"
    return "mastered"


def analytics(cards: Iterable[Card], level: object, now: datetime) -> ProgressSummary:
    """Aggregate bucket counts for the cards of ``level``."""
    counts = {"new": 0, "learning": 0, "mastered": 0}
    in_level = cards_in_level(cards, level)

    for card in in_level:
        counts[classify(card, now)] += 1

    return ProgressSummary(
        new_count=counts["new"],
        learning_count=counts["learning"],
        mastered_count=counts["mastered"],
        total=len(in_level),
    )
