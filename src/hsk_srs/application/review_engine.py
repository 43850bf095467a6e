"""
Review engine: SuperMemo-2 with a lookup-friction adjustment.

Pure computation; the caller supplies ``now``.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta

from hsk_srs.domain.cards.models import Card, Rating
from hsk_srs.domain.constants import (
    DEFAULT_EASE,
    FIRST_INTERVAL,
    FRICTION_PENALTY,
    LAPSE_INTERVAL,
    MAX_QUALITY,
    MIN_EASE,
    MIN_QUALITY,
    PASSING_QUALITY,
    RATING_TO_QUALITY,
    SECOND_INTERVAL,
    SECOND_INTERVAL_FRICTION,
)
from hsk_srs.domain.errors import InvalidQualityError, InvalidRatingError


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def update_easiness(easiness: float, quality: int, friction: bool = False) -> float:
    """
    Apply the SM-2 easiness update, preceded by the friction penalty if set.

    EF' = EF - 0.8 + 0.2*q + 0.01*(1 - q), floored at 1.3.
    """
    if friction:
        easiness = max(MIN_EASE, easiness - FRICTION_PENALTY)

    easiness = easiness - 0.8 + 0.2 * quality + 0.01 * (1 - quality)
    return max(MIN_EASE, easiness)


def next_state(card: Card, quality: int, friction: bool = False, *, now: datetime) -> Card:
    """
    Compute the card's state after one completed review.

    Args:
        card: Current state. None-valued SM-2 fields fall back to defaults.
        quality: Recall score, contractually in [1, 5]. Not validated here.
        friction: Apply the lookup-friction penalty to the incoming easiness
            and shorten the second interval from 6 to 3 days.
        now: Review instant; becomes last_review.

    Returns:
        A new Card. Fields other than the SM-2 state are carried over.
    """
    easiness = card.easiness_factor if card.easiness_factor is not None else DEFAULT_EASE
    interval = card.interval if card.interval is not None else 0
    repetitions = card.repetitions if card.repetitions is not None else 0

    easiness = update_easiness(easiness, quality, friction)

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval = LAPSE_INTERVAL
    else:
        repetitions += 1
        if repetitions == 1:
            interval = FIRST_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL_FRICTION if friction else SECOND_INTERVAL
        else:
            # Compounds the previous interval, not the 1/6 seeds
            interval = _round_half_up(interval * easiness)

    return replace(
        card,
        easiness_factor=easiness,
        interval=interval,
        repetitions=repetitions,
        last_review=now,
        next_review=now + timedelta(days=interval),
    )


def quality_for_rating(rating: Rating | str) -> int:
    """Map a review button (again/hard/good/easy) to an SM-2 quality."""
    name = rating.value if isinstance(rating, Rating) else str(rating).strip().lower()
    try:
        return RATING_TO_QUALITY[name]
    except KeyError:
        raise InvalidRatingError(
            f"Unknown rating '{rating}'. Expected one of: {', '.join(RATING_TO_QUALITY)}"
        ) from None


def validate_quality(quality: int) -> int:
    """Reject qualities outside [1, 5]; the engine itself never checks."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(f"Quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return quality
