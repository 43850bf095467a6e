"""
Flat-record codec for persisted cards.

Writes camelCase records with ISO-8601 UTC instants. Reads also accept the
legacy layout (``easiness``, ``repetition``, ``hskLevel``/``hsk_level``, ``zh``,
epoch-millisecond timestamps) and fill missing fields with defaults.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from hsk_srs.domain.cards.models import Card
from hsk_srs.domain.constants import DEFAULT_EASE
from hsk_srs.domain.levels import canonical_level

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: Any) -> datetime | None:
    """Read an ISO-8601 string, epoch milliseconds or datetime; None if absent or unreadable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _normalize_datetime(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Timestamp {value!r} out of range, treating as absent")
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _normalize_datetime(datetime.fromisoformat(text))
        except ValueError:
            logger.warning(f"Unreadable timestamp {value!r}, treating as absent")
            return None
    return None


def format_instant(value: datetime | None) -> str | None:
    if value is None:
        return None
    return _normalize_datetime(value).isoformat()


def _first(record: dict[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if record.get(name) is not None:
            return record[name]
    return default


def card_to_record(card: Card) -> dict[str, Any]:
    return {
        "key": card.key,
        "level": card.level,
        "easinessFactor": card.easiness_factor,
        "interval": card.interval,
        "repetitions": card.repetitions,
        "lastReview": format_instant(card.last_review),
        "nextReview": format_instant(card.next_review),
        "friction": card.friction,
        "pinyin": card.pinyin,
        "vi": card.vi,
        "en": card.en,
    }


def card_from_record(key: str, record: dict[str, Any]) -> Card:
    """
    Build a Card from a stored record.

    A missing nextReview reads as the epoch, so the card is due immediately.
    """
    next_review = parse_instant(_first(record, "nextReview", "next_review")) or EPOCH

    return Card(
        key=str(_first(record, "key", "zh", default=key)),
        level=canonical_level(_first(record, "level", "hskLevel", "hsk_level")),
        easiness_factor=float(
            _first(record, "easinessFactor", "easiness", "easiness_factor", default=DEFAULT_EASE)
        ),
        interval=int(_first(record, "interval", default=0)),
        repetitions=int(_first(record, "repetitions", "repetition", default=0)),
        last_review=parse_instant(_first(record, "lastReview", "last_review")),
        next_review=next_review,
        friction=record.get("friction") is True,
        pinyin=record.get("pinyin") or "",
        vi=record.get("vi") or "",
        en=record.get("en") or "",
    )
