"""Clock adapters."""

from datetime import datetime, timedelta, timezone

from hsk_srs.domain.cards.ports import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, instant: datetime):
        self._now = instant

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now

    def set(self, instant: datetime) -> None:
        self._now = instant
