"""Exceptions raised by the scheduler."""


class SrsError(Exception):
    """Base class for scheduler errors."""


class CardNotFoundError(SrsError, KeyError):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"No card saved for '{self.key}'"


class InvalidQualityError(SrsError, ValueError):
    """Quality outside the 1-5 scale."""


class InvalidRatingError(SrsError, ValueError):
    """Rating name not in again/hard/good/easy."""


class InvalidLevelError(SrsError, ValueError):
    """Level tag that could not be recognized (strict mode only)."""
