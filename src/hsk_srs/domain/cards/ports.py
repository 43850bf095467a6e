"""
Ports (interfaces) for card persistence and time.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import Card


class CardStore(ABC):
    """
    Port for durable key -> Card storage.

    Implementations:
        - InMemoryCardStore: Dict-backed, for tests and ephemeral sessions.
        - JsonCardStore: A single JSON document on disk.

    No transactionality is guaranteed; concurrent writers are last-writer-wins.
    """

    @abstractmethod
    def get(self, key: str) -> Card | None:
        """Return the card saved under ``key``, or None."""
        pass

    @abstractmethod
    def get_all(self, level: object = None) -> list[Card]:
        """
        Return every card, or only those whose canonical level matches ``level``.

        Args:
            level: Any level spelling ("hsk3", "3", 3, "HSK7-9"...), or None for all.

        Returns:
            Cards in stable insertion order.
        """
        pass

    @abstractmethod
    def put(self, key: str, card: Card) -> None:
        """Insert or replace the whole record for ``key``."""
        pass

    def keys(self) -> list[str]:
        return [card.key for card in self.get_all()]


class LookupCounter(ABC):
    """Port counting how often each key was manually looked up."""

    @abstractmethod
    def get(self, key: str) -> int:
        pass

    @abstractmethod
    def increment(self, key: str) -> int:
        """Add one lookup for ``key`` and return the new count."""
        pass


class Clock(ABC):
    """Port supplying the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        pass
