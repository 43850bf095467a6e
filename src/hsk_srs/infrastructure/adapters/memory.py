"""Dict-backed adapters for tests and throwaway sessions."""

from dataclasses import replace

from hsk_srs.domain.cards.models import Card
from hsk_srs.domain.cards.ports import CardStore, LookupCounter
from hsk_srs.domain.levels import cards_in_level


class InMemoryCardStore(CardStore):
    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[str, Card] = {}
        for card in cards or []:
            self.put(card.key, card)

    def get(self, key: str) -> Card | None:
        card = self._cards.get(key)
        # Copies keep callers from mutating stored state
        return replace(card) if card else None

    def get_all(self, level: object = None) -> list[Card]:
        cards = [replace(card) for card in self._cards.values()]
        if level is None:
            return cards
        return cards_in_level(cards, level)

    def put(self, key: str, card: Card) -> None:
        self._cards[key] = replace(card)

    def keys(self) -> list[str]:
        return list(self._cards)


class InMemoryLookupCounter(LookupCounter):
    def __init__(self, counts: dict[str, int] | None = None):
        self._counts: dict[str, int] = dict(counts or {})

    def get(self, key: str) -> int:
        return self._counts.get(key, 0)

    def increment(self, key: str) -> int:
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]
