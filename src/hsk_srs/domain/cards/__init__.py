# Domain Cards Package
from .models import Card, ProgressSummary, Rating, WordEntry
from .ports import CardStore, Clock, LookupCounter

__all__ = [
    "Card",
    "ProgressSummary",
    "Rating",
    "WordEntry",
    "CardStore",
    "Clock",
    "LookupCounter",
]
