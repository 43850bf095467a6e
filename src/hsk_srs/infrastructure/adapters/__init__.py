# Infrastructure Adapters Package
from .json_store import JsonCardStore, JsonLookupCounter
from .memory import InMemoryCardStore, InMemoryLookupCounter

__all__ = [
    "JsonCardStore",
    "JsonLookupCounter",
    "InMemoryCardStore",
    "InMemoryLookupCounter",
]
