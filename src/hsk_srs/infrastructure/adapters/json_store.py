"""
JSON Card Store: Infrastructure adapter persisting cards to a single JSON file.

Implements CardStore and LookupCounter over flat JSON documents keyed by the
word's written form. Storage problems are soft failures: unreadable files read
as empty and failed writes are logged and dropped, so the scheduler keeps
working without persistence. Whole-file rewrites hold a per-file lock so
threads writing different keys do not drop each other's changes.
"""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from hsk_srs.domain.cards.models import Card
from hsk_srs.domain.cards.ports import CardStore, LookupCounter
from hsk_srs.domain.levels import cards_in_level

from .records import card_from_record, card_to_record

logger = logging.getLogger(__name__)

# One lock per file, shared by every document object pointing at it
_path_locks: dict[Path, threading.RLock] = {}
_path_locks_guard = threading.Lock()


def _lock_for_path(path: Path) -> threading.RLock:
    with _path_locks_guard:
        return _path_locks.setdefault(path.resolve(), threading.RLock())


class _JsonDocument:
    """One JSON object on disk, read whole and rewritten whole."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = _lock_for_path(self.path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.path}: expected a JSON object")
            return {}
        return data

    def save(self, data: dict[str, Any]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.error(f"Could not write {self.path}: {e}")
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def update(self, mutate: Callable[[dict[str, Any]], Any]) -> Any:
        """
        Read, mutate and rewrite the document under the file lock.

        Whole-file rewrites would otherwise drop keys written by another
        thread between its load and save.
        """
        with self._lock:
            data = self.load()
            result = mutate(data)
            self.save(data)
            return result


class JsonCardStore(CardStore):
    """
    Cards stored as ``{key: record}``; JSON object order is the iteration order.
    """

    def __init__(self, path: Path):
        self._doc = _JsonDocument(path)

    @property
    def path(self) -> Path:
        return self._doc.path

    def _load_cards(self) -> list[Card]:
        cards: list[Card] = []
        for key, record in self._doc.load().items():
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed record for '{key}'")
                continue
            try:
                cards.append(card_from_record(key, record))
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed record for '{key}': {e}")
        return cards

    def get(self, key: str) -> Card | None:
        record = self._doc.load().get(key)
        if not isinstance(record, dict):
            return None
        try:
            return card_from_record(key, record)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Malformed record for '{key}': {e}")
            return None

    def get_all(self, level: object = None) -> list[Card]:
        cards = self._load_cards()
        if level is None:
            return cards
        return cards_in_level(cards, level)

    def put(self, key: str, card: Card) -> None:
        record = card_to_record(card)
        self._doc.update(lambda data: data.__setitem__(key, record))

    def keys(self) -> list[str]:
        return list(self._doc.load())


class JsonLookupCounter(LookupCounter):
    """Lookup counts stored as ``{key: count}``."""

    def __init__(self, path: Path):
        self._doc = _JsonDocument(path)

    def get(self, key: str) -> int:
        try:
            return int(self._doc.load().get(key, 0))
        except (TypeError, ValueError):
            return 0

    def increment(self, key: str) -> int:
        def bump(data: dict[str, Any]) -> int:
            try:
                count = int(data.get(key, 0)) + 1
            except (TypeError, ValueError):
                count = 1
            data[key] = count
            return count

        return self._doc.update(bump)
