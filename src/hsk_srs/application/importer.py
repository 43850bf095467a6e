"""
Word list loader.

Reads a YAML document holding a list of words, either at the top level or
under a ``words`` key:

    words:
      - zh: 你好
        pinyin: nǐ hǎo
        en: hello
        hskLevel: hsk1

``key`` may replace ``zh`` and ``level`` may replace ``hskLevel``.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from hsk_srs.domain.cards.models import WordEntry

logger = logging.getLogger(__name__)


class WordListError(Exception):
    """The file could not be read or is not a list of words."""


def _entry_from_mapping(item: dict[str, Any]) -> WordEntry | None:
    key = item.get("zh", item.get("key"))
    if not isinstance(key, str) or not key.strip():
        return None
    return WordEntry(
        key=key.strip(),
        level=item.get("hskLevel", item.get("hsk_level", item.get("level"))),
        pinyin=str(item.get("pinyin") or ""),
        vi=str(item.get("vi") or ""),
        en=str(item.get("en") or ""),
    )


def parse_word_list(text: str) -> list[WordEntry]:
    """
    Parse YAML text into word entries. Malformed items are skipped with a warning.

    Raises:
        WordListError: The YAML is invalid or does not hold a list.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise WordListError(f"Invalid YAML: {e}") from e

    if isinstance(data, dict):
        data = data.get("words")
    if data is None:
        return []
    if not isinstance(data, list):
        raise WordListError("Expected a list of words")

    entries: list[WordEntry] = []
    for idx, item in enumerate(data):
        entry = _entry_from_mapping(item) if isinstance(item, dict) else None
        if entry is None:
            logger.warning(f"Skipping word #{idx + 1}: missing 'zh' or 'key'")
            continue
        entries.append(entry)
    return entries


def load_word_list(path: Path) -> list[WordEntry]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise WordListError(f"Could not read {path}: {e}") from e
    return parse_word_list(text)
