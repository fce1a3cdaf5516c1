"""Word filter redaction (core domain)."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from core.errors import DuplicateFilterError, InvalidFilterError, UnknownFilterError
from core.models import ConfigDocument
from core.ports import ConfigStorePort

LOGGER = logging.getLogger(__name__)

MASK_CHAR = "."


def _mask(match: re.Match) -> str:
    return MASK_CHAR * len(match.group(0))


def redact(text: str, filters: Iterable[str]) -> str:
    """Replace every case-insensitive literal occurrence of each word with dots.

    Words are applied one after another, each against the text as left by the
    previous words. The result always has the same length as the input.
    """

    for word in filters:
        if not isinstance(word, str) or not word.strip():
            continue
        try:
            pattern = re.compile(re.escape(word), re.IGNORECASE)
        except re.error as exc:
            LOGGER.warning("Skipping invalid filter %r: %s", word, exc)
            continue
        text = pattern.sub(_mask, text)
    return text


def normalize_word(word: str) -> str:
    return word.strip().lower()


class FilterBook:
    """Owns the filter word set stored in the configuration document."""

    def __init__(self, document: ConfigDocument, store: ConfigStorePort) -> None:
        self._document = document
        self._store = store

    def words(self) -> list[str]:
        return list(self._document.filters)

    def add(self, word: str) -> str:
        normalized = normalize_word(word)
        if not normalized:
            raise InvalidFilterError("Filter word is empty")
        if normalized in self._document.filters:
            raise DuplicateFilterError(f"Filter already exists: {normalized}")
        self._document.filters.append(normalized)
        self._store.save(self._document)
        LOGGER.info("Filter added: %s", normalized)
        return normalized

    def remove(self, word: str) -> str:
        normalized = normalize_word(word)
        if normalized not in self._document.filters:
            raise UnknownFilterError(f"No such filter: {normalized}")
        self._document.filters.remove(normalized)
        self._store.save(self._document)
        LOGGER.info("Filter removed: %s", normalized)
        return normalized

    def redact(self, text: str) -> str:
        return redact(text, self._document.filters)
