"""JSON file storage adapter.

Implements the core ConfigStorePort by overwriting a single JSON document
on every save. Writes go to a temporary file first and are moved into
place, so a crash mid-write leaves the previous document intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, Optional

from core.models import ConfigDocument, RelayPairing, StatsRecord

LOGGER = logging.getLogger(__name__)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def document_to_dict(document: ConfigDocument) -> dict:
    return {
        "pairs": [
            {
                "id": pairing.id,
                "source": pairing.source,
                "target": pairing.target,
                "enabled": pairing.enabled,
                "topic_id": pairing.topic_id,
            }
            for pairing in document.pairings
        ],
        "filters": list(document.filters),
        "admins": list(document.admins),
        "forwarding_enabled": document.forwarding_enabled,
        "stats": [
            {
                "source": record.source,
                "target": record.target,
                "topic_id": record.topic_id,
                "time": record.timestamp_ms,
            }
            for record in document.stats
        ],
    }


def document_from_dict(data: dict) -> ConfigDocument:
    """Build a document, accepting the legacy camelCase/string-id layout too."""

    pairings = [
        RelayPairing(
            id=int(entry["id"]),
            source=int(entry["source"]),
            target=int(entry["target"]),
            enabled=bool(entry.get("enabled", True)),
            topic_id=_optional_int(entry.get("topic_id", entry.get("threadId"))),
        )
        for entry in data.get("pairs", [])
    ]
    stats = [
        StatsRecord(
            source=int(entry["source"]),
            target=int(entry["target"]),
            topic_id=_optional_int(entry.get("topic_id", entry.get("threadId"))),
            timestamp_ms=int(entry["time"]),
        )
        for entry in data.get("stats", [])
    ]
    filters: list[str] = []
    for word in data.get("filters", []):
        if isinstance(word, str) and word.strip() and word not in filters:
            filters.append(word)
    admins: list[int] = []
    for admin in data.get("admins", []):
        if int(admin) not in admins:
            admins.append(int(admin))
    forwarding = data.get("forwarding_enabled", data.get("forwardingEnabled", True))
    return ConfigDocument(
        pairings=pairings,
        filters=filters,
        admins=admins,
        forwarding_enabled=bool(forwarding),
        stats=stats,
    )


class JsonConfigStore:
    """Whole-document JSON store that satisfies the ConfigStorePort contract."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> ConfigDocument:
        """Return the stored document, or a default one if none is usable."""

        if not os.path.exists(self._path):
            LOGGER.info("No relay store at %s, starting empty", self._path)
            return ConfigDocument()
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
            return document_from_dict(data)
        except (OSError, ValueError, KeyError, TypeError):
            LOGGER.exception("Relay store %s is unreadable, starting empty", self._path)
            return ConfigDocument()

    def save(self, document: ConfigDocument) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".relay-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document_to_dict(document), handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
