"""Relay pairing registry.

Pure data and lookup over the configuration document. Every mutation is
written through to the store before the call returns.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from core.errors import DuplicatePairingError, UnknownPairingError
from core.models import ConfigDocument, PairingKey, RelayPairing
from core.ports import ConfigStorePort

LOGGER = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PairingRegistry:
    """Holds relay pairings, the global forwarding switch and the admin list."""

    def __init__(
        self,
        document: ConfigDocument,
        store: ConfigStorePort,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._document = document
        self._store = store
        self._clock = clock

    def _save(self) -> None:
        self._store.save(self._document)

    def all(self) -> list[RelayPairing]:
        return list(self._document.pairings)

    def get(self, pairing_id: int) -> RelayPairing:
        for pairing in self._document.pairings:
            if pairing.id == pairing_id:
                return pairing
        raise UnknownPairingError(f"Pairing not found: {pairing_id}")

    def find(self, key: PairingKey) -> Optional[RelayPairing]:
        for pairing in self._document.pairings:
            if pairing.key == key:
                return pairing
        return None

    def find_enabled(self, source_id: int) -> list[RelayPairing]:
        """Return enabled pairings for a source in insertion order."""

        return [p for p in self._document.pairings if p.enabled and p.source == source_id]

    def _next_id(self) -> int:
        # Creation-time token; bumped when two pairings share a millisecond.
        candidate = self._clock()
        existing = [p.id for p in self._document.pairings]
        if existing and candidate <= max(existing):
            candidate = max(existing) + 1
        return candidate

    def add(self, source: int, target: int, topic_id: Optional[int] = None) -> RelayPairing:
        key = PairingKey(source, target, topic_id)
        if self.find(key) is not None:
            raise DuplicatePairingError(f"Pairing already exists: {source} -> {target} (topic {topic_id})")
        pairing = RelayPairing(
            id=self._next_id(),
            source=source,
            target=target,
            enabled=True,
            topic_id=topic_id,
        )
        self._document.pairings.append(pairing)
        self._save()
        LOGGER.info("Pairing %s created: %s -> %s (topic %s)", pairing.id, source, target, topic_id)
        return pairing

    def _set_enabled(self, pairing_id: int, enabled: bool) -> bool:
        pairing = self.get(pairing_id)
        if pairing.enabled == enabled:
            return False
        pairing.enabled = enabled
        self._save()
        LOGGER.info("Pairing %s %s", pairing_id, "enabled" if enabled else "disabled")
        return True

    def disable(self, pairing_id: int) -> bool:
        """Mark a pairing disabled. Returns whether anything changed."""

        return self._set_enabled(pairing_id, False)

    def enable(self, pairing_id: int) -> bool:
        return self._set_enabled(pairing_id, True)

    def toggle(self, pairing_id: int) -> RelayPairing:
        pairing = self.get(pairing_id)
        if pairing.enabled:
            self.disable(pairing_id)
        else:
            self.enable(pairing_id)
        return pairing

    @property
    def forwarding_enabled(self) -> bool:
        return self._document.forwarding_enabled

    def set_forwarding(self, enabled: bool) -> None:
        self._document.forwarding_enabled = enabled
        self._save()
        LOGGER.info("Forwarding %s", "enabled" if enabled else "disabled")

    def toggle_forwarding(self) -> bool:
        self.set_forwarding(not self._document.forwarding_enabled)
        return self._document.forwarding_enabled

    def admins(self) -> list[int]:
        return list(self._document.admins)

    def is_admin(self, user_id: int) -> bool:
        return user_id in self._document.admins

    def add_admins(self, user_ids: Iterable[int]) -> int:
        """Add operator ids that are not yet known. Returns how many were added."""

        added = 0
        for user_id in user_ids:
            if user_id in self._document.admins:
                continue
            self._document.admins.append(user_id)
            added += 1
        if added:
            self._save()
        return added
