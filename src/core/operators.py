"""Operator use cases.

The chat command adapter stays a thin wrapper around these methods; every
validation and every mutation of the relay configuration happens here or
in the registry and filter book it delegates to.
"""

from __future__ import annotations

from typing import Optional

from core.channel_ids import is_handle, to_canonical_id
from core.errors import ResolutionError, UnknownTopicError
from core.filters import FilterBook
from core.models import ForumTopic, RelayPairing, StatsSummary
from core.ports import DirectoryPort
from core.registry import PairingRegistry
from core.stats import StatsRecorder


async def resolve_ref(ref: str, directory: DirectoryPort) -> int:
    """Turn "@handle" or a raw numeric id into a canonical channel id."""

    ref = ref.strip()
    if not ref:
        raise ResolutionError("Empty channel reference")
    if is_handle(ref):
        return await directory.resolve(ref)
    try:
        return to_canonical_id(ref)
    except ValueError as exc:
        raise ResolutionError(str(exc)) from exc


class OperatorService:
    def __init__(
        self,
        registry: PairingRegistry,
        filters: FilterBook,
        stats: StatsRecorder,
        directory: DirectoryPort,
    ) -> None:
        self._registry = registry
        self._filters = filters
        self._stats = stats
        self._directory = directory

    def is_admin(self, user_id: int) -> bool:
        return self._registry.is_admin(user_id)

    async def resolve(self, ref: str) -> int:
        return await resolve_ref(ref, self._directory)

    async def list_topics(self, ref: str) -> tuple[int, list[ForumTopic]]:
        chat_id = await self.resolve(ref)
        return chat_id, await self._directory.list_topics(chat_id)

    async def add_pairing(self, source_ref: str, target_ref: str, topic_id: Optional[int] = None) -> RelayPairing:
        source = await self.resolve(source_ref)
        target = await self.resolve(target_ref)
        if topic_id is not None:
            if topic_id <= 0:
                raise UnknownTopicError(f"Topic id must be positive: {topic_id}")
            topics = await self._directory.list_topics(target)
            if not any(topic.id == topic_id for topic in topics):
                raise UnknownTopicError(f"Topic {topic_id} not found in {target}")
        return self._registry.add(source, target, topic_id)

    def pairings(self) -> list[RelayPairing]:
        return self._registry.all()

    def toggle_pairing(self, pairing_id: int) -> RelayPairing:
        return self._registry.toggle(pairing_id)

    def toggle_forwarding(self) -> bool:
        return self._registry.toggle_forwarding()

    def add_filter(self, word: str) -> str:
        return self._filters.add(word)

    def remove_filter(self, word: str) -> str:
        return self._filters.remove(word)

    def list_filters(self) -> list[str]:
        return self._filters.words()

    def stats_summary(self) -> StatsSummary:
        return self._stats.summary()
