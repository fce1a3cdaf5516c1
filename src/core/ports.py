"""Ports (interfaces) used by the relay engine.

Ports define the minimal contracts for storage, delivery, lookup and
notification adapters so that the core can be reused with different
backends.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from core.models import ConfigDocument, ForumTopic, LinkAnnotation


class ConfigStorePort(Protocol):
    """Whole-document persistence for the relay configuration."""

    def load(self) -> ConfigDocument:
        ...

    def save(self, document: ConfigDocument) -> None:
        ...


class TransportPort(Protocol):
    """Outbound delivery. Failures are raised as core.errors.TransportError."""

    async def send_text(
        self,
        target: int,
        text: str,
        topic_id: Optional[int] = None,
        link: Optional[LinkAnnotation] = None,
    ) -> None:
        ...

    async def send_media(self, target: int, media: Any, topic_id: Optional[int] = None) -> None:
        ...


class DirectoryPort(Protocol):
    """Identity resolution and chat metadata lookups."""

    async def resolve(self, ref: str) -> int:
        ...

    async def list_topics(self, chat_id: int) -> list[ForumTopic]:
        ...

    async def public_handle(self, chat_id: int) -> Optional[str]:
        ...


class NotifierPort(Protocol):
    """Best-effort operator notifications."""

    async def notify_operators(self, message: str) -> None:
        ...
