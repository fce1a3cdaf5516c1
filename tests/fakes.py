from __future__ import annotations

import asyncio
from typing import Any, Optional

from core.errors import ResolutionError, TransportError, TransportErrorKind
from core.models import BufferedMessage, ConfigDocument, ForumTopic, LinkAnnotation, RelayPairing

SOURCE = -1001111111111
TARGET = -1002222222222
OTHER_TARGET = -1003333333333


class MemoryStore:
    def __init__(self, document: Optional[ConfigDocument] = None) -> None:
        self.document = document or ConfigDocument()
        self.saves = 0

    def load(self) -> ConfigDocument:
        return self.document

    def save(self, document: ConfigDocument) -> None:
        self.document = document
        self.saves += 1


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTransport:
    """Records sends; raises `error` on the send with index `fail_at`."""

    def __init__(self, fail_at: Optional[int] = None, error: Optional[TransportError] = None) -> None:
        self.sent: list[tuple[str, int, Any, Optional[int], Optional[LinkAnnotation]]] = []
        self._fail_at = fail_at
        self._error = error or TransportError(TransportErrorKind.OTHER, "boom")
        self._attempts = 0

    def _maybe_fail(self) -> None:
        attempt = self._attempts
        self._attempts += 1
        if self._fail_at is not None and attempt == self._fail_at:
            raise self._error

    async def send_text(
        self,
        target: int,
        text: str,
        topic_id: Optional[int] = None,
        link: Optional[LinkAnnotation] = None,
    ) -> None:
        self._maybe_fail()
        self.sent.append(("text", target, text, topic_id, link))

    async def send_media(self, target: int, media: Any, topic_id: Optional[int] = None) -> None:
        self._maybe_fail()
        self.sent.append(("media", target, media, topic_id, None))


class FakeDirectory:
    def __init__(
        self,
        ids: Optional[dict[str, int]] = None,
        topics: Optional[dict[int, list[ForumTopic]]] = None,
        handles: Optional[dict[int, str]] = None,
    ) -> None:
        self._ids = ids or {}
        self._topics = topics or {}
        self._handles = handles or {}

    async def resolve(self, ref: str) -> int:
        if ref not in self._ids:
            raise ResolutionError(f"Cannot access {ref}")
        return self._ids[ref]

    async def list_topics(self, chat_id: int) -> list[ForumTopic]:
        return list(self._topics.get(chat_id, []))

    async def public_handle(self, chat_id: int) -> Optional[str]:
        return self._handles.get(chat_id)


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def notify_operators(self, message: str) -> None:
        self.messages.append(message)


class RecordingDispatcher:
    """Scheduler-side stand-in that records flushed batches."""

    def __init__(self, gate: Optional[asyncio.Event] = None) -> None:
        self.batches: list[tuple[RelayPairing, list[BufferedMessage]]] = []
        self.started = 0
        self._gate = gate

    async def dispatch(self, pairing: RelayPairing, messages: list[BufferedMessage]) -> None:
        self.started += 1
        if self._gate is not None:
            await self._gate.wait()
        self.batches.append((pairing, list(messages)))


def buffered(message_id: int, text: str = "hello", media: Any = None, chat_id: int = SOURCE) -> BufferedMessage:
    return BufferedMessage(source_message_id=message_id, text=text, media=media, origin_chat_id=chat_id)
