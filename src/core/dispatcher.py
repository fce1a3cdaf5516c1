"""Batch dispatcher.

Turns a flushed batch into outbound sends, in order, and interprets the
classified transport failures. There is exactly one delivery attempt per
batch; nothing here retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from core.channel_ids import build_message_link
from core.errors import TransportError, TransportErrorKind
from core.models import BufferedMessage, LinkAnnotation, RelayPairing
from core.ports import DirectoryPort, NotifierPort, TransportPort
from core.registry import PairingRegistry
from core.stats import StatsRecorder

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    delivered: int
    total: int
    error: Optional[TransportErrorKind] = None
    pairing_disabled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class Dispatcher:
    def __init__(
        self,
        transport: TransportPort,
        directory: DirectoryPort,
        registry: PairingRegistry,
        stats: StatsRecorder,
        notifier: NotifierPort,
        link_marker: str,
        disabled_notice: Callable[[RelayPairing], str],
    ) -> None:
        self._transport = transport
        self._directory = directory
        self._registry = registry
        self._stats = stats
        self._notifier = notifier
        self._link_marker = link_marker
        self._disabled_notice = disabled_notice

    async def _source_handle(self, chat_id: int) -> Optional[str]:
        try:
            return await self._directory.public_handle(chat_id)
        except Exception:
            LOGGER.warning("Could not look up handle for %s, using numeric link", chat_id, exc_info=True)
            return None

    def render_text(self, message: BufferedMessage, handle: Optional[str]) -> tuple[str, LinkAnnotation]:
        """Return the outbound text and the back-link placed over its marker."""

        url = build_message_link(message.origin_chat_id, message.source_message_id, handle)
        text = f"{(message.text or '').strip()}\n{self._link_marker}"
        return text, LinkAnnotation(url=url, marker=self._link_marker)

    async def dispatch(self, pairing: RelayPairing, messages: list[BufferedMessage]) -> DispatchOutcome:
        if not messages:
            return DispatchOutcome(delivered=0, total=0)

        handle = await self._source_handle(pairing.source)
        delivered = 0
        try:
            for message in messages:
                if message.media is not None:
                    await self._transport.send_media(pairing.target, message.media, pairing.topic_id)
                else:
                    text, link = self.render_text(message, handle)
                    await self._transport.send_text(pairing.target, text, pairing.topic_id, link)
                delivered += 1
        except TransportError as exc:
            return await self._handle_failure(pairing, exc, delivered, len(messages))

        self._stats.record(pairing.source, pairing.target, pairing.topic_id)
        LOGGER.info(
            "Relayed %s messages from %s to %s (topic %s)",
            delivered,
            pairing.source,
            pairing.target,
            pairing.topic_id,
        )
        return DispatchOutcome(delivered=delivered, total=len(messages))

    async def _handle_failure(
        self,
        pairing: RelayPairing,
        exc: TransportError,
        delivered: int,
        total: int,
    ) -> DispatchOutcome:
        if not exc.topic_unavailable:
            LOGGER.error(
                "Relay to %s (topic %s) failed after %s/%s messages: %s",
                pairing.target,
                pairing.topic_id,
                delivered,
                total,
                exc,
            )
            return DispatchOutcome(delivered=delivered, total=total, error=exc.kind)

        LOGGER.warning("Topic unavailable for pairing %s, disabling: %s", pairing.id, exc)
        changed = self._registry.disable(pairing.id)
        if changed:
            await self._notify(self._disabled_notice(pairing))
        return DispatchOutcome(delivered=delivered, total=total, error=exc.kind, pairing_disabled=True)

    async def _notify(self, message: str) -> None:
        try:
            await self._notifier.notify_operators(message)
        except Exception:
            LOGGER.exception("Operator notification failed")
