"""Per-pairing batch scheduler.

Each (source, target, topic) key owns one pending batch and at most one
armed debounce timer. Every arrival pushes the timer forward, so a batch is
flushed only after the key has been quiet for the whole window. At flush
the message list is detached synchronously; anything arriving while the
dispatch is in flight starts a fresh batch for the same key.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from core.models import BufferedMessage, PairingKey, RelayPairing

LOGGER = logging.getLogger(__name__)


class BatchDispatcher(Protocol):
    async def dispatch(self, pairing: RelayPairing, messages: list[BufferedMessage]):
        ...


@dataclass
class PendingBatch:
    pairing: RelayPairing
    messages: list[BufferedMessage] = field(default_factory=list)
    timer: Optional[asyncio.TimerHandle] = None


class BatchScheduler:
    """Debounces inbound messages per pairing key and hands batches to a dispatcher."""

    def __init__(self, dispatcher: BatchDispatcher, debounce_seconds: float) -> None:
        self._dispatcher = dispatcher
        self._debounce = debounce_seconds
        self._pending: dict[PairingKey, PendingBatch] = {}
        self._in_flight: set[asyncio.Task] = set()

    def enqueue(self, pairing: RelayPairing, message: BufferedMessage) -> None:
        """Append a message to the pairing's batch and (re)arm its timer."""

        loop = asyncio.get_running_loop()
        key = pairing.key
        batch = self._pending.get(key)
        if batch is None:
            batch = PendingBatch(pairing=pairing)
            self._pending[key] = batch
        batch.pairing = pairing
        batch.messages.append(message)
        if batch.timer is not None:
            batch.timer.cancel()
        batch.timer = loop.call_later(self._debounce, self._flush, key)

    @property
    def has_pending(self) -> bool:
        return any(batch.messages for batch in self._pending.values()) or bool(self._in_flight)

    def pending(self, key: PairingKey) -> int:
        batch = self._pending.get(key)
        return len(batch.messages) if batch else 0

    def is_armed(self, key: PairingKey) -> bool:
        batch = self._pending.get(key)
        return batch is not None and batch.timer is not None

    def _detach(self, key: PairingKey) -> Optional[PendingBatch]:
        batch = self._pending.pop(key, None)
        if batch is None:
            return None
        if batch.timer is not None:
            batch.timer.cancel()
            batch.timer = None
        return batch

    def _flush(self, key: PairingKey) -> Optional[asyncio.Task]:
        batch = self._detach(key)
        if batch is None or not batch.messages:
            return None
        if not batch.pairing.enabled:
            LOGGER.info("Dropping %s messages for disabled pairing %s", len(batch.messages), batch.pairing.id)
            return None
        task = asyncio.get_running_loop().create_task(self._run_dispatch(batch.pairing, batch.messages))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run_dispatch(self, pairing: RelayPairing, messages: list[BufferedMessage]) -> None:
        LOGGER.debug("Flushing %s messages for pairing %s", len(messages), pairing.id)
        try:
            await self._dispatcher.dispatch(pairing, messages)
        except Exception:
            LOGGER.exception("Dispatch crashed for pairing %s", pairing.id)

    async def drain(self) -> None:
        """Wait for every in-flight dispatch to finish."""

        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def flush_all(self) -> None:
        """Dispatch every pending batch now, without waiting for its window."""

        for key in list(self._pending):
            self._flush(key)
        await self.drain()
