"""Core inbound message processing.

This module is integration-agnostic. It only relies on the registry, the
filter book and the scheduler, enabling other frontends without changes
here.
"""

from __future__ import annotations

import logging

from core.filters import FilterBook
from core.models import BufferedMessage, InboundMessage
from core.registry import PairingRegistry
from core.scheduler import BatchScheduler

LOGGER = logging.getLogger(__name__)


class RelayProcessor:
    """Routes one inbound message into the batches of its enabled pairings."""

    def __init__(self, registry: PairingRegistry, filters: FilterBook, scheduler: BatchScheduler) -> None:
        self._registry = registry
        self._filters = filters
        self._scheduler = scheduler

    async def handle(self, message: InboundMessage) -> int:
        """Buffer the message for every matching pairing; return how many."""

        if not self._registry.forwarding_enabled:
            return 0

        pairings = self._registry.find_enabled(message.chat_id)
        if not pairings:
            return 0

        buffered = BufferedMessage(
            source_message_id=message.message_id,
            text=self._filters.redact(message.text or ""),
            media=message.media,
            origin_chat_id=message.chat_id,
        )
        for pairing in pairings:
            self._scheduler.enqueue(pairing, buffered)
        LOGGER.debug("Message %s from %s buffered for %s pairings", message.message_id, message.chat_id, len(pairings))
        return len(pairings)
