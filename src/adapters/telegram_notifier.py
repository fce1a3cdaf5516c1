"""Telegram notification adapter for Saved Messages.

Used when no operator bot is configured: notices land in the relaying
account's own Saved Messages.
"""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)


class TelegramSavedMessagesNotifier:
    """Notifier adapter that sends operator notices to Saved Messages."""

    def __init__(self, client) -> None:
        self._client = client

    async def notify_operators(self, message: str) -> None:
        await self._client.send_message("me", message, link_preview=False)
        LOGGER.info("Operator notice sent to Saved Messages")
