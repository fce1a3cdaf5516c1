"""Telegram bot notification adapter.

Delivers operator notices through the command bot, one message per admin.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

LOGGER = logging.getLogger(__name__)


class TelegramBotNotifier:
    """Notifier adapter that messages every admin via the bot client."""

    def __init__(self, bot_client, admins: Callable[[], Iterable[int]]) -> None:
        self._bot = bot_client
        self._admins = admins

    async def notify_operators(self, message: str) -> None:
        admins = list(self._admins())
        if not admins:
            LOGGER.warning("No admins configured, notice dropped: %s", message)
            return
        for admin_id in admins:
            try:
                await self._bot.send_message(admin_id, message, link_preview=False)
            except Exception:
                # One unreachable admin must not hide the notice from the rest.
                LOGGER.exception("Failed to notify admin %s", admin_id)
