"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the relay engine.
"""

from __future__ import annotations

from typing import Any, Optional

from telethon.tl.custom import Message
from telethon.tl.types import MessageMediaWebPage

from core.models import InboundMessage


def _relayable_media(message: Message) -> Optional[Any]:
    media = getattr(message, "media", None)
    # Link previews are rendered from the text itself and cannot be re-sent.
    if media is None or isinstance(media, MessageMediaWebPage):
        return None
    return media


def build_inbound(message: Message) -> Optional[InboundMessage]:
    """Build a core InboundMessage from a Telethon Message.

    Returns None for messages that carry no chat id (service updates).
    """

    chat_id = getattr(message, "chat_id", None)
    if chat_id is None:
        return None
    return InboundMessage(
        chat_id=int(chat_id),
        message_id=message.id,
        text=getattr(message, "raw_text", None) or "",
        media=_relayable_media(message),
    )
