"""Telethon directory adapter: identity resolution and forum topics."""

from __future__ import annotations

import logging
from typing import Optional

from telethon.tl.functions.channels import GetForumTopicsRequest

from core.channel_ids import to_canonical_id
from core.errors import ResolutionError
from core.models import ForumTopic

LOGGER = logging.getLogger(__name__)

TOPICS_PAGE_LIMIT = 100


class TelethonDirectory:
    """Resolve handles and chat metadata, with a chat_id -> handle cache."""

    def __init__(self, client) -> None:
        self._client = client
        self._handles: dict[int, Optional[str]] = {}

    async def resolve(self, ref: str) -> int:
        try:
            entity = await self._client.get_entity(ref)
        except Exception as exc:
            raise ResolutionError(f"Cannot access {ref}: {exc}") from exc
        canonical = to_canonical_id(entity.id)
        self._handles.setdefault(canonical, getattr(entity, "username", None))
        return canonical

    async def list_topics(self, chat_id: int) -> list[ForumTopic]:
        try:
            entity = await self._client.get_entity(chat_id)
            result = await self._client(
                GetForumTopicsRequest(
                    channel=entity,
                    offset_date=None,
                    offset_id=0,
                    offset_topic=0,
                    limit=TOPICS_PAGE_LIMIT,
                )
            )
        except Exception as exc:
            raise ResolutionError(f"Cannot list topics of {chat_id}: {exc}") from exc
        return [
            ForumTopic(
                id=topic.id,
                title=getattr(topic, "title", ""),
                top_message_id=getattr(topic, "top_message", None),
            )
            for topic in result.topics
        ]

    async def public_handle(self, chat_id: int) -> Optional[str]:
        if chat_id in self._handles:
            return self._handles[chat_id]
        entity = await self._client.get_entity(chat_id)
        handle = getattr(entity, "username", None)
        self._handles[chat_id] = handle
        return handle
