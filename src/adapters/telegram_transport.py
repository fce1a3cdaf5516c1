"""Telethon outbound transport adapter.

Sends relay batches with the user client and maps Telegram RPC failures
onto the closed set of core transport error kinds.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, Optional

from telethon import errors
from telethon.tl.types import MessageEntityTextUrl

from core.errors import TransportError, TransportErrorKind
from core.models import LinkAnnotation

TOPIC_UNAVAILABLE_CODES = frozenset(
    {
        "TOPIC_CLOSED",
        "TOPIC_DELETED",
        "TOPIC_NOT_FOUND",
        "TOPIC_ID_INVALID",
    }
)


def utf16_len(text: str) -> int:
    """Length in UTF-16 code units, the unit Telegram entity offsets use."""

    return len(text.encode("utf-16-le")) // 2


# Generated error classes only carry their base class message (e.g.
# BAD_REQUEST), so the code is looked up by class.
_GENERATED_CODES = {cls: code for code, cls in errors.rpc_errors_dict.items()}


def rpc_error_code(exc: BaseException) -> str:
    """Return the upper-case RPC code (e.g. TOPIC_CLOSED) for a Telethon error."""

    code = _GENERATED_CODES.get(type(exc))
    if code is not None:
        return code
    # Unknown codes are raised as base classes that keep the server message.
    message = getattr(exc, "message", None)
    if (
        type(exc).__module__ == errors.RPCError.__module__
        and isinstance(message, str)
        and re.fullmatch(r"[A-Z0-9_]+", message)
    ):
        return message
    name = type(exc).__name__
    if name.endswith("Error"):
        name = name[: -len("Error")]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()


def classify_error(exc: BaseException) -> TransportError:
    if isinstance(exc, errors.FloodWaitError):
        return TransportError(TransportErrorKind.RATE_LIMITED, f"flood wait {exc.seconds}s", exc)
    if isinstance(exc, asyncio.TimeoutError):
        return TransportError(TransportErrorKind.OTHER, "timed out", exc)
    if isinstance(exc, errors.RPCError):
        code = rpc_error_code(exc)
        if code in TOPIC_UNAVAILABLE_CODES:
            return TransportError(TransportErrorKind.TOPIC_UNAVAILABLE, code, exc)
        return TransportError(TransportErrorKind.OTHER, code, exc)
    return TransportError(TransportErrorKind.OTHER, str(exc) or type(exc).__name__, exc)


def build_link_entity(text: str, link: LinkAnnotation) -> MessageEntityTextUrl:
    """Place a text-url entity over the trailing marker of the text."""

    length = utf16_len(link.marker)
    return MessageEntityTextUrl(offset=utf16_len(text) - length, length=length, url=link.url)


class TelethonTransport:
    """TransportPort implementation backed by a Telethon client."""

    def __init__(self, client) -> None:
        self._client = client

    async def send_text(
        self,
        target: int,
        text: str,
        topic_id: Optional[int] = None,
        link: Optional[LinkAnnotation] = None,
    ) -> None:
        entities = [build_link_entity(text, link)] if link and text.endswith(link.marker) else None
        try:
            await self._client.send_message(
                target,
                text,
                formatting_entities=entities,
                link_preview=False,
                reply_to=topic_id,
            )
        except Exception as exc:
            raise classify_error(exc) from exc

    async def send_media(self, target: int, media: Any, topic_id: Optional[int] = None) -> None:
        try:
            await self._client.send_file(target, media, reply_to=topic_id)
        except Exception as exc:
            raise classify_error(exc) from exc
