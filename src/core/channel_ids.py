"""Helpers for working with canonical channel ids and message links."""

from __future__ import annotations

from typing import Optional, Union

CHANNEL_PREFIX = "-100"
# Peer ids of channels/supergroups are -(10**12 + channel_id).
CHANNEL_OFFSET = 1000000000000


def is_handle(ref: str) -> bool:
    return ref.strip().startswith("@")


def to_canonical_id(value: Union[int, str]) -> int:
    """Return the signed broadcast-id form (-100<channel_id>) of a numeric id.

    Values already carrying the -100 prefix are kept as they are. Handles
    ("@name") need a directory lookup and raise ValueError here.
    """

    raw = str(value).strip()
    if raw.startswith("@"):
        raise ValueError(f"Handle needs resolution: {raw}")
    if raw.startswith(CHANNEL_PREFIX):
        return int(raw)
    digits = raw.lstrip("-")
    if not digits.isdigit():
        raise ValueError(f"Not a numeric channel id: {raw}")
    return int(f"{CHANNEL_PREFIX}{digits}")


def to_link_id(canonical_id: int) -> int:
    """Return the bare channel id used in private t.me/c/ links."""

    raw_text = str(canonical_id)
    if raw_text.startswith(CHANNEL_PREFIX):
        return abs(canonical_id) - CHANNEL_OFFSET
    return abs(canonical_id)


def build_message_link(chat_id: int, message_id: int, handle: Optional[str] = None) -> str:
    """Return a t.me link to a message, preferring the public handle."""

    if handle:
        return f"https://t.me/{handle.lstrip('@')}/{message_id}"
    return f"https://t.me/c/{to_link_id(chat_id)}/{message_id}"
