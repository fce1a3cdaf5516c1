"""Shared operator-facing text formatting.

Keeping formatting here prevents drift between the command handlers and
the notifiers, and keeps replies consistent regardless of entry point.
"""

from __future__ import annotations

from typing import Iterable, Optional

from core.channel_ids import to_link_id
from core.models import ForumTopic, RelayPairing, StatsSummary

MENU_ADD_PAIR = "➕ Add pairing"
MENU_LIST_PAIRS = "📋 Pairings"
MENU_ADD_FILTER = "📛 Add filter"
MENU_LIST_FILTERS = "📝 Filters"
MENU_TOGGLE_ALL = "🔁 Toggle all"
MENU_STATS = "📊 Stats"
MENU_GET_ID = "🆔 Get ID"

MENU_ROWS = [
    [MENU_ADD_PAIR, MENU_LIST_PAIRS],
    [MENU_ADD_FILTER, MENU_LIST_FILTERS],
    [MENU_TOGGLE_ALL, MENU_STATS],
    [MENU_GET_ID],
]

TOGGLE_PREFIX = "toggle_"


def format_pairing(pairing: RelayPairing) -> str:
    status = "✅" if pairing.enabled else "❌"
    topic = pairing.topic_id if pairing.topic_id else "not set"
    lines = [
        f"🔗 ID: {pairing.id}",
        f"From: {pairing.source}",
        f"To: {pairing.target}",
        f"Status: {status}",
        f"🧵 Topic: {topic}",
    ]
    return "\n".join(lines)


def toggle_button_label(pairing: RelayPairing) -> str:
    return "Disable" if pairing.enabled else "Enable"


def toggle_payload(pairing: RelayPairing) -> bytes:
    return f"{TOGGLE_PREFIX}{pairing.id}".encode("ascii")


def parse_toggle_payload(data: bytes) -> int:
    """Return the pairing id carried by an inline toggle button."""

    text = data.decode("ascii", errors="replace")
    if not text.startswith(TOGGLE_PREFIX):
        raise ValueError(f"Unexpected callback data: {text}")
    return int(text[len(TOGGLE_PREFIX):])


def topic_label(topic_id: Optional[int]) -> str:
    return f"topic {topic_id}" if topic_id else "no topic"


def format_disabled_notice(pairing: RelayPairing) -> str:
    """Operator notice for a pairing switched off after its topic went away."""

    return (
        f"⚠️ Pairing {pairing.source} → {pairing.target} ({topic_label(pairing.topic_id)}) "
        "was disabled: the topic is closed or deleted"
    )


def format_created(pairing: RelayPairing) -> str:
    suffix = f" (topic {pairing.topic_id})" if pairing.topic_id else ""
    return f"✅ Pairing created: from {pairing.source} to {pairing.target}{suffix}"


def format_filters(words: Iterable[str]) -> str:
    lines = [f"{index}. {word}" for index, word in enumerate(words, start=1)]
    body = "\n".join(lines) if lines else "📭 empty"
    return f"📃 Filter words:\n{body}"


def format_stats(summary: StatsSummary) -> str:
    return "\n".join(
        [
            f"📊 Last 10 min: {summary.last_10_minutes}",
            f"🕐 Last hour: {summary.last_hour}",
            f"📅 Last day: {summary.last_day}",
            f"🔢 Total: {summary.total}",
        ]
    )


def format_forwarding(enabled: bool) -> str:
    return f"🔁 All pairings: {'enabled' if enabled else 'disabled'}"


def format_topics(chat_id: int, topics: Iterable[ForumTopic]) -> str:
    link_id = to_link_id(chat_id)
    blocks = []
    for topic in topics:
        lines = [f"🧵 {topic.title}", f"🆔 ID: {topic.id}"]
        if topic.top_message_id:
            lines.append(f"🔗 https://t.me/c/{link_id}/{topic.top_message_id}")
        blocks.append("\n".join(lines))
    if not blocks:
        return "📭 No topics found"
    return "📋 Topics:\n\n" + "\n\n".join(blocks)
