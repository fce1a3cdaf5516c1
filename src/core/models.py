"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional


class PairingKey(NamedTuple):
    """Identity of a relay route and of its pending batch."""

    source: int
    target: int
    topic_id: Optional[int]


@dataclass
class RelayPairing:
    """A configured route from one source channel to one target (and topic)."""

    id: int
    source: int
    target: int
    enabled: bool = True
    topic_id: Optional[int] = None

    @property
    def key(self) -> PairingKey:
        return PairingKey(self.source, self.target, self.topic_id)


@dataclass(frozen=True)
class InboundMessage:
    """Minimal view of a message observed on a source chat."""

    chat_id: int
    message_id: int
    text: str
    media: Any = None


@dataclass(frozen=True)
class BufferedMessage:
    """A redacted message waiting in a pending batch."""

    source_message_id: int
    text: str
    media: Any
    origin_chat_id: int


@dataclass(frozen=True)
class StatsRecord:
    """One successful batch delivery."""

    source: int
    target: int
    topic_id: Optional[int]
    timestamp_ms: int


@dataclass(frozen=True)
class StatsSummary:
    last_10_minutes: int
    last_hour: int
    last_day: int
    total: int


@dataclass(frozen=True)
class ForumTopic:
    id: int
    title: str
    top_message_id: Optional[int] = None


@dataclass(frozen=True)
class LinkAnnotation:
    """Hyperlink placed over the trailing marker of an outbound text."""

    url: str
    marker: str


@dataclass
class ConfigDocument:
    """Whole relay configuration, persisted as one document."""

    pairings: list[RelayPairing] = field(default_factory=list)
    filters: list[str] = field(default_factory=list)
    admins: list[int] = field(default_factory=list)
    forwarding_enabled: bool = True
    stats: list[StatsRecord] = field(default_factory=list)
