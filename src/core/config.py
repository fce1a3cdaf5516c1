"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DEBOUNCE_MS = 1500
DEFAULT_LINK_MARKER = "\U0001f4b8"


@dataclass(frozen=True)
class RelayConfig:
    """Batching and rendering settings for the relay engine."""

    debounce_seconds: float = DEFAULT_DEBOUNCE_MS / 1000
    link_marker: str = DEFAULT_LINK_MARKER
