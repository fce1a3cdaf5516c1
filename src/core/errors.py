"""Error taxonomy for the relay engine."""

from __future__ import annotations

import enum
from typing import Optional


class RelayError(Exception):
    """Base class for errors reported back to the caller."""


class DuplicatePairingError(RelayError):
    pass


class UnknownPairingError(RelayError):
    pass


class DuplicateFilterError(RelayError):
    pass


class UnknownFilterError(RelayError):
    pass


class InvalidFilterError(RelayError):
    pass


class UnknownTopicError(RelayError):
    pass


class ResolutionError(RelayError):
    """An @handle or raw id could not be turned into a canonical channel id."""


class TransportErrorKind(enum.Enum):
    TOPIC_UNAVAILABLE = "topic_unavailable"
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


class TransportError(RelayError):
    """Classified outbound delivery failure raised by transport adapters."""

    def __init__(self, kind: TransportErrorKind, detail: str = "", cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail
        self.cause = cause

    @property
    def topic_unavailable(self) -> bool:
        return self.kind is TransportErrorKind.TOPIC_UNAVAILABLE
