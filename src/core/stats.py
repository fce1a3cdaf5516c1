"""Delivery statistics (core domain).

Records are append-only and never evicted; the list grows with every
successful flush for the lifetime of the configuration document.
"""

from __future__ import annotations

from typing import Callable, Optional

from core.models import ConfigDocument, StatsRecord, StatsSummary
from core.ports import ConfigStorePort
from core.registry import now_ms

TEN_MINUTES_MS = 10 * 60 * 1000
HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


class StatsRecorder:
    def __init__(
        self,
        document: ConfigDocument,
        store: ConfigStorePort,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._document = document
        self._store = store
        self._clock = clock

    def record(self, source: int, target: int, topic_id: Optional[int] = None) -> StatsRecord:
        entry = StatsRecord(source=source, target=target, topic_id=topic_id, timestamp_ms=self._clock())
        self._document.stats.append(entry)
        self._store.save(self._document)
        return entry

    def count_since(self, window_ms: int) -> int:
        """Count records no older than window_ms relative to now."""

        now = self._clock()
        return sum(1 for entry in self._document.stats if now - entry.timestamp_ms <= window_ms)

    def total(self) -> int:
        return len(self._document.stats)

    def summary(self) -> StatsSummary:
        return StatsSummary(
            last_10_minutes=self.count_since(TEN_MINUTES_MS),
            last_hour=self.count_since(HOUR_MS),
            last_day=self.count_since(DAY_MS),
            total=self.total(),
        )
