"""Composition of the relay engine.

Builds every core component around one shared configuration document so
the app layer only has to supply adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.config import RelayConfig
from core.dispatcher import Dispatcher
from core.filters import FilterBook
from core.models import ConfigDocument, RelayPairing
from core.operators import OperatorService
from core.ports import ConfigStorePort, DirectoryPort, NotifierPort, TransportPort
from core.processor import RelayProcessor
from core.registry import PairingRegistry, now_ms
from core.scheduler import BatchScheduler
from core.stats import StatsRecorder


@dataclass
class RelayEngine:
    document: ConfigDocument
    registry: PairingRegistry
    filters: FilterBook
    stats: StatsRecorder
    dispatcher: Dispatcher
    scheduler: BatchScheduler
    processor: RelayProcessor
    operators: OperatorService

    @classmethod
    def build(
        cls,
        document: ConfigDocument,
        store: ConfigStorePort,
        transport: TransportPort,
        directory: DirectoryPort,
        notifier: NotifierPort,
        config: RelayConfig,
        disabled_notice: Callable[[RelayPairing], str],
        clock: Callable[[], int] = now_ms,
    ) -> "RelayEngine":
        registry = PairingRegistry(document, store, clock)
        filters = FilterBook(document, store)
        stats = StatsRecorder(document, store, clock)
        dispatcher = Dispatcher(
            transport=transport,
            directory=directory,
            registry=registry,
            stats=stats,
            notifier=notifier,
            link_marker=config.link_marker,
            disabled_notice=disabled_notice,
        )
        scheduler = BatchScheduler(dispatcher, config.debounce_seconds)
        return cls(
            document=document,
            registry=registry,
            filters=filters,
            stats=stats,
            dispatcher=dispatcher,
            scheduler=scheduler,
            processor=RelayProcessor(registry, filters, scheduler),
            operators=OperatorService(registry, filters, stats, directory),
        )
