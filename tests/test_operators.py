from __future__ import annotations

import asyncio

import pytest

from core.errors import DuplicatePairingError, ResolutionError, UnknownTopicError
from core.filters import FilterBook
from core.models import ConfigDocument, ForumTopic
from core.operators import OperatorService, resolve_ref
from core.registry import PairingRegistry
from core.stats import StatsRecorder

from fakes import SOURCE, TARGET, FakeClock, FakeDirectory, MemoryStore


def _service(directory: FakeDirectory) -> OperatorService:
    document = ConfigDocument(admins=[42])
    store = MemoryStore()
    clock = FakeClock()
    return OperatorService(
        registry=PairingRegistry(document, store, clock),
        filters=FilterBook(document, store),
        stats=StatsRecorder(document, store, clock),
        directory=directory,
    )


def _directory() -> FakeDirectory:
    return FakeDirectory(
        ids={"@source": SOURCE, "@target": TARGET},
        topics={TARGET: [ForumTopic(id=58, title="Deals"), ForumTopic(id=60, title="Chat")]},
    )


def test_resolve_ref_handles_and_numeric_ids() -> None:
    directory = _directory()
    assert asyncio.run(resolve_ref("@source", directory)) == SOURCE
    assert asyncio.run(resolve_ref("2222222222", directory)) == TARGET
    assert asyncio.run(resolve_ref("-1002222222222", directory)) == TARGET
    with pytest.raises(ResolutionError):
        asyncio.run(resolve_ref("@missing", directory))
    with pytest.raises(ResolutionError):
        asyncio.run(resolve_ref("not-an-id", directory))
    with pytest.raises(ResolutionError):
        asyncio.run(resolve_ref("  ", directory))


def test_add_pairing_resolves_and_validates_topic() -> None:
    service = _service(_directory())
    pairing = asyncio.run(service.add_pairing("@source", "@target", 58))

    assert (pairing.source, pairing.target, pairing.topic_id) == (SOURCE, TARGET, 58)
    assert service.pairings() == [pairing]


def test_add_pairing_rejects_unknown_topic() -> None:
    service = _service(_directory())
    with pytest.raises(UnknownTopicError):
        asyncio.run(service.add_pairing("@source", "@target", 99))
    with pytest.raises(UnknownTopicError):
        asyncio.run(service.add_pairing("@source", "@target", -1))
    assert service.pairings() == []


def test_add_pairing_rejects_unresolvable_handle() -> None:
    service = _service(_directory())
    with pytest.raises(ResolutionError):
        asyncio.run(service.add_pairing("@nobody", "@target"))
    assert service.pairings() == []


def test_add_pairing_duplicate() -> None:
    service = _service(_directory())
    asyncio.run(service.add_pairing("@source", "@target", 58))
    with pytest.raises(DuplicatePairingError):
        asyncio.run(service.add_pairing("@source", "-1002222222222", 58))
    asyncio.run(service.add_pairing("@source", "@target", 60))
    assert len(service.pairings()) == 2


def test_list_topics_returns_resolved_id() -> None:
    service = _service(_directory())
    chat_id, topics = asyncio.run(service.list_topics("@target"))
    assert chat_id == TARGET
    assert [topic.id for topic in topics] == [58, 60]


def test_filters_toggles_and_stats() -> None:
    service = _service(_directory())
    service.add_filter("Spam")
    assert service.list_filters() == ["spam"]
    service.remove_filter("spam")
    assert service.list_filters() == []

    pairing = asyncio.run(service.add_pairing("@source", "@target"))
    assert service.toggle_pairing(pairing.id).enabled is False
    assert service.toggle_forwarding() is False
    assert service.stats_summary().total == 0
    assert service.is_admin(42)
    assert not service.is_admin(7)
