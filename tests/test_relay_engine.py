from __future__ import annotations

import asyncio

from adapters.notification_formatting import format_disabled_notice
from core.config import RelayConfig
from core.engine import RelayEngine
from core.errors import TransportError, TransportErrorKind
from core.models import ConfigDocument, InboundMessage

from fakes import (
    OTHER_TARGET,
    SOURCE,
    TARGET,
    FakeClock,
    FakeDirectory,
    FakeNotifier,
    FakeTransport,
    MemoryStore,
)

DEBOUNCE = 0.05


def _engine(transport: FakeTransport, document: "ConfigDocument | None" = None) -> tuple[RelayEngine, FakeNotifier]:
    notifier = FakeNotifier()
    engine = RelayEngine.build(
        document=document or ConfigDocument(),
        store=MemoryStore(),
        transport=transport,
        directory=FakeDirectory(),
        notifier=notifier,
        config=RelayConfig(debounce_seconds=DEBOUNCE, link_marker="->"),
        disabled_notice=format_disabled_notice,
        clock=FakeClock(),
    )
    return engine, notifier


def _message(message_id: int, text: str = "hello", chat_id: int = SOURCE) -> InboundMessage:
    return InboundMessage(chat_id=chat_id, message_id=message_id, text=text)


def test_burst_is_relayed_as_one_batch_and_recorded() -> None:
    transport = FakeTransport()
    engine, _ = _engine(transport)
    pairing = engine.registry.add(SOURCE, TARGET, 58)

    async def scenario() -> None:
        for message_id in (1, 2, 3):
            await engine.processor.handle(_message(message_id, f"m{message_id}"))
            await asyncio.sleep(DEBOUNCE / 5)
        await asyncio.sleep(DEBOUNCE * 3)
        await engine.scheduler.drain()

    asyncio.run(scenario())

    assert [text for _, _, text, _, _ in transport.sent] == ["m1\n->", "m2\n->", "m3\n->"]
    assert all(topic == 58 for _, _, _, topic, _ in transport.sent)
    assert len(engine.document.stats) == 1
    record = engine.document.stats[0]
    assert (record.source, record.target, record.topic_id) == (pairing.source, pairing.target, 58)


def test_text_is_redacted_before_buffering() -> None:
    transport = FakeTransport()
    engine, _ = _engine(transport, ConfigDocument(filters=["secret"]))
    engine.registry.add(SOURCE, TARGET)

    async def scenario() -> None:
        await engine.processor.handle(_message(1, "a Secret plan"))
        await engine.scheduler.flush_all()

    asyncio.run(scenario())
    assert transport.sent[0][2] == "a ...... plan\n->"


def test_message_fans_out_to_every_enabled_pairing() -> None:
    transport = FakeTransport()
    engine, _ = _engine(transport)
    engine.registry.add(SOURCE, TARGET, 58)
    engine.registry.add(SOURCE, OTHER_TARGET)
    disabled = engine.registry.add(SOURCE, TARGET, 59)
    engine.registry.disable(disabled.id)

    async def scenario() -> int:
        count = await engine.processor.handle(_message(1))
        ignored = await engine.processor.handle(_message(2, chat_id=-100777))
        assert ignored == 0
        await engine.scheduler.flush_all()
        return count

    assert asyncio.run(scenario()) == 2
    assert sorted((target, topic) for _, target, _, topic, _ in transport.sent) == sorted(
        [(TARGET, 58), (OTHER_TARGET, None)]
    )


def test_global_switch_stops_buffering() -> None:
    transport = FakeTransport()
    engine, _ = _engine(transport)
    pairing = engine.registry.add(SOURCE, TARGET)
    engine.registry.set_forwarding(False)

    async def scenario() -> int:
        return await engine.processor.handle(_message(1))

    assert asyncio.run(scenario()) == 0
    assert engine.scheduler.pending(pairing.key) == 0


def test_topic_failure_disables_pairing_and_stops_further_buffering() -> None:
    error = TransportError(TransportErrorKind.TOPIC_UNAVAILABLE, "TOPIC_CLOSED")
    transport = FakeTransport(fail_at=0, error=error)
    engine, notifier = _engine(transport)
    pairing = engine.registry.add(SOURCE, TARGET, 58)

    async def scenario() -> int:
        for message_id in (1, 2, 3):
            await engine.processor.handle(_message(message_id))
        await asyncio.sleep(DEBOUNCE * 3)
        await engine.scheduler.drain()
        return await engine.processor.handle(_message(4))

    buffered_after = asyncio.run(scenario())

    assert pairing.enabled is False
    assert len(notifier.messages) == 1
    assert buffered_after == 0
    assert engine.scheduler.pending(pairing.key) == 0
    assert engine.document.stats == []
