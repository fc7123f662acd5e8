"""Unit tests — ports.py (MemorySignalBus, RecordingOutput, ConsoleOutput, LogStatusSink)."""

from __future__ import annotations

import asyncio
from io import StringIO

import pytest
from rich.console import Console

from process_scheduler.ports import (
    ConsoleOutput,
    LogStatusSink,
    MemorySignalBus,
    OutputPort,
    RecordingOutput,
    SignalSource,
)


@pytest.mark.unit
class TestInterfaces:
    def test_signal_source_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            SignalSource()  # type: ignore[abstract]

    def test_output_port_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            OutputPort()  # type: ignore[abstract]


@pytest.mark.unit
class TestMemorySignalBus:
    async def test_subscriber_receives_published_values(self, bus: MemorySignalBus) -> None:
        stream = bus.observe("switches.deck")
        first = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        bus.publish("switches.deck", 1)
        assert await first == 1
        await stream.aclose()

    async def test_late_subscriber_gets_last_value(self, bus: MemorySignalBus) -> None:
        bus.publish("switches.deck", 0)
        bus.publish("switches.deck", 1)
        stream = bus.observe("switches.deck")
        assert await stream.__anext__() == 1
        await stream.aclose()

    async def test_independent_subscriptions(self, bus: MemorySignalBus) -> None:
        a = bus.observe("switches.deck")
        b = bus.observe("switches.deck")
        bus.publish("switches.deck", "x")
        assert await a.__anext__() == "x"
        bus.publish("switches.deck", "y")
        assert await b.__anext__() == "y"
        assert bus.subscriber_count("switches.deck") == 2
        await a.aclose()
        await b.aclose()
        assert bus.subscriber_count("switches.deck") == 0

    async def test_paths_are_isolated(self, bus: MemorySignalBus) -> None:
        stream = bus.observe("switches.deck")
        pending = asyncio.ensure_future(stream.__anext__())
        await asyncio.sleep(0)
        bus.publish("switches.horn", 1)
        await asyncio.sleep(0)
        assert not pending.done()
        pending.cancel()
        await asyncio.gather(pending, return_exceptions=True)

    def test_last_value(self, bus: MemorySignalBus) -> None:
        assert bus.last_value("switches.deck") is None
        bus.publish("switches.deck", 1)
        assert bus.last_value("switches.deck") == 1


@pytest.mark.unit
class TestRecordingOutput:
    async def test_write(self, output: RecordingOutput) -> None:
        await output.write("switches.deck.light", 1)
        assert output.values == {"switches.deck.light": 1}
        assert output.call_log[-1].method == "write"

    async def test_notify_then_cancel(self, output: RecordingOutput) -> None:
        await output.notify("notifications.engine.temp", "alarm", "hot")
        assert output.notifications == {"notifications.engine.temp": "alarm"}
        assert output.call_log[-1].message == "hot"
        await output.cancel_notification("notifications.engine.temp")
        assert output.notifications == {}
        assert [c.method for c in output.call_log] == ["notify", "cancel_notification"]


@pytest.mark.unit
class TestConsoleOutput:
    async def test_prints_every_call(self) -> None:
        buffer = StringIO()
        console_output = ConsoleOutput(Console(file=buffer, width=120))
        await console_output.write("switches.deck.light", 1)
        await console_output.notify("notifications.engine.temp", "alarm", "Scheduler ON event")
        await console_output.cancel_notification("notifications.engine.temp")
        text = buffer.getvalue()
        assert "write switches.deck.light = 1" in text
        assert "notify notifications.engine.temp state=alarm (Scheduler ON event)" in text
        assert "cancel notifications.engine.temp" in text


@pytest.mark.unit
class TestLogStatusSink:
    def test_keeps_latest_status(self, status_sink: LogStatusSink) -> None:
        status_sink.report_status("Standing by")
        status_sink.report_status("Operating: deck-light")
        assert status_sink.status == "Operating: deck-light"

    def test_collects_diagnostics(self, status_sink: LogStatusSink) -> None:
        status_sink.report_diagnostic("one")
        status_sink.report_diagnostic("two")
        assert status_sink.diagnostics == ["one", "two"]
