"""Host collaborator ports — abstract contracts and in-process implementations.

Architecture:
  - :class:`SignalSource`, :class:`OutputPort` and :class:`StatusSink` are the
    abstract contracts.  The task layer talks to these interfaces only.
  - :class:`MemorySignalBus` is a publish/observe fan-out used by the CLI
    runner and by tests.
  - :class:`RecordingOutput` records every output call in ``call_log`` so
    tests can assert on exactly which operations were performed.
  - :class:`ConsoleOutput` prints output calls with ``rich``.
  - :class:`LogStatusSink` routes status and diagnostic text to structlog.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator

from rich.console import Console
from rich.markup import escape

from process_scheduler.logging import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Abstract interfaces
# ---------------------------------------------------------------------------


class SignalSource(ABC):
    """Stream of values observed at a host path."""

    @abstractmethod
    def observe(self, path: str) -> AsyncIterator[Any]:
        """Return an infinite async iterator of values observed at *path*.

        Every call opens an independent subscription.
        """


class OutputPort(ABC):
    """Side effects requested by running activities.

    Calls are fire-and-forget from the scheduler's point of view: an
    implementation may raise, but the error is logged and never changes the
    sequencing of the task that caused it.
    """

    @abstractmethod
    async def write(self, path: str, value: Any) -> None:
        """Set *path* to *value*."""

    @abstractmethod
    async def notify(self, path: str, state: Any, message: str = "") -> None:
        """Raise (or update) a notification at *path* with *state*."""

    @abstractmethod
    async def cancel_notification(self, path: str) -> None:
        """Clear the notification at *path*."""


class StatusSink(ABC):
    """Human-readable status and diagnostic output."""

    @abstractmethod
    def report_status(self, text: str) -> None:
        """Replace the current status line with *text*."""

    @abstractmethod
    def report_diagnostic(self, text: str) -> None:
        """Record a debug/diagnostic message."""


# ---------------------------------------------------------------------------
# In-memory signal bus
# ---------------------------------------------------------------------------


class MemorySignalBus(SignalSource):
    """Publish/observe bus held entirely in memory.

    Each ``observe(path)`` subscription receives every value published to
    *path* after it subscribed, preceded by the last value published before
    it (if any).  Subscriptions are dropped when their iterator is closed.

    Usage::

        bus = MemorySignalBus()
        bus.publish("switches.deck", 1)
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[Any]]] = {}
        self._last: dict[str, Any] = {}

    def publish(self, path: str, value: Any) -> None:
        self._last[path] = value
        for queue in self._subscribers.get(path, []):
            queue.put_nowait(value)

    def last_value(self, path: str) -> Any:
        return self._last.get(path)

    def subscriber_count(self, path: str) -> int:
        return len(self._subscribers.get(path, []))

    async def observe(self, path: str) -> AsyncIterator[Any]:
        queue: asyncio.Queue[Any] = asyncio.Queue()
        if path in self._last:
            queue.put_nowait(self._last[path])
        self._subscribers.setdefault(path, []).append(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            subscribers = self._subscribers.get(path, [])
            if queue in subscribers:
                subscribers.remove(queue)


# ---------------------------------------------------------------------------
# Output implementations
# ---------------------------------------------------------------------------


@dataclass
class OutputCall:
    """A recorded output call for test assertions."""

    method: str
    path: str
    value: Any = None
    message: str = ""


class RecordingOutput(OutputPort):
    """Deterministic in-memory output for tests and dry runs.

    ``values`` mirrors the last value written per path and ``notifications``
    the live notification state per path.

    Usage::

        output = RecordingOutput()
        await output.write("switches.deck.light", 1)
        assert output.values["switches.deck.light"] == 1
        assert output.call_log[-1].method == "write"
    """

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.notifications: dict[str, Any] = {}
        self.call_log: list[OutputCall] = []

    async def write(self, path: str, value: Any) -> None:
        self.call_log.append(OutputCall("write", path, value))
        self.values[path] = value

    async def notify(self, path: str, state: Any, message: str = "") -> None:
        self.call_log.append(OutputCall("notify", path, state, message))
        self.notifications[path] = state

    async def cancel_notification(self, path: str) -> None:
        self.call_log.append(OutputCall("cancel_notification", path))
        self.notifications.pop(path, None)


class ConsoleOutput(OutputPort):
    """Prints every output call to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    async def write(self, path: str, value: Any) -> None:
        self._console.print(f"[cyan]write[/cyan] {escape(path)} = [bold]{escape(str(value))}[/bold]")

    async def notify(self, path: str, state: Any, message: str = "") -> None:
        suffix = f" ({escape(message)})" if message else ""
        self._console.print(
            f"[magenta]notify[/magenta] {escape(path)} state=[bold]{escape(str(state))}[/bold]{suffix}"
        )

    async def cancel_notification(self, path: str) -> None:
        self._console.print(f"[yellow]cancel[/yellow] {escape(path)}")


# ---------------------------------------------------------------------------
# Status sink
# ---------------------------------------------------------------------------


class LogStatusSink(StatusSink):
    """Keeps the latest status and logs everything through structlog."""

    def __init__(self) -> None:
        self.status: str = ""
        self.diagnostics: list[str] = []

    def report_status(self, text: str) -> None:
        self.status = text
        log.info("status", status=text)

    def report_diagnostic(self, text: str) -> None:
        self.diagnostics.append(text)
        log.debug("diagnostic", message=text)
