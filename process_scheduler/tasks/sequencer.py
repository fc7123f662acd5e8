"""ActivitySequencer — the per-task timed state machine.

State machine::

    IDLE ──START──► DELAYING(i, r) ──delay elapsed──► ACTIVE(i, r)
      ▲         └──────────(delay == 0)──────────────►   │
      │                                                  │ duration elapsed (emit OFF)
      │                                                  ▼
      │               repeat == 0 or r + 1 < repeat → DELAYING/ACTIVE(i, r + 1)
      │               else i + 1 < len(activities)  → DELAYING/ACTIVE(i + 1, 0)
      └──────────────────────────────────────────── else IDLE (run complete)

    STOP in DELAYING → IDLE, nothing emitted
    STOP in ACTIVE   → emit exactly one OFF, IDLE
    STOP in IDLE     → no-op
    START outside IDLE → no-op

Timers are event-loop ``call_later`` handles.  Cancelling one is synchronous,
so once ``handle(Command.STOP)`` returns no further ON/OFF from the cancelled
run can be emitted.  Events are put on ``events`` without suspending, which
keeps each transition atomic.

All timings and counts are validated by the normalizer; a violation here is
a programming error and fails an assertion.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from process_scheduler.logging import get_logger
from process_scheduler.tasks.models import Activity, ActivityEvent, Command, EventKind

log = get_logger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    DELAYING = "delaying"
    ACTIVE = "active"


@dataclass(frozen=True)
class SequencerState:
    """Where a sequencer is: phase, activity index and completed cycles."""

    phase: Phase = Phase.IDLE
    index: int = 0
    repeat_count: int = 0


IDLE = SequencerState()


class ActivitySequencer:
    """Runs one task's activity list in response to START/STOP commands.

    The instance is reused for every run of its task.  Commands are read from
    ``commands`` by :meth:`run`; ON/OFF events are written to ``events`` in
    the order they occur.
    """

    def __init__(
        self,
        task_name: str,
        activities: Sequence[Activity],
        events: asyncio.Queue[ActivityEvent] | None = None,
    ) -> None:
        assert activities, "a sequencer needs at least one activity"
        for activity in activities:
            assert activity.duration > 0, f"{activity.name}: duration must be positive"
            assert activity.delay >= 0, f"{activity.name}: delay must not be negative"
            assert activity.repeat >= 0, f"{activity.name}: repeat must not be negative"
        self._task_name = task_name
        self._activities = tuple(activities)
        self.commands: asyncio.Queue[Command] = asyncio.Queue()
        self.events: asyncio.Queue[ActivityEvent] = events if events is not None else asyncio.Queue()
        self._state = IDLE
        self._timer: asyncio.TimerHandle | None = None
        self.runs_completed = 0

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state.phase is Phase.IDLE

    @property
    def current_activity(self) -> Activity | None:
        if self.is_idle:
            return None
        return self._activities[self._state.index]

    def submit(self, command: Command) -> None:
        """Queue *command* for :meth:`run`."""
        self.commands.put_nowait(command)

    async def run(self) -> None:
        """Consume commands until cancelled.  Cancelling stops any active run."""
        try:
            while True:
                command = await self.commands.get()
                self.handle(command)
        finally:
            self.handle(Command.STOP)

    def handle(self, command: Command) -> None:
        """Apply *command* immediately.  Must be called from the event loop."""
        if command is Command.START:
            self._start()
        elif command is Command.STOP:
            self._stop()
        else:
            raise AssertionError(f"unknown sequencer command: {command!r}")

    # ---------------------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------------------

    def _start(self) -> None:
        if not self.is_idle:
            log.debug("sequencer_start_ignored", task=self._task_name, phase=self._state.phase.value)
            return
        log.debug("sequencer_started", task=self._task_name)
        self._enter(0, 0)

    def _stop(self) -> None:
        if self.is_idle:
            return
        state = self._state
        self._cancel_timer()
        self._state = IDLE
        if state.phase is Phase.ACTIVE:
            self._emit(EventKind.OFF, self._activities[state.index])
        log.debug(
            "sequencer_stopped",
            task=self._task_name,
            phase=state.phase.value,
            index=state.index,
            repeat_count=state.repeat_count,
        )

    # ---------------------------------------------------------------------------
    # Transitions
    # ---------------------------------------------------------------------------

    def _enter(self, index: int, repeat_count: int) -> None:
        """Begin cycle *repeat_count* of activity *index*."""
        activity = self._activities[index]
        if activity.delay > 0:
            self._state = SequencerState(Phase.DELAYING, index, repeat_count)
            self._arm(activity.delay, self._on_delay_elapsed)
        else:
            self._activate(index, repeat_count)

    def _activate(self, index: int, repeat_count: int) -> None:
        activity = self._activities[index]
        self._state = SequencerState(Phase.ACTIVE, index, repeat_count)
        self._emit(EventKind.ON, activity)
        self._arm(activity.duration, self._on_duration_elapsed)

    def _on_delay_elapsed(self) -> None:
        self._timer = None
        state = self._state
        assert state.phase is Phase.DELAYING, f"delay timer fired in {state.phase.value}"
        self._activate(state.index, state.repeat_count)

    def _on_duration_elapsed(self) -> None:
        self._timer = None
        state = self._state
        assert state.phase is Phase.ACTIVE, f"duration timer fired in {state.phase.value}"
        activity = self._activities[state.index]
        self._emit(EventKind.OFF, activity)

        next_count = state.repeat_count + 1
        if activity.repeat == 0 or next_count < activity.repeat:
            self._enter(state.index, next_count)
        elif state.index + 1 < len(self._activities):
            self._enter(state.index + 1, 0)
        else:
            self._state = IDLE
            self.runs_completed += 1
            log.debug("sequencer_completed", task=self._task_name)

    # ---------------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------------

    def _arm(self, seconds: float, callback: Callable[[], None]) -> None:
        assert self._timer is None, "a sequencer holds at most one pending timer"
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(seconds, callback)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _emit(self, kind: EventKind, activity: Activity) -> None:
        self.events.put_nowait(ActivityEvent(kind, activity))
