"""TaskController — wires trigger streams, sequencers and host outputs.

For every task the controller owns three asyncio tasks:

1. **sequencer** — ``ActivitySequencer.run()`` consuming START/STOP commands.
2. **trigger pump** — iterates the task's TriggerStream and turns 1/0 into
   START/STOP, maintaining the active set used for status reporting.
3. **event pump** — drains the sequencer's ON/OFF events and calls the
   OutputPort (write / notify / cancel_notification).

Flow::

    SignalSource.observe(path)
        ↓
    TriggerStream  (0/1, deduplicated)
        ↓
    _on_trigger()  →  sequencer.submit(START | STOP)   +  active set / status
        ↓
    ActivitySequencer  →  ActivityEvent(ON | OFF)
        ↓
    _dispatch()    →  OutputPort

Tasks never share state; the active set is the only cross-task state and is
only touched from event-loop code with no suspension point between update
and status report.

Usage::

    controller = TaskController(tasks, source=bus, output=output, status=sink)
    await controller.start()
    ...
    await controller.stop()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Sequence

from process_scheduler.exceptions import UnrecognizedTriggerValue
from process_scheduler.logging import bind_task_context, get_logger
from process_scheduler.ports import LogStatusSink, OutputPort, SignalSource, StatusSink
from process_scheduler.tasks.models import (
    ActivityEvent,
    Command,
    EventKind,
    PathKind,
    Task,
)
from process_scheduler.tasks.sequencer import ActivitySequencer
from process_scheduler.tasks.trigger import TriggerStream

log = get_logger(__name__)

STATUS_STANDING_BY = "Standing by"
STATUS_NO_TASKS = "Stopped: configuration includes no valid tasks"
ON_MESSAGE_DEFAULT = "Scheduler ON event"
OFF_MESSAGE_DEFAULT = "Scheduler OFF event"


@dataclass
class TaskBinding:
    """Runtime objects owned by one task."""

    task: Task
    sequencer: ActivitySequencer
    stream: TriggerStream
    workers: list[asyncio.Task[None]] = field(default_factory=list)


class TaskController:
    """Runs every task's sequencer in response to its trigger."""

    def __init__(
        self,
        tasks: Sequence[Task],
        source: SignalSource,
        output: OutputPort,
        status: StatusSink | None = None,
        on_message: str = ON_MESSAGE_DEFAULT,
        off_message: str = OFF_MESSAGE_DEFAULT,
    ) -> None:
        self._tasks = list(tasks)
        names = [task.name for task in self._tasks]
        assert len(set(names)) == len(names), f"task names must be unique: {names}"
        self._source = source
        self._output = output
        self._status = status or LogStatusSink()
        self._on_message = on_message
        self._off_message = off_message

        # task name → runtime binding
        self._bindings: dict[str, TaskBinding] = {}

        # names of running tasks, in start order
        self._active: list[str] = []
        self._started = False

    # ---------------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------------

    async def start(self) -> None:
        """Create one sequencer per task and subscribe to every trigger."""
        if self._started:
            return
        self._started = True

        if not self._tasks:
            self._status.report_status(STATUS_NO_TASKS)
            log.info("controller_started", tasks=0)
            return

        for task in self._tasks:
            self._bind(task)

        if len(self._tasks) == 1:
            self._status.report_diagnostic(f"scheduling task '{self._tasks[0].name}'")
        else:
            self._status.report_diagnostic(f"scheduling {len(self._tasks)} tasks")
        self._status.report_status(STATUS_STANDING_BY)

        # Let every worker reach its first suspension point so trigger
        # subscriptions exist before start() returns.
        await asyncio.sleep(0)
        log.info("controller_started", tasks=len(self._tasks))

    async def stop(self) -> None:
        """Unsubscribe, stop every running sequence and flush its OFF events."""
        if not self._started:
            return
        self._started = False

        for binding in self._bindings.values():
            pump, sequencer_worker, event_worker = binding.workers
            pump.cancel()
            await asyncio.gather(pump, return_exceptions=True)
            # Synchronous STOP: emits the final OFF if an activity is on.
            binding.sequencer.handle(Command.STOP)
            sequencer_worker.cancel()
            await asyncio.gather(sequencer_worker, return_exceptions=True)
            await binding.sequencer.events.join()
            event_worker.cancel()
            await asyncio.gather(event_worker, return_exceptions=True)

        self._bindings.clear()
        self._active.clear()
        log.info("controller_stopped")

    # ---------------------------------------------------------------------------
    # Introspection
    # ---------------------------------------------------------------------------

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def active_tasks(self) -> list[str]:
        return list(self._active)

    @property
    def status(self) -> str:
        if not self._tasks:
            return STATUS_NO_TASKS
        if not self._active:
            return STATUS_STANDING_BY
        return f"Operating: {','.join(self._active)}"

    def sequencer(self, task_name: str) -> ActivitySequencer:
        return self._bindings[task_name].sequencer

    # ---------------------------------------------------------------------------
    # Wiring
    # ---------------------------------------------------------------------------

    def _bind(self, task: Task) -> None:
        sequencer = ActivitySequencer(task.name, task.activities)
        binding = TaskBinding(
            task=task,
            sequencer=sequencer,
            stream=TriggerStream(task.trigger, self._source),
        )
        binding.workers = [
            asyncio.create_task(self._pump_trigger(binding), name=f"trigger_{task.name}"),
            asyncio.create_task(sequencer.run(), name=f"sequencer_{task.name}"),
            asyncio.create_task(self._pump_events(binding), name=f"events_{task.name}"),
        ]
        self._bindings[task.name] = binding
        log.debug(
            "task_bound",
            task=task.name,
            trigger=task.trigger.path,
            kind=task.trigger.kind.value,
            activities=len(task.activities),
        )

    async def _pump_trigger(self, binding: TaskBinding) -> None:
        bind_task_context(binding.task.name)
        try:
            async for state in binding.stream:
                self._on_trigger(binding, state)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            name = binding.task.name
            log.error(
                "trigger_stream_failed",
                task=name,
                path=binding.task.trigger.path,
                error=str(exc),
            )
            self._status.report_diagnostic(
                f"trigger stream for task '{name}' failed ({exc}); stopping task"
            )
            if name in self._active:
                self._active.remove(name)
            self._status.report_status(self.status)
            binding.sequencer.submit(Command.STOP)

    async def _pump_events(self, binding: TaskBinding) -> None:
        bind_task_context(binding.task.name)
        while True:
            event = await binding.sequencer.events.get()
            try:
                await self._dispatch(event)
            finally:
                binding.sequencer.events.task_done()

    # ---------------------------------------------------------------------------
    # Trigger handling
    # ---------------------------------------------------------------------------

    def _on_trigger(self, binding: TaskBinding, state: Any) -> None:
        """Translate one trigger value into a sequencer command."""
        name = binding.task.name
        log.debug("trigger_received", task=name, state=state)
        if state == 1:
            if name not in self._active:
                self._active.append(name)
            self._status.report_status(self.status)
            log.info("task_starting", task=name)
            binding.sequencer.submit(Command.START)
        elif state == 0:
            if name in self._active:
                self._active.remove(name)
            self._status.report_status(self.status)
            log.info("task_stopping", task=name)
            binding.sequencer.submit(Command.STOP)
        else:
            exc = UnrecognizedTriggerValue(name, state)
            self._status.report_diagnostic(exc.message)
            log.warning("trigger_value_ignored", task=name, value=repr(state))

    # ---------------------------------------------------------------------------
    # Output dispatch
    # ---------------------------------------------------------------------------

    async def _dispatch(self, event: ActivityEvent) -> None:
        """Turn one ON/OFF event into the matching output call.

        Output failures are logged and never reach the sequencer.
        """
        activity = event.activity
        notification = activity.kind is PathKind.NOTIFICATION
        try:
            if event.kind is EventKind.ON:
                if notification:
                    self._status.report_diagnostic(
                        f"starting activity '{activity.name}' "
                        f"(issuing '{activity.on_value}' notification on '{activity.path}')"
                    )
                    await self._output.notify(activity.path, activity.on_value, self._on_message)
                else:
                    self._status.report_diagnostic(
                        f"starting activity '{activity.name}' "
                        f"(setting '{activity.path}' to '{activity.on_value}')"
                    )
                    await self._output.write(activity.path, activity.on_value)
            elif notification and activity.off_value is not None:
                self._status.report_diagnostic(
                    f"stopping activity '{activity.name}' "
                    f"(issuing '{activity.off_value}' notification on '{activity.path}')"
                )
                await self._output.notify(activity.path, activity.off_value, self._off_message)
            elif notification:
                self._status.report_diagnostic(
                    f"stopping activity '{activity.name}' "
                    f"(cancelling notification on '{activity.path}')"
                )
                await self._output.cancel_notification(activity.path)
            else:
                self._status.report_diagnostic(
                    f"stopping activity '{activity.name}' "
                    f"(setting '{activity.path}' to '{activity.off_value}')"
                )
                await self._output.write(activity.path, activity.off_value)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error(
                "output_failed",
                activity=activity.name,
                event_kind=event.kind.value,
                path=activity.path,
                error=str(exc),
            )
