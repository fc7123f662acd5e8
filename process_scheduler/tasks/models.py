"""Task data models.

All task state is represented with frozen dataclasses: a normalized Task is
built once at startup and never mutated afterwards.

Key classes
-----------
PathKind            — SWITCH (raw scalar) or NOTIFICATION (record with ``state``)
TriggerDescriptor   — *what* starts and stops a task
Activity            — one timed on/off step (delay, duration, repeat)
Task                — a named trigger bound to an ordered activity list
Command             — START / STOP sent to a sequencer
EventKind           — ON / OFF emitted by a sequencer
ActivityEvent       — an ON or OFF for one activity
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

NOTIFICATION_PREFIX = "notifications."

ScalarValue = str | int | float
"""On/off values carried by paths: a state string or a switch number."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PathKind(str, Enum):
    """How a path is read (triggers) or driven (activities)."""

    SWITCH = "switch"
    NOTIFICATION = "notification"

    @classmethod
    def of(cls, path: str) -> PathKind:
        return cls.NOTIFICATION if path.startswith(NOTIFICATION_PREFIX) else cls.SWITCH


class Command(str, Enum):
    """Commands accepted by an ActivitySequencer."""

    START = "start"
    STOP = "stop"


class EventKind(str, Enum):
    """Events emitted by an ActivitySequencer."""

    ON = "on"
    OFF = "off"


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TriggerDescriptor:
    """Normalized form of a task's control path.

    ``on_value`` is ``None`` only for notification triggers, where it means
    "any non-null notification value".
    """

    kind: PathKind
    path: str
    on_value: ScalarValue | None = None


@dataclass(frozen=True)
class Activity:
    """One timed on/off step of a task.

    ``off_value`` is ``None`` only for notification activities, where it
    means "cancel the notification" rather than "set an off state".
    ``repeat == 0`` repeats forever.
    """

    name: str = field(compare=False)
    path: str
    on_value: ScalarValue
    off_value: ScalarValue | None
    duration: float
    delay: float = 0.0
    repeat: int = 1

    @property
    def kind(self) -> PathKind:
        return PathKind.of(self.path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "kind": self.kind.value,
            "on_value": self.on_value,
            "off_value": self.off_value,
            "duration": self.duration,
            "delay": self.delay,
            "repeat": self.repeat,
        }


@dataclass(frozen=True)
class Task:
    """A named trigger bound to an ordered, non-empty activity list."""

    name: str
    control_path: str
    trigger: TriggerDescriptor
    activities: tuple[Activity, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "control_path": self.control_path,
            "trigger": {
                "kind": self.trigger.kind.value,
                "path": self.trigger.path,
                "on_value": self.trigger.on_value,
            },
            "activities": [a.to_dict() for a in self.activities],
        }


@dataclass(frozen=True)
class ActivityEvent:
    """An ON or OFF emitted by a sequencer for one activity."""

    kind: EventKind
    activity: Activity
