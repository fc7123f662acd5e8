"""process-scheduler — Exception hierarchy.

All exceptions raised by the scheduler inherit from SchedulerError so that
callers can catch the full family with a single except clause when needed.

Hierarchy:
    SchedulerError
    ├── ConfigurationError
    │   └── ControlPathError
    └── UnrecognizedTriggerValue
"""

from __future__ import annotations

from typing import Any


class SchedulerError(Exception):
    """Base exception for all process-scheduler errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(SchedulerError):
    """A task definition failed validation and must be dropped."""

    def __init__(self, reason: str, task_name: str | None = None) -> None:
        super().__init__(reason, context={"task": task_name, "reason": reason})
        self.reason = reason
        self.task_name = task_name


class ControlPathError(ConfigurationError):
    """A control path or activity path matched none of the grammar forms."""

    def __init__(self, path: str, reason: str = "invalid control path") -> None:
        super().__init__(f"{reason} ({path!r})")
        self.path = path
        self.context["path"] = path


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


class UnrecognizedTriggerValue(SchedulerError):
    """A trigger stream produced something other than 0 or 1."""

    def __init__(self, task_name: str, value: Any) -> None:
        super().__init__(
            f"Ignoring invalid trigger value {value!r} for task '{task_name}'",
            context={"task": task_name, "value": value},
        )
        self.task_name = task_name
        self.value = value
