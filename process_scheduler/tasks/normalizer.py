"""ConfigNormalizer — raw task definitions → validated Task records.

Each raw task is validated in isolation.  Any failure inside a task (missing
name, bad control path, empty activity list, one bad activity) drops the
whole task and is reported to the diagnostics callback; the remaining tasks
are still returned.  ``normalize_tasks`` never raises for bad input.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from pydantic import ValidationError

from process_scheduler.exceptions import ConfigurationError
from process_scheduler.logging import get_logger
from process_scheduler.tasks.models import Activity, Task
from process_scheduler.tasks.paths import parse_activity_path, parse_control_path
from process_scheduler.tasks.schema import ActivityConfig, TaskConfig

log = get_logger(__name__)

ACTIVITY_NAME_DEFAULT = "activity"

DiagnosticCallback = Callable[[str], None]


def activity_name(task_name: str, label: str | None, index: int) -> str:
    """Build the diagnostic name ``task[label-index]`` for an activity."""
    return f"{task_name}[{label if label is not None else ACTIVITY_NAME_DEFAULT}-{index}]"


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def _raw_task_name(raw: Any) -> str | None:
    if isinstance(raw, dict):
        name = raw.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def _build_activity(task_name: str, config: ActivityConfig, index: int) -> Activity:
    path, on_value, off_value = parse_activity_path(config.path)
    return Activity(
        name=activity_name(task_name, config.name, index),
        path=path,
        on_value=on_value,
        off_value=off_value,
        duration=float(config.duration),
        delay=float(config.delay),
        repeat=config.repeat,
    )


def normalize_task(raw: Any) -> Task:
    """Validate one raw task definition.

    Raises:
        ConfigurationError: the task (or one of its activities) is invalid.
    """
    name = _raw_task_name(raw)
    if not isinstance(raw, dict):
        raise ConfigurationError("task definition is not a mapping", task_name=name)
    try:
        config = TaskConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(_describe_validation_error(exc), task_name=name) from exc

    try:
        trigger = parse_control_path(config.control_path)
        activities = tuple(
            _build_activity(config.name, activity, index)
            for index, activity in enumerate(config.activities)
        )
    except ConfigurationError as exc:
        exc.task_name = config.name
        exc.context["task"] = config.name
        raise

    return Task(
        name=config.name,
        control_path=config.control_path,
        trigger=trigger,
        activities=activities,
    )


def normalize_tasks(
    raw_tasks: Iterable[Any] | None,
    diagnostics: DiagnosticCallback | None = None,
) -> list[Task]:
    """Return the valid tasks from *raw_tasks*, dropping invalid ones.

    Each dropped task produces one diagnostic message naming the task and
    the reason.  The result may be empty.
    """
    valid: list[Task] = []
    seen: set[str] = set()
    for position, raw in enumerate(raw_tasks or []):
        try:
            task = normalize_task(raw)
            if task.name in seen:
                raise ConfigurationError("duplicate task name", task_name=task.name)
            seen.add(task.name)
            valid.append(task)
        except ConfigurationError as exc:
            label = exc.task_name or f"<task #{position}>"
            message = f"dropping task '{label}' with invalid configuration ({exc.reason})"
            log.warning("task_dropped", task=label, reason=exc.reason)
            if diagnostics is not None:
                diagnostics(message)
    log.debug("tasks_normalized", valid=len(valid), tasks=[t.to_dict() for t in valid])
    return valid
