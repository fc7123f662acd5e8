"""Control-path grammar.

A *control path* is a host path optionally followed by ``:``-separated
values.  Two grammars are recognised, each tried in priority order.

Task control paths (``parse_control_path``)::

    notifications.<rest>:<state>   Notification, fires when state == <state>
    notifications.<rest>           Notification, fires on any non-null value
    <path>:<value>                 Switch, fires when value == <value>
    <path>                         Switch, fires when value == 1

Activity paths (``parse_activity_path``)::

    notifications.<rest>:<on>:<off>   notify <on>, then notify <off>
    notifications.<rest>:<on>         notify <on>, then cancel
    notifications.<rest>              notify 'normal', then cancel
    <path>:<on>:<off>                 write <on>, then write <off>
    <path>                            write 1, then write 0

Switch values that read as numbers are coerced (``"1"`` → ``1``) so that they
compare equal to the numeric values a host reports.  Notification states are
kept as strings.
"""

from __future__ import annotations

import re

from process_scheduler.exceptions import ControlPathError
from process_scheduler.tasks.models import (
    NOTIFICATION_PREFIX,
    Activity,
    PathKind,
    ScalarValue,
    TriggerDescriptor,
)

_PATH = r"[A-Za-z0-9_\-]+(?:\.[A-Za-z0-9_\-]+)*"
_NOTIFICATION_PATH = re.escape(NOTIFICATION_PREFIX) + _PATH
_VALUE = r"[^:]+"

_CONTROL_FORMS: list[tuple[re.Pattern[str], PathKind]] = [
    (re.compile(rf"^({_NOTIFICATION_PATH}):({_VALUE})$"), PathKind.NOTIFICATION),
    (re.compile(rf"^({_NOTIFICATION_PATH})$"), PathKind.NOTIFICATION),
    (re.compile(rf"^({_PATH}):({_VALUE})$"), PathKind.SWITCH),
    (re.compile(rf"^({_PATH})$"), PathKind.SWITCH),
]

_ACTIVITY_FORMS: list[re.Pattern[str]] = [
    re.compile(rf"^({_NOTIFICATION_PATH}):({_VALUE}):({_VALUE})$"),
    re.compile(rf"^({_NOTIFICATION_PATH}):({_VALUE})$"),
    re.compile(rf"^({_NOTIFICATION_PATH})$"),
    re.compile(rf"^({_PATH}):({_VALUE}):({_VALUE})$"),
    re.compile(rf"^({_PATH})$"),
]

DEFAULT_SWITCH_ON: int = 1
DEFAULT_SWITCH_OFF: int = 0
DEFAULT_NOTIFICATION_STATE = "normal"

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")


def coerce_value(raw: str) -> ScalarValue:
    """Return *raw* as an int or float if it reads as one, else unchanged."""
    if _INT_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)
    return raw


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_control_path(control_path: str) -> TriggerDescriptor:
    """Parse a task control path into a TriggerDescriptor.

    Raises:
        ControlPathError: *control_path* matches none of the four forms.
    """
    text = (control_path or "").strip()
    for pattern, kind in _CONTROL_FORMS:
        match = pattern.match(text)
        if match is None:
            continue
        path = match.group(1)
        raw_value = match.group(2) if pattern.groups == 2 else None
        if kind is PathKind.NOTIFICATION:
            return TriggerDescriptor(kind, path, raw_value)
        on_value = coerce_value(raw_value) if raw_value is not None else DEFAULT_SWITCH_ON
        return TriggerDescriptor(kind, path, on_value)
    raise ControlPathError(control_path, "invalid 'controlPath' property")


def parse_activity_path(
    activity_path: str,
) -> tuple[str, ScalarValue, ScalarValue | None]:
    """Parse an activity path into ``(path, on_value, off_value)``.

    Raises:
        ControlPathError: *activity_path* matches none of the five forms.
    """
    text = (activity_path or "").strip()
    for pattern in _ACTIVITY_FORMS:
        match = pattern.match(text)
        if match is None:
            continue
        path, *values = match.groups()
        if PathKind.of(path) is PathKind.NOTIFICATION:
            if not values:
                return path, DEFAULT_NOTIFICATION_STATE, None
            if len(values) == 1:
                return path, values[0], None
            return path, values[0], values[1]
        if not values:
            return path, DEFAULT_SWITCH_ON, DEFAULT_SWITCH_OFF
        return path, coerce_value(values[0]), coerce_value(values[1])
    raise ControlPathError(activity_path, "invalid activity control 'path' property")


# ---------------------------------------------------------------------------
# Formatting (inverse of parsing)
# ---------------------------------------------------------------------------


def format_control_path(trigger: TriggerDescriptor) -> str:
    """Serialise *trigger* back to a control path that re-parses to it."""
    if trigger.on_value is None:
        return trigger.path
    return f"{trigger.path}:{trigger.on_value}"


def format_activity_path(activity: Activity) -> str:
    """Serialise *activity*'s path and values back to an activity path."""
    if activity.off_value is None:
        return f"{activity.path}:{activity.on_value}"
    return f"{activity.path}:{activity.on_value}:{activity.off_value}"
