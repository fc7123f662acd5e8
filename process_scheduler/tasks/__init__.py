"""process-scheduler — Task subsystem.

Package structure
-----------------
tasks/
  models.py      — Task, Activity, TriggerDescriptor, Command, ActivityEvent
  paths.py       — control-path and activity-path grammar (parse + format)
  schema.py      — Pydantic models of the raw configuration
  normalizer.py  — raw task dicts → validated Task records
  trigger.py     — TriggerStream: observed values → deduplicated 0/1
  sequencer.py   — ActivitySequencer: the per-task timed state machine
  controller.py  — TaskController: triggers → commands, events → outputs
"""

from process_scheduler.tasks.models import (
    Activity,
    ActivityEvent,
    Command,
    EventKind,
    PathKind,
    Task,
    TriggerDescriptor,
)
from process_scheduler.tasks.controller import TaskController
from process_scheduler.tasks.normalizer import normalize_task, normalize_tasks
from process_scheduler.tasks.paths import (
    format_activity_path,
    format_control_path,
    parse_activity_path,
    parse_control_path,
)
from process_scheduler.tasks.sequencer import ActivitySequencer, Phase, SequencerState
from process_scheduler.tasks.trigger import TriggerStream, evaluate_trigger

__all__ = [
    "Activity",
    "ActivityEvent",
    "ActivitySequencer",
    "Command",
    "EventKind",
    "PathKind",
    "Phase",
    "SequencerState",
    "Task",
    "TaskController",
    "TriggerDescriptor",
    "TriggerStream",
    "evaluate_trigger",
    "format_activity_path",
    "format_control_path",
    "normalize_task",
    "normalize_tasks",
    "parse_activity_path",
    "parse_control_path",
]
