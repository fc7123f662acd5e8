"""process-scheduler — Trigger-driven timed activity sequences.

A declarative list of *tasks* is turned into running timed sequences.  Each
task watches one control path; when that path becomes true the task's
activities switch their outputs on and off in order, and when it becomes
false the running sequence is cancelled cleanly.

Layers (bottom to top):
    1. Tasks     — path grammar, normalizer, trigger stream, sequencer, controller
    2. Ports     — signal source, output, status sinks (host collaborators)
    3. CLI       — configuration validation, schema export, stdin-driven runner
"""

__version__ = "0.1.0"
__author__ = "process-scheduler contributors"
__license__ = "Apache-2.0"

PLUGIN_ID = "process-scheduler"
PLUGIN_NAME = "pdjr-skplugin-process-scheduler"
PLUGIN_DESCRIPTION = "Simple process scheduling"

from process_scheduler.tasks.models import Activity, Task, TriggerDescriptor

__all__ = [
    "__version__",
    "PLUGIN_ID",
    "PLUGIN_NAME",
    "PLUGIN_DESCRIPTION",
    "Activity",
    "Task",
    "TriggerDescriptor",
]
