"""Raw configuration schema — Pydantic models for task definitions.

These models describe the configuration exactly as a user writes it::

    tasks:
      - name: deck-light
        controlPath: switches.deck:1
        activities:
          - path: switches.deck.light
            duration: 5
            repeat: 3

They are used in two places:
  - the normalizer validates each raw task dict with ``TaskConfig`` so a
    single bad task can be dropped without touching its neighbours;
  - ``ScheduleConfig.model_json_schema()`` is the schema published by
    ``process-scheduler config schema``.

Path grammar is *not* checked here; it belongs to ``tasks.paths``.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt


class ActivityConfig(BaseModel):
    """One activity as written in the configuration file."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, title="Activity name")
    path: Annotated[str, Field(min_length=1)] = Field(title="Process control path")
    duration: Annotated[float, Field(gt=0)] = Field(title="Activity duration in seconds")
    delay: Annotated[float, Field(ge=0)] = Field(
        default=0, title="Delay start by this many seconds"
    )
    repeat: Annotated[StrictInt, Field(ge=0)] = Field(
        default=1, title="How many times to repeat (0 says forever)"
    )


class TaskConfig(BaseModel):
    """One task as written in the configuration file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Annotated[str, Field(min_length=1)] = Field(title="Schedule task name")
    control_path: Annotated[str, Field(min_length=1)] = Field(
        title="Path which starts and stops this task",
        validation_alias=AliasChoices("controlPath", "controlpath", "control_path"),
        serialization_alias="controlPath",
    )
    activities: Annotated[list[ActivityConfig], Field(min_length=1)] = Field(
        title="Activities making up the schedule task"
    )


class ScheduleConfig(BaseModel):
    """Top-level configuration block."""

    tasks: list[TaskConfig] = Field(default_factory=list, title="Schedule tasks")
