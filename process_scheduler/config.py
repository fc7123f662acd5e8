"""process-scheduler — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. Environment variables prefixed with PROCESS_SCHEDULER_
    3. System config: /etc/process-scheduler/config.yaml
    4. User config:   ~/.process-scheduler/config.yaml
    5. An explicit file passed to ``Settings.load()``

Top-level keys from later files replace those from earlier ones.

``tasks`` is kept as raw dicts: each task is validated on its own by the
normalizer so that one bad task never prevents the others from loading.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "console"] = "console"
    file: Path | None = None


class SchedulerConfig(BaseModel):
    """Runtime behaviour of the task controller."""

    on_message: str = Field(
        default="Scheduler ON event",
        description="Message attached to notifications raised when an activity turns on.",
    )
    off_message: str = Field(
        default="Scheduler OFF event",
        description="Message attached to notifications raised when an activity turns off.",
    )
    linger_seconds: Annotated[float, Field(ge=0)] = Field(
        default=0.0,
        description="Seconds the stdin runner keeps tasks alive after its input ends.",
    )


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PROCESS_SCHEDULER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    tasks: list[Any] = Field(
        default_factory=list,
        description="Raw task definitions; validated per task by the normalizer.",
    )

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from file + environment variables."""
        data: dict[str, Any] = {}

        candidates = [
            Path("/etc/process-scheduler/config.yaml"),
            Path.home() / ".process-scheduler" / "config.yaml",
        ]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml

                with path.open() as f:
                    loaded = yaml.safe_load(f) or {}
                    data.update(loaded)

        return cls(**data)


# Module-level singleton, replaced by ``Settings.load()`` at startup.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings) -> None:
    """Replace the module-level singleton. Used in tests."""
    global _settings
    _settings = settings
