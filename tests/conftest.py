"""Shared pytest fixtures for the process-scheduler test suite."""

from __future__ import annotations

from typing import Any

import pytest

from process_scheduler.config import Settings, override_settings
from process_scheduler.ports import LogStatusSink, MemorySignalBus, RecordingOutput


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    settings = Settings(logging={"level": "debug", "format": "console"})
    override_settings(settings)
    return settings


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


@pytest.fixture
def bus() -> MemorySignalBus:
    return MemorySignalBus()


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def status_sink() -> LogStatusSink:
    return LogStatusSink()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def deck_light_config() -> dict[str, Any]:
    """The deck-light task: three 5 s cycles of the deck light."""
    return {
        "name": "deck-light",
        "controlPath": "switches.deck:1",
        "activities": [
            {"path": "switches.deck.light", "duration": 5, "delay": 0, "repeat": 3},
        ],
    }
