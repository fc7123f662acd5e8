"""Unit tests — tasks/paths.py (control-path and activity-path grammar)."""

from __future__ import annotations

import pytest

from process_scheduler.exceptions import ConfigurationError, ControlPathError
from process_scheduler.tasks.models import Activity, PathKind, TriggerDescriptor
from process_scheduler.tasks.paths import (
    coerce_value,
    format_activity_path,
    format_control_path,
    parse_activity_path,
    parse_control_path,
)


@pytest.mark.unit
class TestCoerceValue:
    def test_integer(self) -> None:
        assert coerce_value("1") == 1
        assert isinstance(coerce_value("1"), int)

    def test_exponent_without_point(self) -> None:
        assert coerce_value("1e-07") == 1e-07
        assert coerce_value("1e+16") == 1e16
        assert isinstance(coerce_value("1e5"), float)

    def test_negative_integer(self) -> None:
        assert coerce_value("-3") == -3

    def test_float(self) -> None:
        assert coerce_value("2.5") == 2.5

    def test_text_is_unchanged(self) -> None:
        assert coerce_value("on") == "on"

    def test_mixed_text_is_unchanged(self) -> None:
        assert coerce_value("1a") == "1a"


@pytest.mark.unit
class TestParseControlPath:
    def test_notification_with_state(self) -> None:
        trigger = parse_control_path("notifications.engine.temp:alarm")
        assert trigger == TriggerDescriptor(PathKind.NOTIFICATION, "notifications.engine.temp", "alarm")

    def test_notification_without_state(self) -> None:
        trigger = parse_control_path("notifications.engine.temp")
        assert trigger.kind is PathKind.NOTIFICATION
        assert trigger.path == "notifications.engine.temp"
        assert trigger.on_value is None

    def test_notification_state_stays_text(self) -> None:
        trigger = parse_control_path("notifications.mob:1")
        assert trigger.on_value == "1"

    def test_switch_with_value(self) -> None:
        trigger = parse_control_path("switches.deck:1")
        assert trigger == TriggerDescriptor(PathKind.SWITCH, "switches.deck", 1)

    def test_switch_with_text_value(self) -> None:
        trigger = parse_control_path("navigation.state:moored")
        assert trigger.kind is PathKind.SWITCH
        assert trigger.on_value == "moored"

    def test_bare_switch_defaults_to_one(self) -> None:
        trigger = parse_control_path("switches.deck")
        assert trigger == TriggerDescriptor(PathKind.SWITCH, "switches.deck", 1)

    def test_surrounding_whitespace_is_ignored(self) -> None:
        assert parse_control_path("  switches.deck  ").path == "switches.deck"

    @pytest.mark.parametrize(
        "bad",
        ["???", "", "switches..deck", "switches.deck:", ":1", "a:b:c", "switches deck"],
    )
    def test_malformed_paths_raise(self, bad: str) -> None:
        with pytest.raises(ControlPathError) as exc_info:
            parse_control_path(bad)
        assert "controlPath" in exc_info.value.reason
        assert exc_info.value.path == bad

    def test_error_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_control_path("???")


@pytest.mark.unit
class TestParseActivityPath:
    def test_notification_on_and_off(self) -> None:
        assert parse_activity_path("notifications.engine.temp:alarm:normal") == (
            "notifications.engine.temp",
            "alarm",
            "normal",
        )

    def test_notification_on_only_cancels(self) -> None:
        assert parse_activity_path("notifications.engine.temp:alarm") == (
            "notifications.engine.temp",
            "alarm",
            None,
        )

    def test_bare_notification_defaults_to_normal(self) -> None:
        assert parse_activity_path("notifications.engine.temp") == (
            "notifications.engine.temp",
            "normal",
            None,
        )

    def test_switch_on_and_off(self) -> None:
        assert parse_activity_path("switches.deck.light:100:0") == ("switches.deck.light", 100, 0)

    def test_switch_text_values(self) -> None:
        assert parse_activity_path("steering.mode:auto:standby") == (
            "steering.mode",
            "auto",
            "standby",
        )

    def test_bare_switch_defaults_to_one_and_zero(self) -> None:
        assert parse_activity_path("switches.deck.light") == ("switches.deck.light", 1, 0)

    def test_switch_with_single_value_is_rejected(self) -> None:
        with pytest.raises(ControlPathError) as exc_info:
            parse_activity_path("switches.deck.light:1")
        assert "activity control 'path'" in exc_info.value.reason

    @pytest.mark.parametrize("bad", ["", "???", "a:b:c:d", "notifications.x:a:b:c"])
    def test_malformed_paths_raise(self, bad: str) -> None:
        with pytest.raises(ControlPathError):
            parse_activity_path(bad)


@pytest.mark.unit
class TestFormatting:
    @pytest.mark.parametrize(
        "control_path",
        [
            "notifications.engine.temp:alarm",
            "notifications.engine.temp",
            "switches.deck:1",
            "switches.x:0.0000001",
            "switches.x:10000000000000000.0",
            "navigation.state:moored",
        ],
    )
    def test_control_path_reparses_to_same_trigger(self, control_path: str) -> None:
        trigger = parse_control_path(control_path)
        assert parse_control_path(format_control_path(trigger)) == trigger

    def test_bare_switch_formats_with_explicit_value(self) -> None:
        trigger = parse_control_path("switches.deck")
        assert format_control_path(trigger) == "switches.deck:1"

    @pytest.mark.parametrize(
        "activity_path",
        [
            "notifications.engine.temp:alarm:normal",
            "notifications.engine.temp:alarm",
            "notifications.engine.temp",
            "switches.deck.light:100:0",
            "switches.x:0.0000001:1e+16",
            "switches.deck.light",
        ],
    )
    def test_activity_path_reparses_to_same_values(self, activity_path: str) -> None:
        path, on_value, off_value = parse_activity_path(activity_path)
        activity = Activity(
            name="t[activity-0]",
            path=path,
            on_value=on_value,
            off_value=off_value,
            duration=1.0,
        )
        assert parse_activity_path(format_activity_path(activity)) == (path, on_value, off_value)
