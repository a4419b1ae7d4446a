"""Tests for check() and assert_valid()."""

from __future__ import annotations

import logging

import pytest

from stateml import Arc, Event, Location, Machine, MachineReport, State, ValidationError


def test_valid_machine_passes(door):
    door.assert_valid()
    assert door.warnings == []


def test_check_counts(door):
    report = door.check()
    assert isinstance(report, MachineReport)
    assert report.is_valid
    assert (report.state_count, report.event_count, report.arc_count) == (3, 2, 3)


def test_unknown_to_state_reports_id_and_location(machine):
    machine.add(
        Arc(
            "a1",
            from_id="closed",
            to_id="ajar",
            event_id="push",
            location=Location("door.yaml", 17),
        )
    )
    with pytest.raises(ValidationError) as exc_info:
        machine.assert_valid()

    messages = exc_info.value.messages
    assert len(messages) == 1
    assert "ajar" in messages[0]
    assert "door.yaml:17" in messages[0]
    assert "ajar" in str(exc_info.value)


def test_every_defect_is_reported_in_one_sweep(machine):
    """Defects accumulate; nothing short-circuits."""
    machine.add(
        Arc("a1", from_id=None, to_id="open", event_id="push"),
        Arc("a2", from_id="nowhere", to_id=None, event_id="push"),
        Arc("a3", from_id="closed", to_id="open", event_id=None),
        Arc("a4", from_id="closed", to_id="nowhere", event_id="shove"),
    )
    with pytest.raises(ValidationError) as exc_info:
        machine.assert_valid()

    messages = exc_info.value.messages
    assert messages == [
        "no from state (None) in arc 'a1'",
        "unknown from state 'nowhere' in arc 'a2'",
        "no to state (None) in arc 'a2'",
        "no event-id (None) in arc 'a3'",
        "unknown to state 'nowhere' in arc 'a4'",
        "unknown event-id 'shove' in arc 'a4'",
    ]


def test_empty_string_counts_as_missing(machine):
    machine.add(Arc("a1", from_id="", to_id="open", event_id="push"))
    report = machine.check()
    assert report.errors[0].what == "no from state ('') in arc 'a1'"


def test_reference_to_wrong_kind(machine):
    machine.add(Arc("a1", from_id="push", to_id="open", event_id="closed"))
    messages = [d.what for d in machine.check().errors]
    assert "from state 'push' names a event in arc 'a1'" in messages
    assert "event-id 'closed' names a state in arc 'a1'" in messages


def test_wildcard_endpoints_are_known(machine):
    machine.add(Arc("a1", from_id="#ALL", to_id="#ALL", event_id="tick"))
    assert machine.check().is_valid


class TestMultipleArcs:
    def test_same_event_same_state_is_an_error(self, machine):
        machine.add(
            Arc("a1", from_id="closed", to_id="open", event_id="push"),
            Arc("a2", from_id="closed", to_id="locked", event_id="push"),
        )
        report = machine.check()
        assert [d.what for d in report.errors] == [
            "multiple arcs exit from state closed by event push"
        ]
        assert report.errors[0].context["arcs"] == ["a1", "a2"]

    def test_guards_disambiguate(self, machine):
        machine.add(
            Arc("a1", from_id="closed", to_id="open", event_id="push", guard="unlocked"),
            Arc("a2", from_id="closed", to_id="locked", event_id="push", guard="locked"),
        )
        assert machine.check().is_valid

    def test_same_guard_collides(self, machine):
        machine.add(
            Arc("a1", from_id="closed", to_id="open", event_id="push", guard="g"),
            Arc("a2", from_id="closed", to_id="locked", event_id="push", guard="g"),
        )
        assert [d.what for d in machine.check().errors] == [
            "multiple arcs exit from state closed by event push[g]"
        ]

    def test_three_arcs_one_diagnostic(self, machine):
        machine.add(
            Arc("a1", from_id="open", to_id="closed", event_id="push"),
            Arc("a2", from_id="open", to_id="locked", event_id="push"),
            Arc("a3", from_id="open", to_id="open", event_id="push"),
        )
        errors = machine.check().errors
        assert len(errors) == 1
        assert errors[0].context["arcs"] == ["a1", "a2", "a3"]

    def test_unknown_from_states_are_not_counted(self, machine):
        machine.add(
            Arc("a1", from_id="ghost", to_id="open", event_id="push"),
            Arc("a2", from_id="ghost", to_id="open", event_id="push"),
        )
        messages = [d.what for d in machine.check().errors]
        assert not any("multiple arcs" in m for m in messages)

    def test_collisions_reported_after_arc_defects(self, machine):
        machine.add(
            Arc("a1", from_id="open", to_id="closed", event_id="push"),
            Arc("a2", from_id="open", to_id="closed", event_id="push"),
            Arc("a3", from_id="open", to_id="ghost", event_id="tick"),
        )
        messages = [d.what for d in machine.check().errors]
        assert messages[-1].startswith("multiple arcs exit from state open")


class TestEnumIds:
    def test_duplicate_enum_ids_warn(self, caplog):
        m = Machine("m")
        m.add(State("door-open"), Event("door_open"))

        with caplog.at_level(logging.WARNING, logger="stateml"):
            m.assert_valid()

        assert len(m.warnings) == 1
        assert "DOOR_OPEN" in m.warnings[0].what
        assert m.warnings[0].context["ids"] == ["door-open", "door_open"]
        assert "multiple objects with the enum_id 'DOOR_OPEN'" in caplog.text

    def test_explicit_enum_id_collision(self):
        m = Machine("m")
        m.add(State("a", enum_id="X"), State("b", enum_id="X"))
        report = m.check()
        assert report.is_valid
        assert len(report.warnings) == 1

    def test_check_does_not_report(self):
        """check() is side-effect free; only assert_valid() reports."""
        m = Machine("m")
        m.add(State("a", enum_id="X"), State("b", enum_id="X"))
        m.check()
        assert m.warnings == []

    def test_warnings_do_not_mask_errors(self):
        m = Machine("m")
        m.add(
            State("a", enum_id="X"),
            State("b", enum_id="X"),
            Event("e"),
            Arc("arc", from_id="a", to_id="c", event_id="e"),
        )
        with pytest.raises(ValidationError):
            m.assert_valid()
        assert len(m.warnings) == 1


def test_report_format(machine):
    machine.add(Arc("a1", from_id="closed", to_id="ajar", event_id="push"))
    text = machine.check().format()
    assert "Machine: door" in text
    assert "unknown to state 'ajar'" in text
    assert "Invalid - 1 error(s)" in text
