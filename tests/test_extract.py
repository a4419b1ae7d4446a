"""Tests for extract_output_machine()."""

from __future__ import annotations

import logging

import pytest

from stateml import Action, Arc, Class, Event, Machine, State


@pytest.fixture
def targets() -> Machine:
    """A machine whose events split across 'ui' and 'io' targets."""
    m = Machine(
        "player",
        description="Media player.",
        preamble="#include <player.h>",
        postamble="/* end */",
        modes=["c"],
        autogenerated_message="Generated, do not edit",
    )
    m.add(
        Class("base", attrs={"lang": "c"}),
        Action("log", code="log();"),
        State("idle"),
        State("playing"),
        State("paused"),
        State("error"),
        Event("play", type="ui"),
        Event("pause", type="ui"),
        Event("fail", type="io"),
        Event("reset", type="#ANY"),
        Arc("a_play", from_id="idle", to_id="playing", event_id="play"),
        Arc("a_resume", from_id="paused", to_id="playing", event_id="play"),
        Arc("a_pause", from_id="playing", to_id="paused", event_id="pause"),
        Arc("a_fail", from_id="#ALL", to_id="error", event_id="fail"),
        Arc("a_reset", from_id="error", to_id="idle", event_id="reset"),
    )
    return m


def _ids(entities):
    return [e.id for e in entities]


def test_ui_target(targets):
    ui = targets.extract_output_machine(["ui"])

    assert _ids(ui.events()) == ["play", "pause", "reset"]
    assert sorted(_ids(ui.arcs())) == ["a_pause", "a_play", "a_reset", "a_resume"]
    assert _ids(ui.states()) == ["idle", "playing", "paused", "error"]
    ui.assert_valid()


def test_io_target_expands_wildcard(targets):
    io = targets.extract_output_machine(["io"])

    assert _ids(io.events()) == ["fail", "reset"]
    fail_arcs = io.arcs_for_event(io.event_by_id("fail"))
    assert _ids(fail_arcs) == ["a_fail_idle", "a_fail_playing", "a_fail_paused", "a_fail_error"]
    assert all(a.to_id == "error" for a in fail_arcs)
    assert io.all_state_arc_for_event(io.event_by_id("fail")) is None
    io.assert_valid()


def test_states_collapse_and_keep_source_order(targets):
    ui = targets.extract_output_machine(["!io"])
    states = ui.states()
    assert len(states) == len({id(s) for s in states})
    assert _ids(states) == ["idle", "playing", "paused", "error"]
    assert [s.number for s in states] == [1, 2, 3, 4]


def test_machine_attributes_are_carried_over(targets):
    out = targets.extract_output_machine(["ui"])

    assert out is not targets
    assert out.id == "player"
    assert out.description == "Media player."
    assert out.preamble == "#include <player.h>"
    assert out.postamble == "/* end */"
    assert out.modes == ["c"]
    assert out.autogenerated_message == "Generated, do not edit"


def test_actions_and_classes_are_always_included(targets):
    out = targets.extract_output_machine(["io"])
    assert _ids(out.actions()) == ["log"]
    assert _ids(out.classes()) == ["base"]


def test_entities_are_shared_but_arcs_are_copied(targets):
    out = targets.extract_output_machine(["ui"])

    assert out.event_by_id("play") is targets.event_by_id("play")
    assert out.state_by_id("idle") is targets.state_by_id("idle")
    assert out.arc_by_id("a_play") is not targets.arc_by_id("a_play")
    assert out.arc_by_id("a_play").machine is out
    assert targets.arc_by_id("a_play").machine is targets
    # Shared entities now answer lookups through the extracted machine.
    assert targets.state_by_id("idle").machine is out


def test_events_selecting_the_same_arcs_yield_each_arc_once():
    """Event ids differing only in case pick up the same arcs."""
    m = Machine("m")
    m.add(
        State("s1"),
        State("s2"),
        Event("go"),
        Event("GO"),
        Arc("a", from_id="s1", to_id="s2", event_id="go"),
        Arc("w", from_id="#ALL", to_id="s1", event_id="GO"),
    )
    m.assert_valid()

    out = m.extract_output_machine([])

    ids = _ids(out.arcs())
    assert sorted(ids) == ["a", "w_s2"]
    assert len(ids) == len(set(ids))
    assert _ids(out.states()) == ["s1", "s2"]


def test_source_is_unchanged(targets):
    before = (_ids(targets.events()), _ids(targets.arcs()), _ids(targets.states()))
    targets.extract_output_machine(["io"])
    after = (_ids(targets.events()), _ids(targets.arcs()), _ids(targets.states()))
    assert before == after
    assert [s.number for s in targets.states()] == [1, 2, 3, 4]


def test_one_event_without_arcs_warns_twice(caplog):
    m = Machine("m")
    m.add(State("s"), Event("e"))

    with caplog.at_level(logging.WARNING, logger="stateml"):
        out = m.extract_output_machine([])

    assert out.arcs() == []
    assert out.states() == []
    assert [w.what for w in m.warnings] == ["no arcs found", "no states found"]
    assert "no arcs found" in caplog.text
    assert "no states found" in caplog.text


def test_no_matching_events_warns_three_times(targets):
    out = targets.extract_output_machine(["video"])
    assert _ids(out.events()) == ["reset"]

    m = Machine("m")
    m.add(Event("e", type="ui"))
    m.extract_output_machine(["io"])
    assert [w.what for w in m.warnings] == [
        "no events found",
        "no arcs found",
        "no states found",
    ]


def test_everything_matches_round_trip(door):
    """An all-inclusive filter keeps every id, bar wildcard expansion."""
    out = door.extract_output_machine([])

    assert _ids(out.events()) == _ids(door.events())
    assert _ids(out.states()) == _ids(door.states())
    explicit = {a.id for a in door.arcs() if not a.is_from_all}
    derived = {f"a_tick_{s.id}" for s in door.states()}
    assert {a.id for a in out.arcs()} == explicit | derived
    out.assert_valid()
    assert door.warnings == []
