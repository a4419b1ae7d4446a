from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from stateml import Arc, Event, Machine, State


@pytest.fixture
def machine() -> Machine:
    """Three states, two events, no arcs."""
    m = Machine("door")
    m.add(
        State("closed"),
        State("open"),
        State("locked"),
        Event("push", type="ui"),
        Event("tick", type="timer"),
    )
    return m


@pytest.fixture
def door(machine: Machine) -> Machine:
    """The machine fixture plus a small valid set of arcs."""
    machine.add(
        Arc("a_open", from_id="closed", to_id="open", event_id="push"),
        Arc("a_close", from_id="open", to_id="closed", event_id="push"),
        Arc("a_tick", from_id="#ALL", to_id="#ALL", event_id="tick"),
    )
    return machine


@pytest.fixture
def door_yaml(tmp_path: Path) -> Path:
    p = tmp_path / "door.yaml"
    p.write_text(
        textwrap.dedent(
            """\
            machine:
              id: door
              description: A door.
              autogenerated_message: "AUTOGENERATED by doorgen, do not edit"
              modes: [c, test]
            preamble: |
              #include "door.h"
            postamble: "/* end */"
            classes:
              - id: loud
                volume: 11
            actions:
              - id: beep
                code: "beep();"
            states:
              - id: closed
                classes: [loud]
                entry: [beep]
              - id: open
                description: Wide open.
            events:
              - id: push
                type: ui
              - id: tick
                type: "#ANY"
            arcs:
              - id: a_open
                from: closed
                to: open
                event: push
                handlers: [beep]
              - from: open
                to: closed
                event: push
              - from: "#ALL"
                to: "#ALL"
                event: tick
            """
        ),
        encoding="utf-8",
    )
    return p
