#!/usr/bin/env python
"""
Switch Table Generator Example

Demonstrates:
- Loading a YAML machine description
- Extracting the sub-machine for one generation target by event type
- Walking states and per-event arcs (with #ALL expanded) to emit C source

Run: python gen.py [type ...]     e.g. python gen.py ui
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

from stateml import Machine, MachineLoader


def render(machine: Machine) -> str:
    lines: List[str] = [f"/* {machine.autogenerated_message} */"]
    if machine.preamble:
        lines.append(machine.preamble.rstrip("\n"))
    lines.append("")

    lines.append("enum state {")
    for state in machine.states():
        lines.append(f"    ST_{state.enum_id} = {state.number},")
    lines.append("};")
    lines.append("")

    for event in machine.events():
        lines.append(f"enum state on_{event.id}(enum state s) {{")
        lines.append("    switch (s) {")
        for arc in machine.arcs_for_event(event):
            lines.append(f"    case ST_{arc.from_state.enum_id}:")
            # Self-loops don't leave the state, so skip exit/entry.
            moving = arc.from_state is not arc.to_state
            actions = arc.from_state.exit_handlers() if moving else []
            actions += arc.handlers()
            if moving:
                actions += arc.to_state.entry_handlers()
            for action in actions:
                lines.append(f"        {action.code}")
            lines.append(f"        return ST_{arc.to_state.enum_id};")
        lines.append("    default:")
        lines.append("        return s;")
        lines.append("    }")
        lines.append("}")
        lines.append("")

    if machine.postamble:
        lines.append(machine.postamble.rstrip("\n"))

    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines) + "\n"


def main(argv: List[str]) -> None:
    machine = MachineLoader.load_machine(Path(__file__).parent / "player.yaml")
    target = machine.extract_output_machine(argv)
    sys.stdout.write(render(target))


if __name__ == "__main__":
    main(sys.argv[1:])
