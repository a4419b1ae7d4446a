"""StateML - an in-memory model of state machine descriptions for code generators.

Quick Start:
    from stateml import Arc, Event, Machine, State

    m = Machine("door")
    m.add(
        State("closed"),
        State("open"),
        Event("push", type="ui"),
        Event("tick", type="#ANY"),
        Arc("a1", from_id="closed", to_id="open", event_id="push"),
        Arc("a2", from_id="#ALL", to_id="#ALL", event_id="tick"),
    )
    m.assert_valid()

    for event in m.events():
        for arc in m.arcs_for_event(event):
            print(event.id, arc.from_state.number, arc.to_id)

For YAML machine descriptions:
    from stateml import MachineLoader

    machine = MachineLoader.load_machine("door.yaml")
    ui_machine = machine.extract_output_machine(["ui"])
"""

from .diagnostics import Diagnostic, MachineReport
from .errors import (
    ConfigError,
    DuplicateIdentifier,
    KindMismatch,
    StateMLError,
    ValidationError,
)
from .loader import MachineLoader
from .machine import DEFAULT_AUTOGENERATED_MESSAGE, Machine
from .objects import ALL_STATE_ID, Action, Arc, Class, Entity, Event, Location, State
from .registry import IdentifierRegistry

__all__ = [
    # Core
    "Machine",
    "State",
    "Event",
    "Arc",
    "Action",
    "Class",
    "Entity",
    "Location",
    "ALL_STATE_ID",
    "DEFAULT_AUTOGENERATED_MESSAGE",
    # Loading
    "MachineLoader",
    # Registry (advanced)
    "IdentifierRegistry",
    # Errors
    "StateMLError",
    "DuplicateIdentifier",
    "KindMismatch",
    "ValidationError",
    "ConfigError",
    # Diagnostics
    "Diagnostic",
    "MachineReport",
]

__version__ = "0.1.0"
