"""StateML machine: the aggregate root of a state machine description.

A Machine owns every state, event, arc, action and class of one description,
the flat id registry they share, and the ``#ALL`` wildcard state. Entities
are added once, during construction, and never removed.

Example:
    from stateml import Arc, Event, Machine, State

    m = Machine("door")
    m.add(
        State("closed"),
        State("open"),
        Event("push", type="ui"),
        Arc("a1", from_id="closed", to_id="open", event_id="push"),
    )
    m.assert_valid()
    [arc.id for arc in m.arcs_for_event(m.event_by_id("push"))]
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from .diagnostics import Diagnostic, MachineReport
from .errors import ErrorContext, ValidationError, illegal_message_characters
from .extract import extract_output_machine
from .filters import matching_events
from .logger import get_logger, machine_scope
from .objects import (
    ACTION,
    ALL_STATE_ID,
    ARC,
    CLASS,
    EVENT,
    STATE,
    Action,
    Arc,
    Class,
    Entity,
    Event,
    Location,
    State,
)
from .registry import IdentifierRegistry
from .resolver import all_state_arc_for_event, arcs_for_event
from .validation import check

DEFAULT_AUTOGENERATED_MESSAGE = "AUTOGENERATED, DO NOT EDIT!!"

_ILLEGAL_MESSAGE_CHAR = re.compile(r"([^\w :.\\/!,-])")


class Machine:
    def __init__(
        self,
        id: Optional[str] = None,
        *,
        description: Optional[str] = None,
        location: Optional[Location] = None,
        preamble: Optional[str] = None,
        postamble: Optional[str] = None,
        modes: Optional[Iterable[str]] = None,
        autogenerated_message: Optional[str] = None,
        attrs: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.id = id
        self.description = description
        self.location = location
        self.preamble = preamble
        self.postamble = postamble
        self.attrs: Dict[str, Any] = dict(attrs or {})
        self.logger = logger or get_logger("stateml")

        # Soft warnings reported against this machine, oldest first.
        self.warnings: List[Diagnostic] = []

        self._modes: List[str] = list(modes or [])
        self._autogenerated_message: Optional[str] = None
        if autogenerated_message is not None:
            self.autogenerated_message = autogenerated_message

        self._registry = IdentifierRegistry(id)
        self._collections: Dict[str, List[Entity]] = {
            STATE: [],
            EVENT: [],
            ARC: [],
            ACTION: [],
            CLASS: [],
        }

        # #ALL lives in the registry but never in the concrete-state list.
        self.all_state = State(ALL_STATE_ID, number=-1, machine=self)
        self._registry.register(self.all_state)

    def __repr__(self) -> str:
        c = self._collections
        return (
            f"Machine(id={self.id!r}, states={len(c[STATE])}, events={len(c[EVENT])}, "
            f"arcs={len(c[ARC])}, actions={len(c[ACTION])}, classes={len(c[CLASS])})"
        )

    # --- Attributes ---

    @property
    def modes(self) -> List[str]:
        """Modes that controlled which parts of the description were parsed."""
        return list(self._modes)

    @modes.setter
    def modes(self, value: Iterable[str]) -> None:
        self._modes = list(value)

    @property
    def autogenerated_message(self) -> str:
        """Warning that generators place in the files they write."""
        return self._autogenerated_message or DEFAULT_AUTOGENERATED_MESSAGE

    @autogenerated_message.setter
    def autogenerated_message(self, message: str) -> None:
        bad = _ILLEGAL_MESSAGE_CHAR.search(message)
        if bad:
            raise illegal_message_characters(message, bad.group(1))
        self._autogenerated_message = message

    # --- Construction ---

    def add(self, *entities: Entity) -> None:
        """Register entities and take ownership of them."""
        for entity in entities:
            collection = self._collections.get(getattr(entity, "kind", None))
            if collection is None:
                raise TypeError(f"cannot add {type(entity).__name__} to a machine")
            self._registry.register(entity)
            entity.machine = self
            collection.append(entity)
            self.logger.debug("Added %s", entity)

    # --- Collections ---

    def _number_states(self) -> None:
        # Numbers start at 1 so generators can keep 0 for "unknown".
        for number, state in enumerate(self._collections[STATE], start=1):
            state.number = number
        self.all_state.number = -1

    def states(self) -> List[State]:
        """Concrete states in ordinal order, renumbered on every call."""
        self._number_states()
        return sorted(self._collections[STATE], key=lambda s: s.number)

    def raw_states(self) -> List[State]:
        """Concrete states plus ``#ALL``, which sorts first at -1."""
        self._number_states()
        return sorted([*self._collections[STATE], self.all_state], key=lambda s: s.number)

    def states_by_id(self) -> Dict[str, State]:
        return {state.id: state for state in self.states()}

    def events(self) -> List[Event]:
        return list(self._collections[EVENT])

    def arcs(self) -> List[Arc]:
        return list(self._collections[ARC])

    def actions(self) -> List[Action]:
        return list(self._collections[ACTION])

    def classes(self) -> List[Class]:
        return list(self._collections[CLASS])

    def entities(self) -> List[Entity]:
        """Everything in the registry, ``#ALL`` included."""
        return list(self._registry)

    # --- Lookups ---

    def object_by_id(self, entity_id: Optional[str], kind: Optional[str] = None) -> Optional[Entity]:
        """Find any entity by id; with ``kind``, raise KindMismatch on a wrong kind."""
        return self._registry.lookup(entity_id, kind)

    def state_by_id(self, entity_id: Optional[str]) -> Optional[State]:
        return self._registry.lookup(entity_id, STATE)

    def event_by_id(self, entity_id: Optional[str]) -> Optional[Event]:
        return self._registry.lookup(entity_id, EVENT)

    def arc_by_id(self, entity_id: Optional[str]) -> Optional[Arc]:
        return self._registry.lookup(entity_id, ARC)

    def action_by_id(self, entity_id: Optional[str]) -> Optional[Action]:
        return self._registry.lookup(entity_id, ACTION)

    def class_by_id(self, entity_id: Optional[str]) -> Optional[Class]:
        return self._registry.lookup(entity_id, CLASS)

    # --- Queries ---

    def states_for_arc(self, arc: Arc) -> List[State]:
        """Endpoint states of ``arc``; a self-loop yields its state once."""
        found: List[State] = []
        for state in (arc.from_state, arc.to_state):
            if state is not None and all(state is not s for s in found):
                found.append(state)
        return found

    def arcs_for_event(self, event: Event, *, raw: bool = False) -> List[Arc]:
        return arcs_for_event(self, event, raw=raw)

    def all_state_arc_for_event(self, event: Event) -> Optional[Arc]:
        return all_state_arc_for_event(self, event)

    def matching_events(self, specifiers: Optional[Iterable[str]] = None) -> List[Event]:
        return matching_events(self, specifiers)

    def extract_output_machine(self, specifiers: Optional[Iterable[str]] = None) -> "Machine":
        return extract_output_machine(self, specifiers)

    # --- Validation ---

    def check(self) -> MachineReport:
        """Collect every defect and warning without raising."""
        return check(self)

    def assert_valid(self) -> None:
        """Raise ValidationError listing every defect found.

        Warnings (duplicate enum ids) are reported as soft warnings and never
        raise.
        """
        report = self.check()
        for warning in report.warnings:
            self.report(warning)

        if not report.is_valid:
            raise ValidationError(
                f"Machine '{self.id}' has {len(report.errors)} validation error(s)",
                report.errors,
                fix="Declare the missing states and events, or correct the arc references.",
                context=ErrorContext().add("machine", self.id),
            )

    def report(self, diagnostic: Diagnostic) -> None:
        """Record a soft warning and log it; never raises."""
        self.warnings.append(diagnostic)
        with machine_scope(self.id):
            self.logger.warning("%s", diagnostic.what)
