"""Entities of a state machine description.

States, events, arcs, actions and classes all share one id namespace inside
their machine. Every entity keeps a back-reference to the machine that owns
it; cross-entity references (arc endpoints, inherited classes, handler
actions) are stored as ids and resolved through that machine on demand.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Set

if TYPE_CHECKING:
    from .machine import Machine

ALL_STATE_ID = "#ALL"

STATE = "state"
EVENT = "event"
ARC = "arc"
ACTION = "action"
CLASS = "class"

_NON_WORD = re.compile(r"\W")

_MISSING = object()


@dataclass(frozen=True)
class Location:
    """Where an entity was declared."""

    file: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


def default_enum_id(entity_id: str) -> str:
    """Derive the numeric-constant name generators use for an id."""
    return _NON_WORD.sub("_", entity_id).upper()


@dataclass(eq=False)
class Entity:
    """Attributes shared by every id-bearing entity.

    Entities compare by identity: two distinct objects are never equal, even
    when their fields match.
    """

    kind: ClassVar[str] = "entity"

    id: str
    description: Optional[str] = None
    location: Optional[Location] = None
    enum_id: Optional[str] = None
    class_ids: List[str] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)
    machine: Optional["Machine"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.enum_id is None:
            self.enum_id = default_enum_id(self.id)

    @property
    def where(self) -> str:
        return f" ({self.location})" if self.location else ""

    def classes(self) -> List["Class"]:
        """Classes this entity inherits from, in declaration order.

        Unknown class ids are skipped; an id naming a non-class raises
        KindMismatch.
        """
        if self.machine is None:
            return []
        found = []
        for class_id in self.class_ids:
            cls = self.machine.class_by_id(class_id)
            if cls is not None:
                found.append(cls)
        return found

    def attr(self, name: str, default: Any = None) -> Any:
        """Look up an attribute on this entity, then on its classes."""
        value = self._resolve_attr(name, set())
        return default if value is _MISSING else value

    def _resolve_attr(self, name: str, seen: Set[int]) -> Any:
        if id(self) in seen:
            return _MISSING
        seen.add(id(self))

        if name in self.attrs:
            return self.attrs[name]
        for cls in self.classes():
            value = cls._resolve_attr(name, seen)
            if value is not _MISSING:
                return value
        return _MISSING

    def _actions(self, action_ids: List[str]) -> List["Action"]:
        if self.machine is None:
            return []
        actions = []
        for action_id in action_ids:
            action = self.machine.action_by_id(action_id)
            if action is not None:
                actions.append(action)
        return actions

    def __str__(self) -> str:
        return f"{self.kind} '{self.id}'"


@dataclass(eq=False)
class State(Entity):
    kind: ClassVar[str] = STATE

    entry_ids: List[str] = field(default_factory=list)
    exit_ids: List[str] = field(default_factory=list)

    # Assigned by the owning machine every time states are enumerated.
    number: Optional[int] = field(default=None, compare=False)

    @property
    def is_all_state(self) -> bool:
        return self.id == ALL_STATE_ID

    def entry_handlers(self) -> List["Action"]:
        return self._actions(self.entry_ids)

    def exit_handlers(self) -> List["Action"]:
        return self._actions(self.exit_ids)


@dataclass(eq=False)
class Event(Entity):
    kind: ClassVar[str] = EVENT

    # A case-insensitive pattern, see Machine.matching_events().
    type: str = ""


@dataclass(eq=False)
class Arc(Entity):
    """A transition from one state to another when an event arrives."""

    kind: ClassVar[str] = ARC

    from_id: Optional[str] = None
    to_id: Optional[str] = None
    event_id: Optional[str] = None
    guard: Optional[str] = None
    handler_ids: List[str] = field(default_factory=list)

    @property
    def from_state(self) -> Optional[State]:
        if self.machine is None:
            return None
        return self.machine.state_by_id(self.from_id)

    @property
    def to_state(self) -> Optional[State]:
        if self.machine is None:
            return None
        return self.machine.state_by_id(self.to_id)

    @property
    def event(self) -> Optional[Event]:
        if self.machine is None:
            return None
        return self.machine.event_by_id(self.event_id)

    @property
    def is_from_all(self) -> bool:
        return self.from_id is not None and self.from_id.upper() == ALL_STATE_ID

    def handlers(self) -> List["Action"]:
        return self._actions(self.handler_ids)


@dataclass(eq=False)
class Action(Entity):
    """A named code fragment that arcs and states run."""

    kind: ClassVar[str] = ACTION

    code: Optional[str] = None


@dataclass(eq=False)
class Class(Entity):
    """A reusable bundle of attributes other entities inherit."""

    kind: ClassVar[str] = CLASS
