"""Event selection by type specifiers.

Each event's ``type`` is a case-insensitive pattern that must match a whole
specifier string. The direction is deliberate: the event declares which
generation targets it belongs to, and the caller names the target.

    specifiers=[]             every event
    specifiers=["ui", "io"]   events whose type matches "ui" or "io"
    specifiers=["!test"]      events whose type does not match "test"

An event whose type matches "#ALL" or "#ANY" is selected by every filter.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Pattern, Tuple

from .errors import invalid_event_type
from .objects import Event

if TYPE_CHECKING:
    from .machine import Machine

EXCLUDE_MARKER = "!"
UNIVERSAL_TYPES = ("#ALL", "#ANY")


def split_specifiers(specifiers: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split specifiers into (inclusions, exclusions), markers stripped."""
    includes: List[str] = []
    excludes: List[str] = []
    for spec in specifiers:
        if spec.startswith(EXCLUDE_MARKER):
            excludes.append(spec[len(EXCLUDE_MARKER):])
        else:
            includes.append(spec)
    return includes, excludes


def compile_event_type(event: Event) -> Pattern[str]:
    try:
        return re.compile(f"(?:{event.type or ''})", re.IGNORECASE)
    except re.error as e:
        raise invalid_event_type(event.id, event.type, str(e)) from None


def event_matches(event: Event, includes: List[str], excludes: List[str]) -> bool:
    pattern = compile_event_type(event)

    if any(pattern.fullmatch(t) for t in UNIVERSAL_TYPES):
        return True
    if includes and not any(pattern.fullmatch(s) for s in includes):
        return False
    return not any(pattern.fullmatch(s) for s in excludes)


def matching_events(machine: "Machine", specifiers: Optional[Iterable[str]] = None) -> List[Event]:
    """Events selected by ``specifiers``, in declaration order."""
    specifiers = list(specifiers or [])
    if not specifiers:
        return machine.events()

    includes, excludes = split_specifiers(specifiers)
    return [e for e in machine.events() if event_matches(e, includes, excludes)]
