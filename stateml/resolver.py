"""Per-event arc resolution, including ``#ALL`` wildcard expansion.

An arc leaving ``#ALL`` stands for one arc leaving every concrete state.
Expansion instantiates it per state, except where the state already has an
explicit arc for the same event and guard: explicit arcs always win and are
never merged with derived ones.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .diagnostics import soft_warning
from .errors import KindMismatch
from .objects import ALL_STATE_ID, Arc, Event, State

if TYPE_CHECKING:
    from .machine import Machine

ArcKey = Tuple[str, Optional[str]]


def _same_event(arc: Arc, event: Event) -> bool:
    return arc.event_id is not None and arc.event_id.upper() == event.id.upper()


def derive_arc(arc: Arc, state: State) -> Arc:
    """Instantiate wildcard ``arc`` for one concrete ``state``.

    A wildcard arc that also ends in ``#ALL`` becomes a self-loop.
    """
    to_id = arc.to_id
    if to_id is not None and to_id.upper() == ALL_STATE_ID:
        to_id = state.id

    return replace(
        arc,
        id=f"{arc.id}_{state.id}",
        from_id=state.id,
        to_id=to_id,
        enum_id=None,
        class_ids=list(arc.class_ids),
        attrs=dict(arc.attrs),
        handler_ids=list(arc.handler_ids),
    )


def all_state_arc_for_event(machine: "Machine", event: Event) -> Optional[Arc]:
    """The first arc leaving ``#ALL`` on ``event``, if any."""
    for arc in machine.arcs():
        if _same_event(arc, event) and arc.is_from_all:
            return arc
    return None


def _endpoints(arc: Arc) -> Tuple[Optional[State], Optional[State]]:
    try:
        return arc.from_state, arc.to_state
    except KindMismatch:
        return None, None


def arcs_for_event(machine: "Machine", event: Event, *, raw: bool = False) -> List[Arc]:
    """Arcs that fire on ``event``, ordered by the number of their origin state.

    With ``raw=True`` wildcard arcs are returned as declared. Otherwise each
    one is replaced by derived arcs, at most one per concrete state and guard.
    """
    states = machine.states()

    keyed: Dict[ArcKey, Arc] = {}
    wildcard_arcs: List[Arc] = []
    for arc in machine.arcs():
        if not _same_event(arc, event):
            continue
        if arc.is_from_all:
            wildcard_arcs.append(arc)
        keyed[((arc.from_id or "").upper(), arc.guard)] = arc

    if wildcard_arcs and not raw:
        for arc in wildcard_arcs:
            keyed.pop((ALL_STATE_ID, arc.guard), None)
        for arc in wildcard_arcs:
            for state in states:
                key = (state.id.upper(), arc.guard)
                if key in keyed:
                    continue
                keyed[key] = derive_arc(arc, state)

    resolved = []
    for arc in keyed.values():
        from_state, to_state = _endpoints(arc)
        if from_state is None or to_state is None:
            machine.report(
                soft_warning(
                    f"arc '{arc.id}'{arc.where} has an unresolved state, skipping it",
                    fix="Run assert_valid() before resolving arcs.",
                    arc=arc.id,
                    from_state=arc.from_id,
                    to_state=arc.to_id,
                )
            )
            continue
        resolved.append((from_state.number, arc))

    # Stable order that agrees with the state numbering, for jump tables.
    resolved.sort(key=lambda pair: pair[0])
    return [arc for _, arc in resolved]
