"""Output machine extraction.

Derives a machine scoped to one generation target: the events a specifier
list selects, their (expanded) arcs, and the states those arcs touch.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, List, Optional

from .diagnostics import soft_warning
from .logger import machine_scope
from .objects import Arc, State

if TYPE_CHECKING:
    from .machine import Machine


def _copy_arc(arc: Arc) -> Arc:
    return replace(
        arc,
        machine=None,
        class_ids=list(arc.class_ids),
        attrs=dict(arc.attrs),
        handler_ids=list(arc.handler_ids),
    )


def extract_output_machine(
    machine: "Machine", specifiers: Optional[Iterable[str]] = None
) -> "Machine":
    """Build a new machine holding the events matching ``specifiers``.

    The new machine owns copies of its arcs. States, events, actions and
    classes are shared with ``machine`` by reference and must not be mutated
    afterwards. Adding them to the new machine re-points their ``machine``
    back-reference at it, so lookups made through a shared entity resolve in
    the new machine from then on. Empty results are reported as soft warnings
    on ``machine``.
    """
    specifiers = list(specifiers or [])
    events = machine.matching_events(specifiers)
    if not events:
        machine.report(
            soft_warning(
                "no events found",
                fix="Check the type specifiers against the events' type attributes.",
                specifiers=specifiers,
            )
        )

    # Events whose ids differ only in case select the same arcs.
    arcs: List[Arc] = []
    seen_ids = set()
    for event in events:
        for arc in machine.arcs_for_event(event):
            if arc.id in seen_ids:
                continue
            seen_ids.add(arc.id)
            arcs.append(arc)
    if not arcs:
        machine.report(soft_warning("no arcs found", events=[e.id for e in events]))

    states: List[State] = []
    for arc in arcs:
        for state in machine.states_for_arc(arc):
            if state.is_all_state or any(state is s for s in states):
                continue
            states.append(state)
    if not states:
        machine.report(soft_warning("no states found", arcs=[a.id for a in arcs]))
    states.sort(key=lambda s: s.number)

    clone = type(machine)(
        machine.id,
        description=machine.description,
        location=machine.location,
        preamble=machine.preamble,
        postamble=machine.postamble,
        modes=machine.modes,
        autogenerated_message=machine.autogenerated_message,
        attrs=dict(machine.attrs),
        logger=machine.logger,
    )
    clone.add(
        *events,
        *states,
        *(_copy_arc(arc) for arc in arcs),
        *machine.classes(),
        *machine.actions(),
    )

    with machine_scope(machine.id):
        machine.logger.info(
            "Extracted output machine: %d event(s), %d arc(s), %d state(s)",
            len(events),
            len(arcs),
            len(states),
        )
    return clone
