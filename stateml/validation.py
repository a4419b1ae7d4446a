"""Consistency checks over a machine's arcs and ids.

check(machine) sweeps every arc once and collects a diagnostic per defect
instead of stopping at the first one:

- missing or unknown ``from`` / ``to`` states
- missing or unknown events
- two arcs leaving one state on the same event and guard

It also scans every registered entity for duplicate ``enum_id`` values.
Those only matter to generated numeric constants, so they are warnings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .diagnostics import ERROR, Diagnostic, MachineReport, soft_warning
from .errors import KindMismatch
from .objects import EVENT, STATE, Arc, Entity

if TYPE_CHECKING:
    from .machine import Machine


def _arc_error(arc: Arc, what: str, **context) -> Diagnostic:
    context = {"arc": arc.id, **context}
    if arc.location:
        context["location"] = str(arc.location)
    return Diagnostic(level=ERROR, what=f"{what} in arc '{arc.id}'{arc.where}", context=context)


def _check_reference(
    machine: "Machine", arc: Arc, role: str, ref: Optional[str], kind: str
) -> Optional[Diagnostic]:
    """Diagnose one id an arc refers to; None when it resolves."""
    label = f"{role} state" if kind == STATE else "event-id"

    if not ref:
        return _arc_error(arc, f"no {label} ({ref!r})", field=role)

    try:
        found = machine.object_by_id(ref, kind)
    except KindMismatch:
        other = machine.object_by_id(ref)
        return _arc_error(
            arc, f"{label} '{ref}' names a {other.kind}", field=role, ref=ref
        )

    if found is None:
        return _arc_error(arc, f"unknown {label} '{ref}'", field=role, ref=ref)
    return None


def _unique_event_key(arc: Arc) -> str:
    key = arc.event_id or ""
    if arc.guard is not None:
        key += f"[{arc.guard}]"
    return key


def _duplicate_enum_ids(entities: List[Entity]) -> List[Diagnostic]:
    by_enum_id: Dict[str, List[Entity]] = {}
    for entity in entities:
        by_enum_id.setdefault(entity.enum_id, []).append(entity)

    warnings = []
    for enum_id, holders in by_enum_id.items():
        if len(holders) < 2:
            continue
        warnings.append(
            soft_warning(
                f"multiple objects with the enum_id '{enum_id}': "
                + " ".join(str(e) for e in holders),
                fix="Set an explicit enum_id on one of them.",
                enum_id=enum_id,
                ids=[e.id for e in holders],
            )
        )
    return warnings


def check(machine: "Machine") -> MachineReport:
    """Check ``machine`` and return every error and warning found."""
    report = MachineReport(
        machine_id=machine.id,
        state_count=len(machine.states()),
        event_count=len(machine.events()),
        arc_count=len(machine.arcs()),
    )

    claimed: Dict[Tuple[str, str], Arc] = {}
    collisions: Dict[Tuple[str, str], List[Arc]] = {}

    for arc in machine.arcs():
        problem = _check_reference(machine, arc, "from", arc.from_id, STATE)
        if problem:
            report.errors.append(problem)
        else:
            key = (arc.from_id, _unique_event_key(arc))
            if key in claimed:
                collisions.setdefault(key, [claimed[key]]).append(arc)
            else:
                claimed[key] = arc

        for role, ref, kind in (("to", arc.to_id, STATE), ("event", arc.event_id, EVENT)):
            problem = _check_reference(machine, arc, role, ref, kind)
            if problem:
                report.errors.append(problem)

    for (state_id, event_key), arcs in sorted(collisions.items()):
        report.errors.append(
            Diagnostic(
                level=ERROR,
                what=f"multiple arcs exit from state {state_id} by event {event_key}",
                fix="Give the arcs distinct guards, or remove all but one.",
                context={"state": state_id, "arcs": [a.id for a in arcs]},
            )
        )

    report.warnings.extend(_duplicate_enum_ids(machine.entities()))
    return report
