"""Diagnostics collected while checking a machine.

A ``Diagnostic`` is one finding. Error-level diagnostics make a machine
invalid; warning-level ones (soft warnings) are observational only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ERROR = "error"
WARNING = "warning"


@dataclass
class Diagnostic:
    """A single warning or error about a machine."""

    level: str  # "warning" or "error"
    what: str
    why: Optional[str] = None
    fix: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.level == ERROR

    def format(self) -> str:
        """Format as structured message (matches StateMLError format)."""
        lines = [f"[{self.level.upper()}] {self.what}"]
        if self.why:
            lines.append(f"Why: {self.why}")
        if self.fix:
            lines.append(f"Fix: {self.fix}")
        if self.context:
            ctx_lines = [f"  {k}={v!r}" for k, v in self.context.items()]
            lines.append("Context:\n" + "\n".join(ctx_lines))
        return "\n".join(lines)


def soft_warning(what: str, *, fix: Optional[str] = None, **context: Any) -> Diagnostic:
    return Diagnostic(level=WARNING, what=what, fix=fix, context=context)


@dataclass
class MachineReport:
    """Structured result of checking one machine."""

    machine_id: Optional[str] = None

    state_count: int = 0
    event_count: int = 0
    arc_count: int = 0

    warnings: List[Diagnostic] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if the machine has no errors (warnings are ok)."""
        return len(self.errors) == 0

    def format(self) -> str:
        """Format as human-readable report."""
        lines = [
            "StateML Machine Report",
            "=" * 40,
            f"Machine: {self.machine_id or '(unnamed)'}",
            f"  states: {self.state_count}",
            f"  events: {self.event_count}",
            f"  arcs: {self.arc_count}",
            "",
        ]

        if self.warnings:
            lines.append("Warnings:")
            for w in self.warnings:
                lines.append(f"  ⚠ {w.what}")
                if w.fix:
                    lines.append(f"    Fix: {w.fix}")
            lines.append("")

        if self.errors:
            lines.append("Errors:")
            for e in self.errors:
                lines.append(f"  ✗ {e.what}")
                if e.fix:
                    lines.append(f"    Fix: {e.fix}")
            lines.append("")

        if self.is_valid:
            lines.append("Status: ✓ Valid")
        else:
            lines.append(f"Status: ✗ Invalid - {len(self.errors)} error(s) found")

        return "\n".join(lines)
