"""StateML error types with structured, actionable messages.

Error Contract:
Every user-facing error includes:
- What happened (one sentence, plain English)
- Why (root cause, not stack trace)
- Fix (specific, actionable)
- Context (relevant ids/locations, trimmed)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .diagnostics import Diagnostic


@dataclass
class ErrorContext:
    """Structured context for error messages."""

    items: Dict[str, Any] = field(default_factory=dict)

    def add(self, key: str, value: Any) -> "ErrorContext":
        """Add a context item, returning self for chaining."""
        self.items[key] = value
        return self

    def format(self) -> str:
        """Format context as indented key=value lines."""
        if not self.items:
            return ""
        lines = [f"  {k}={v!r}" for k, v in self.items.items()]
        return "\n".join(lines)


class StateMLError(Exception):
    """Base exception for StateML with structured error messages.

    Attributes:
        what: One-sentence description of what happened
        why: Root cause explanation
        fix: Actionable fix suggestion
        context: Relevant debugging context
    """

    def __init__(
        self,
        what: str,
        *,
        why: Optional[str] = None,
        fix: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.what = what
        self.why = why
        self.fix = fix
        self.context = context or ErrorContext()

        message = self._format_message()
        super().__init__(message)

    def _format_message(self) -> str:
        """Format the full error message."""
        lines = [self.what]

        if self.why:
            lines.append(f"\nWhy: {self.why}")

        if self.fix:
            lines.append(f"\nFix: {self.fix}")

        ctx = self.context.format()
        if ctx:
            lines.append(f"\nContext:\n{ctx}")

        return "".join(lines)


class DuplicateIdentifier(StateMLError):
    """An id was added twice to the same machine."""

    pass


class KindMismatch(StateMLError):
    """A typed lookup found an entity of another kind."""

    pass


class ConfigError(StateMLError):
    """Error loading or validating a machine description."""

    pass


class ValidationError(StateMLError):
    """Aggregate of every defect found by one validation sweep.

    Attributes:
        diagnostics: Every error-level Diagnostic, in discovery order
    """

    def __init__(
        self,
        what: str,
        diagnostics: List["Diagnostic"],
        *,
        fix: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.diagnostics = list(diagnostics)
        why = "\n".join(f"  - {d.what}" for d in self.diagnostics)
        super().__init__(what, why=f"\n{why}" if why else None, fix=fix, context=context)

    @property
    def messages(self) -> List[str]:
        return [d.what for d in self.diagnostics]


# --- Helper constructors for common errors ---


def duplicate_identifier(
    entity_id: str, existing_kind: str, new_kind: str, machine_id: Optional[str] = None
) -> DuplicateIdentifier:
    """An id collides with an id already held in the machine."""
    ctx = ErrorContext()
    if machine_id:
        ctx.add("machine", machine_id)
    ctx.add("id", entity_id)
    ctx.add("existing_kind", existing_kind)
    ctx.add("new_kind", new_kind)

    held_by = "" if existing_kind == new_kind else f" (held by {new_kind})"
    return DuplicateIdentifier(
        f"Can't add {existing_kind} with duplicate ID '{entity_id}'{held_by}",
        why="Ids share one namespace across states, events, arcs, actions, "
        "classes and the machine itself.",
        fix=f"Rename one of the entities using '{entity_id}'.",
        context=ctx,
    )


def kind_mismatch(entity_id: str, wanted: str, found: str) -> KindMismatch:
    """A typed lookup resolved to the wrong kind of entity."""
    ctx = ErrorContext()
    ctx.add("id", entity_id)
    ctx.add("wanted", wanted)
    ctx.add("found", found)

    return KindMismatch(
        f"'{entity_id}' is not a {wanted}",
        why=f"The id is registered, but it names a {found}.",
        fix=f"Reference a {wanted} id here, or look the id up as a {found}.",
        context=ctx,
    )


def config_missing_field(field: str, path: Optional[str] = None) -> ConfigError:
    """A record is missing a required field."""
    ctx = ErrorContext()
    if path:
        ctx.add("config_path", path)
    ctx.add("field", field)

    return ConfigError(
        f"Machine description missing required field: '{field}'",
        why=f"The '{field}' field is required but was not found.",
        fix=f"Add '{field}' to the record.",
        context=ctx,
    )


def config_wrong_type(
    field: str, expected: str, got: str, path: Optional[str] = None
) -> ConfigError:
    """A record field has the wrong type."""
    ctx = ErrorContext()
    if path:
        ctx.add("config_path", path)
    ctx.add("field", field)
    ctx.add("expected", expected)
    ctx.add("got", got)

    return ConfigError(
        f"Field '{field}' has wrong type",
        why=f"Expected {expected}, but got {got}.",
        fix=f"Change '{field}' to be a {expected}.",
        context=ctx,
    )


def illegal_message_characters(message: str, char: str) -> ConfigError:
    """The autogenerated-file message contains a forbidden character."""
    ctx = ErrorContext()
    ctx.add("message", message)
    ctx.add("char", char)

    return ConfigError(
        f"Illegal character {char!r} in autogenerated message",
        why="The message is spliced into generated files of many languages, "
        "so only word characters, space and : . / \\ ! , - are allowed.",
        fix="Remove the character, and keep the message on one line.",
        context=ctx,
    )


def invalid_event_type(event_id: str, type_pattern: str, error: str) -> ConfigError:
    """An event's type does not compile as a pattern."""
    ctx = ErrorContext()
    ctx.add("event", event_id)
    ctx.add("type", type_pattern)
    ctx.add("error", error)

    return ConfigError(
        f"Event '{event_id}' has an invalid type pattern",
        why=f"Event types are matched as regular expressions: {error}.",
        fix="Escape special characters in the type, or use '|' to list alternatives.",
        context=ctx,
    )
