"""Build machines from YAML machine descriptions.

Layout of a description file::

    machine:
      id: door
      description: A door.
      autogenerated_message: "AUTOGENERATED by doorgen, do not edit"
      modes: [c]
    preamble: |
      #include "door.h"
    classes:
      - {id: loud, volume: 11}
    actions:
      - {id: beep, code: "beep();"}
    states:
      - {id: closed, classes: [loud], entry: [beep]}
      - {id: open}
    events:
      - {id: push, type: ui}
    arcs:
      - {from: closed, to: open, event: push, handlers: [beep]}

Keys a record does not define are kept in the entity's ``attrs``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from .errors import ConfigError, ErrorContext, config_missing_field, config_wrong_type
from .machine import Machine
from .objects import Action, Arc, Class, Entity, Event, Location, State

LINE_KEY = "__line__"

COMMON_KEYS = {"id", "description", "classes", "enum_id", "attrs", LINE_KEY}

SECTION_ORDER = ("classes", "actions", "states", "events", "arcs")


class _LineLoader(yaml.SafeLoader):
    """SafeLoader that remembers the line each mapping starts on."""

    def construct_mapping(self, node, deep=False):
        mapping = super().construct_mapping(node, deep=deep)
        mapping[LINE_KEY] = node.start_mark.line + 1
        return mapping


def _strip_lines(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_lines(v) for k, v in value.items() if k != LINE_KEY}
    if isinstance(value, list):
        return [_strip_lines(v) for v in value]
    return value


class _Record:
    """One entity record with typed field access."""

    def __init__(self, data: Dict[str, Any], where: str, source: str) -> None:
        self.data = data
        self.where = where
        self.source = source

    @property
    def location(self) -> Location:
        return Location(self.source, self.data.get(LINE_KEY))

    def str_field(self, key: str, *, required: bool = False) -> Optional[str]:
        value = self.data.get(key)
        if value is None:
            if required:
                raise config_missing_field(key, self.where)
            return None
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise config_wrong_type(key, "string", type(value).__name__, self.where)
        return str(value)

    def list_field(self, key: str) -> List[str]:
        value = self.data.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise config_wrong_type(key, "list of strings", type(value).__name__, self.where)
        return list(value)

    def attrs(self, own_keys: set) -> Dict[str, Any]:
        attrs = self.data.get("attrs") or {}
        if not isinstance(attrs, dict):
            raise config_wrong_type("attrs", "mapping", type(attrs).__name__, self.where)
        extra = {k: v for k, v in self.data.items() if k not in COMMON_KEYS | own_keys}
        return _strip_lines({**extra, **attrs})

    def common(self, own_keys: set, *, entity_id: Optional[str] = None) -> Dict[str, Any]:
        return dict(
            id=entity_id if entity_id is not None else self.str_field("id", required=True),
            description=self.str_field("description"),
            location=self.location,
            enum_id=self.str_field("enum_id"),
            class_ids=self.list_field("classes"),
            attrs=self.attrs(own_keys),
        )


def _build_class(r: _Record) -> Class:
    return Class(**r.common(set()))


def _build_action(r: _Record) -> Action:
    return Action(**r.common({"code"}), code=r.str_field("code"))


def _build_state(r: _Record) -> State:
    return State(
        **r.common({"entry", "exit"}),
        entry_ids=r.list_field("entry"),
        exit_ids=r.list_field("exit"),
    )


def _build_event(r: _Record) -> Event:
    return Event(**r.common({"type"}), type=r.str_field("type") or "")


ARC_KEYS = {"from", "to", "event", "guard", "handlers"}


def _build_arc(r: _Record) -> Arc:
    from_id = r.str_field("from", required=True)
    to_id = r.str_field("to", required=True)
    event_id = r.str_field("event", required=True)
    guard = r.str_field("guard")

    arc_id = r.str_field("id")
    if arc_id is None:
        arc_id = f"{from_id}__{event_id}__{to_id}"
        if guard is not None:
            arc_id += f"__{guard}"

    return Arc(
        **r.common(ARC_KEYS, entity_id=arc_id),
        from_id=from_id,
        to_id=to_id,
        event_id=event_id,
        guard=guard,
        handler_ids=r.list_field("handlers"),
    )


BUILDERS: Dict[str, Callable[[_Record], Entity]] = {
    "classes": _build_class,
    "actions": _build_action,
    "states": _build_state,
    "events": _build_event,
    "arcs": _build_arc,
}


class MachineLoader:
    @staticmethod
    def load_yaml(path: str | Path) -> Dict[str, Any]:
        p = Path(path)
        try:
            with p.open("r", encoding="utf-8") as f:
                data = yaml.load(f, Loader=_LineLoader) or {}
        except yaml.YAMLError as e:
            ctx = ErrorContext().add("config_path", str(p))
            raise ConfigError(
                f"Invalid YAML in machine description: {p}",
                why=str(e),
                fix="Check the file for YAML syntax errors.",
                context=ctx,
            ) from None
        if not isinstance(data, dict):
            raise config_wrong_type(
                field="(root)",
                expected="mapping/object",
                got=type(data).__name__,
                path=str(p),
            )
        return data

    @staticmethod
    def load_machine(
        path: str | Path,
        *,
        validate: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> Machine:
        data = MachineLoader.load_yaml(path)
        return MachineLoader.build_machine(data, str(path), validate=validate, logger=logger)

    @staticmethod
    def build_machine(
        data: Dict[str, Any],
        source: str = "(dict)",
        *,
        validate: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> Machine:
        """Build a machine from parsed description records.

        Raises ConfigError for malformed records, DuplicateIdentifier for
        reused ids and, when ``validate`` is set, ValidationError for
        dangling references.
        """
        header = data.get("machine") or {}
        if not isinstance(header, dict):
            raise config_wrong_type("machine", "mapping", type(header).__name__, source)
        head = _Record(header, f"{source}: machine", source)

        text = _Record(data, source, source)
        machine = Machine(
            head.str_field("id"),
            description=head.str_field("description"),
            location=head.location,
            preamble=text.str_field("preamble"),
            postamble=text.str_field("postamble"),
            modes=head.list_field("modes"),
            autogenerated_message=head.str_field("autogenerated_message"),
            attrs=head.attrs({"autogenerated_message", "modes"}),
            logger=logger,
        )

        for section in SECTION_ORDER:
            entries = data.get(section)
            if entries is None:
                continue
            if not isinstance(entries, list):
                raise config_wrong_type(section, "list", type(entries).__name__, source)

            build = BUILDERS[section]
            for index, entry in enumerate(entries):
                where = f"{source}: {section}[{index}]"
                if not isinstance(entry, dict):
                    raise config_wrong_type(section, "list of mappings", type(entry).__name__, where)
                machine.add(build(_Record(entry, where, source)))

        if validate:
            machine.assert_valid()
        return machine
