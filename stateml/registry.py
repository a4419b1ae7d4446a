from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .errors import duplicate_identifier, kind_mismatch
from .objects import Entity


class IdentifierRegistry:
    """Flat id namespace shared by every entity kind in one machine.

    Any reuse of an id is rejected, across kinds too. The owning machine's
    own id is reserved as well.
    """

    def __init__(self, machine_id: Optional[str] = None) -> None:
        self.machine_id = machine_id
        self._entities: Dict[str, Entity] = {}

    def register(self, entity: Entity) -> None:
        existing = self._entities.get(entity.id)
        if existing is not None:
            raise duplicate_identifier(entity.id, existing.kind, entity.kind, self.machine_id)
        if self.machine_id is not None and entity.id == self.machine_id:
            raise duplicate_identifier(entity.id, "machine", entity.kind, self.machine_id)
        self._entities[entity.id] = entity

    def lookup(self, entity_id: Optional[str], kind: Optional[str] = None) -> Optional[Entity]:
        if entity_id is None:
            return None
        entity = self._entities.get(entity_id)
        if entity is None:
            return None
        if kind is not None and entity.kind != kind:
            raise kind_mismatch(entity_id, kind, entity.kind)
        return entity

    def ids(self) -> List[str]:
        return sorted(self._entities.keys())

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)
