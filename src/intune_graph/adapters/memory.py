"""In-process store for one ingestion run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from intune_graph.domain.ports import DuplicateKeyError, GraphObjectStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from intune_graph.domain.model import Entity, MappedRelationship, Relationship


class InMemoryGraphStore:
    """Dict-backed store; iteration follows insertion order."""

    def __init__(self) -> None:
        self._entities: dict[str, Entity] = {}
        self._relationships: dict[str, Relationship] = {}
        self._mapped_relationships: dict[str, MappedRelationship] = {}

    def has_key(self, key: str) -> bool:
        return (
            key in self._entities
            or key in self._relationships
            or key in self._mapped_relationships
        )

    def find_entity(self, key: str) -> Entity | None:
        return self._entities.get(key)

    def add_entity(self, entity: Entity) -> Entity:
        self._claim(entity.key)
        self._entities[entity.key] = entity
        return entity

    def add_relationship(self, relationship: Relationship) -> None:
        self._claim(relationship.key)
        self._relationships[relationship.key] = relationship

    def add_mapped_relationship(self, relationship: MappedRelationship) -> None:
        self._claim(relationship.key)
        self._mapped_relationships[relationship.key] = relationship

    def iterate_entities(self, entity_type: str) -> Iterator[Entity]:
        # snapshot so handlers may add entities while iterating
        return iter([entity for entity in self._entities.values() if entity.type == entity_type])

    def iterate_relationships(self) -> Iterator[Relationship]:
        return iter(list(self._relationships.values()))

    def iterate_mapped_relationships(self) -> Iterator[MappedRelationship]:
        return iter(list(self._mapped_relationships.values()))

    def _claim(self, key: str) -> None:
        if self.has_key(key):
            raise DuplicateKeyError(key)


if TYPE_CHECKING:
    _store_check: GraphObjectStore = InMemoryGraphStore()
