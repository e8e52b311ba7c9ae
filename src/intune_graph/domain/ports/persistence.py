"""Port for the per-run entity/relationship store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from intune_graph.domain.model import Entity, MappedRelationship, Relationship


class DuplicateKeyError(ValueError):
    """Raised by a store when asked to insert a key it already holds."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Duplicate graph object key: {key}")
        self.key = key


@runtime_checkable
class GraphObjectStore(Protocol):
    """Append-only store of one ingestion run, keyed by ``_key``.

    Entities, relationships and mapped relationships share one key space.
    Implementations raise ``DuplicateKeyError`` instead of overwriting.
    """

    def has_key(self, key: str) -> bool: ...

    def find_entity(self, key: str) -> Entity | None: ...

    def add_entity(self, entity: Entity) -> Entity: ...

    def add_relationship(self, relationship: Relationship) -> None: ...

    def add_mapped_relationship(self, relationship: MappedRelationship) -> None: ...

    def iterate_entities(self, entity_type: str) -> Iterator[Entity]: ...

    def iterate_relationships(self) -> Iterator[Relationship]: ...

    def iterate_mapped_relationships(self) -> Iterator[MappedRelationship]: ...
