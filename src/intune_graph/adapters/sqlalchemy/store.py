"""SQLAlchemy-backed store so a run's graph outlives the process."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, delete, exists, insert, select
from sqlalchemy.exc import IntegrityError

from intune_graph.domain.model import Entity, MappedRelationship, Relationship
from intune_graph.domain.ports import DuplicateKeyError, GraphObjectStore

from .tables import (
    GRAPH_TABLES,
    entity_table,
    mapped_relationship_table,
    mapper_registry,
    relationship_table,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Row
    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)


class SqlAlchemyGraphStore:
    """Graph object store over any SQLAlchemy engine.

    Every write runs in its own transaction. Entities, relationships and
    mapped relationships share one key space, checked across all three tables.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        mapper_registry.metadata.create_all(engine, checkfirst=True)

    @classmethod
    def from_uri(cls, database_uri: str) -> SqlAlchemyGraphStore:
        return cls(create_engine(database_uri, future=True))

    @property
    def engine(self) -> Engine:
        return self._engine

    def reset(self) -> None:
        """Remove everything a previous run left behind."""

        with self._engine.begin() as connection:
            for table in GRAPH_TABLES:
                connection.execute(delete(table))
        log.info("Cleared persisted graph objects at %s", self._engine.url)

    def dispose(self) -> None:
        self._engine.dispose()

    def has_key(self, key: str) -> bool:
        with self._engine.connect() as connection:
            return self._has_key(connection, key)

    def find_entity(self, key: str) -> Entity | None:
        with self._engine.connect() as connection:
            row = connection.execute(
                select(entity_table).where(entity_table.c.key == key)
            ).one_or_none()
        return _entity_from_row(row) if row is not None else None

    def add_entity(self, entity: Entity) -> Entity:
        self._insert(
            entity.key,
            insert(entity_table).values(
                key=entity.key,
                type=str(entity.type),
                classes=[str(entity_class) for entity_class in entity.classes],
                properties=dict(entity.properties),
                raw_data=dict(entity.raw_data) if entity.raw_data is not None else None,
            ),
        )
        return entity

    def add_relationship(self, relationship: Relationship) -> None:
        self._insert(
            relationship.key,
            insert(relationship_table).values(
                key=relationship.key,
                type=relationship.type,
                relationship_class=relationship.relationship_class,
                source_key=relationship.source_key,
                target_key=relationship.target_key,
                properties=dict(relationship.properties),
            ),
        )

    def add_mapped_relationship(self, relationship: MappedRelationship) -> None:
        self._insert(
            relationship.key,
            insert(mapped_relationship_table).values(
                key=relationship.key,
                type=relationship.type,
                relationship_class=relationship.relationship_class,
                source_key=relationship.source_key,
                direction=relationship.direction,
                target_type=relationship.target_type,
                target_filter_keys=list(relationship.target_filter_keys),
                target_properties=dict(relationship.target_properties),
                skip_target_creation=relationship.skip_target_creation,
            ),
        )

    def iterate_entities(self, entity_type: str) -> Iterator[Entity]:
        statement = (
            select(entity_table)
            .where(entity_table.c.type == entity_type)
            .order_by(entity_table.c.id)
        )
        with self._engine.connect() as connection:
            rows = connection.execute(statement).all()
        return (_entity_from_row(row) for row in rows)

    def iterate_relationships(self) -> Iterator[Relationship]:
        with self._engine.connect() as connection:
            rows = connection.execute(
                select(relationship_table).order_by(relationship_table.c.id)
            ).all()
        return (_relationship_from_row(row) for row in rows)

    def iterate_mapped_relationships(self) -> Iterator[MappedRelationship]:
        with self._engine.connect() as connection:
            rows = connection.execute(
                select(mapped_relationship_table).order_by(mapped_relationship_table.c.id)
            ).all()
        return (_mapped_relationship_from_row(row) for row in rows)

    def _insert(self, key: str, statement: Any) -> None:
        with self._engine.begin() as connection:
            if self._has_key(connection, key):
                raise DuplicateKeyError(key)
            try:
                connection.execute(statement)
            except IntegrityError as exc:
                raise DuplicateKeyError(key) from exc

    @staticmethod
    def _has_key(connection: Connection, key: str) -> bool:
        return any(
            connection.execute(select(exists().where(table.c.key == key))).scalar()
            for table in GRAPH_TABLES
        )


def _entity_from_row(row: Row[Any]) -> Entity:
    values = row._mapping
    return Entity(
        key=values["key"],
        type=values["type"],
        classes=tuple(values["classes"]),
        properties=values["properties"],
        raw_data=values["raw_data"],
    )


def _relationship_from_row(row: Row[Any]) -> Relationship:
    values = row._mapping
    return Relationship(
        key=values["key"],
        type=values["type"],
        relationship_class=values["relationship_class"],
        source_key=values["source_key"],
        target_key=values["target_key"],
        properties=values["properties"],
    )


def _mapped_relationship_from_row(row: Row[Any]) -> MappedRelationship:
    values = row._mapping
    return MappedRelationship(
        key=values["key"],
        type=values["type"],
        relationship_class=values["relationship_class"],
        source_key=values["source_key"],
        direction=values["direction"],
        target_type=values["target_type"],
        target_filter_keys=tuple(values["target_filter_keys"]),
        target_properties=values["target_properties"],
        skip_target_creation=values["skip_target_creation"],
    )


if TYPE_CHECKING:
    _store_check: GraphObjectStore = SqlAlchemyGraphStore.from_uri("sqlite://")
