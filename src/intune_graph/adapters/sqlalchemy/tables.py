"""SQLAlchemy table metadata for persisted graph objects."""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, Enum, Integer, String, Table, orm

from intune_graph.domain.model import RelationshipClass, RelationshipDirection

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# ``id`` records insertion order; ``key`` is the graph object key.

entity_table = Table(
    "entity",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("key", String, nullable=False, unique=True),
    Column("type", String, nullable=False, index=True),
    Column("classes", JSON, nullable=False),
    Column("properties", JSON, nullable=False),
    Column("raw_data", JSON, nullable=True),
)

relationship_table = Table(
    "relationship",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("key", String, nullable=False, unique=True),
    Column("type", String, nullable=False, index=True),
    Column("relationship_class", Enum(RelationshipClass, native_enum=False), nullable=False),
    Column("source_key", String, nullable=False, index=True),
    Column("target_key", String, nullable=False, index=True),
    Column("properties", JSON, nullable=False),
)

mapped_relationship_table = Table(
    "mapped_relationship",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("key", String, nullable=False, unique=True),
    Column("type", String, nullable=False, index=True),
    Column("relationship_class", Enum(RelationshipClass, native_enum=False), nullable=False),
    Column("source_key", String, nullable=False, index=True),
    Column("direction", Enum(RelationshipDirection, native_enum=False), nullable=False),
    Column("target_type", String, nullable=False),
    Column("target_filter_keys", JSON, nullable=False),
    Column("target_properties", JSON, nullable=False),
    Column("skip_target_creation", Boolean, nullable=False, default=True),
)

GRAPH_TABLES = (entity_table, relationship_table, mapped_relationship_table)
