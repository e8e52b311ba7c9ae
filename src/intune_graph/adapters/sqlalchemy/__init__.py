"""SQLAlchemy persistence for ingested graphs."""

from __future__ import annotations

from .store import SqlAlchemyGraphStore
from .tables import (
    GRAPH_TABLES,
    entity_table,
    mapped_relationship_table,
    mapper_registry,
    relationship_table,
)

__all__ = [
    "GRAPH_TABLES",
    "SqlAlchemyGraphStore",
    "entity_table",
    "mapped_relationship_table",
    "mapper_registry",
    "relationship_table",
]
