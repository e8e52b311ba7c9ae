"""Graph model: entity/relationship value objects and their vocabularies."""

from __future__ import annotations

from .enums import (
    DEVICE_ENTITY_TYPES,
    EntityClass,
    EntityType,
    ExternalEntityType,
    RelationshipClass,
    RelationshipDirection,
)
from .graph_objects import Entity, MappedRelationship, Relationship

__all__ = [
    "DEVICE_ENTITY_TYPES",
    "Entity",
    "EntityClass",
    "EntityType",
    "ExternalEntityType",
    "MappedRelationship",
    "Relationship",
    "RelationshipClass",
    "RelationshipDirection",
]
