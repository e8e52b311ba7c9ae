"""Builders for direct and mapped relationships.

Builders are pure: they never mutate the entities they are given and always
return a fresh value. Relationship kinds that allow several parallel edges
between the same two entities get their final key through
``build_multi_relationship``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from intune_graph.domain.keys import (
    mapped_relationship_key,
    relationship_key,
    relationship_type,
)
from intune_graph.domain.model import (
    EntityType,
    ExternalEntityType,
    MappedRelationship,
    Relationship,
    RelationshipClass,
    RelationshipDirection,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from intune_graph.domain.model import Entity


def build_relationship(
    relationship_class: RelationshipClass,
    from_entity: Entity,
    to_entity: Entity,
    properties: Mapping[str, object] | None = None,
) -> Relationship:
    """Return the ``from -> to`` edge keyed ``<CLASS>|<from>|<to>``."""

    return Relationship(
        key=relationship_key(relationship_class, from_entity.key, to_entity.key),
        type=relationship_type(from_entity.type, relationship_class, to_entity.type),
        relationship_class=relationship_class,
        source_key=from_entity.key,
        target_key=to_entity.key,
        properties=dict(properties or {}),
    )


def build_multi_relationship(
    relationship_class: RelationshipClass,
    from_entity: Entity,
    to_entity: Entity,
    *,
    disambiguator: str,
    properties: Mapping[str, object] | None = None,
) -> Relationship:
    """Edge keyed ``<CLASS>|<from>|<to>|<disambiguator>``.

    Used where every event (one detection, one install status) gets its own
    edge rather than one edge per entity pair.
    """

    base = build_relationship(relationship_class, from_entity, to_entity, properties)
    return base.with_key_suffix(disambiguator)


def build_user_device_mapped_relationship(
    device_entity: Entity,
    *,
    user_id: str | None,
    email: str | None,
) -> MappedRelationship | None:
    """``azure_user HAS device`` resolved by the host against users it knows.

    Returns ``None`` when there is no email to match the user on.
    """

    if email is None or not email.strip():
        return None
    normalized_email = email.strip().lower()
    relationship_class = RelationshipClass.HAS
    return MappedRelationship(
        key=mapped_relationship_key(
            relationship_class,
            device_entity.key,
            ExternalEntityType.AZURE_USER,
            normalized_email,
        ),
        type=relationship_type(ExternalEntityType.AZURE_USER, relationship_class, device_entity.type),
        relationship_class=relationship_class,
        source_key=device_entity.key,
        direction=RelationshipDirection.REVERSE,
        target_type=ExternalEntityType.AZURE_USER,
        target_filter_keys=("_type", "email"),
        target_properties={
            "_type": str(ExternalEntityType.AZURE_USER),
            "email": normalized_email,
            "userId": user_id,
        },
    )


def build_tenant_account_mapped_relationship(
    account_entity: Entity,
    *,
    tenant_id: str,
) -> MappedRelationship:
    """``microsoft_tenant HAS intune_account`` for linking with the tenant's own integration."""

    relationship_class = RelationshipClass.HAS
    return MappedRelationship(
        key=mapped_relationship_key(
            relationship_class,
            account_entity.key,
            ExternalEntityType.MICROSOFT_TENANT,
            tenant_id,
        ),
        type=relationship_type(
            ExternalEntityType.MICROSOFT_TENANT, relationship_class, EntityType.ACCOUNT
        ),
        relationship_class=relationship_class,
        source_key=account_entity.key,
        direction=RelationshipDirection.REVERSE,
        target_type=ExternalEntityType.MICROSOFT_TENANT,
        target_filter_keys=("_type", "tenantId"),
        target_properties={
            "_type": str(ExternalEntityType.MICROSOFT_TENANT),
            "tenantId": tenant_id,
        },
    )
