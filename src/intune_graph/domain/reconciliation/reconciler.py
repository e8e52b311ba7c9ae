"""Find-or-create and check-then-insert orchestration over the run store.

All operations are synchronous. Nothing suspends between the existence check
for a key and the insert for the same key, so two records resolving to one key
can never both create it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from intune_graph.domain.keys import user_key
from intune_graph.domain.model import RelationshipClass
from intune_graph.domain.relationships import (
    build_multi_relationship,
    build_relationship,
    build_user_device_mapped_relationship,
)

from .outcome import Outcome, Reused, SkippedWithWarning, SkipReason, Success

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from intune_graph.domain.model import Entity, MappedRelationship, Relationship
    from intune_graph.domain.ports import GraphObjectStore

    from .report import StepReport


class EntityKeyMismatchError(ValueError):
    """Raised when a find-or-create factory builds an entity under another key."""


@dataclass(slots=True)
class Reconciler:
    """Writes one step's graph objects into the shared run store."""

    store: GraphObjectStore
    report: StepReport

    def find_entity(self, key: str) -> Entity | None:
        return self.store.find_entity(key)

    def warn(
        self,
        reason: SkipReason,
        message: str,
        *,
        key: str | None = None,
        context: Mapping[str, object] | None = None,
    ) -> SkippedWithWarning:
        return self.report.record(
            SkippedWithWarning(reason=reason, message=message, key=key, context=dict(context or {}))
        )

    def add_entity(self, entity: Entity) -> Outcome:
        if self.store.has_key(entity.key):
            return self.warn(
                SkipReason.DUPLICATE_ENTITY_KEY,
                "Possible duplicate entity key",
                key=entity.key,
                context={"_type": str(entity.type)},
            )
        self.store.add_entity(entity)
        return self.report.record(Success(key=entity.key))

    def find_or_create_entity(self, key: str, factory: Callable[[], Entity]) -> Entity:
        """Return the canonical entity for ``key``, creating it on first sight."""

        existing = self.store.find_entity(key)
        if existing is not None:
            self.report.record(Reused(key=key))
            return existing

        entity = factory()
        if entity.key != key:
            raise EntityKeyMismatchError(f"Factory for {key} built entity {entity.key}")
        created = self.store.add_entity(entity)
        self.report.record(Success(key=key))
        return created

    def add_relationship(
        self,
        relationship: Relationship,
        *,
        warn_on_duplicate: bool = True,
        context: Mapping[str, object] | None = None,
    ) -> Outcome:
        missing = [
            endpoint_key
            for endpoint_key in (relationship.source_key, relationship.target_key)
            if self.store.find_entity(endpoint_key) is None
        ]
        if missing:
            return self.warn(
                SkipReason.MISSING_ENDPOINT,
                "Relationship endpoint does not exist",
                key=relationship.key,
                context={**(context or {}), "missingKeys": missing},
            )
        return self._insert_relationship(
            relationship, warn_on_duplicate=warn_on_duplicate, context=context
        )

    def link(
        self,
        relationship_class: RelationshipClass,
        from_key: str,
        to_key: str,
        *,
        properties: Mapping[str, object] | None = None,
        disambiguator: str | None = None,
        warn_on_duplicate: bool = True,
        context: Mapping[str, object] | None = None,
    ) -> Outcome:
        """Look up both endpoints by key and connect them.

        A missing endpoint drops the edge with one warning; the lookup is not
        retried.
        """

        from_entity = self.store.find_entity(from_key)
        to_entity = self.store.find_entity(to_key)
        if from_entity is None or to_entity is None:
            missing = [
                key
                for key, entity in ((from_key, from_entity), (to_key, to_entity))
                if entity is None
            ]
            return self.warn(
                SkipReason.MISSING_ENDPOINT,
                f"Error creating {relationship_class} relationship: endpoint does not exist",
                context={**(context or {}), "missingKeys": missing},
            )
        return self.connect(
            relationship_class,
            from_entity,
            to_entity,
            properties=properties,
            disambiguator=disambiguator,
            warn_on_duplicate=warn_on_duplicate,
            context=context,
        )

    def connect(
        self,
        relationship_class: RelationshipClass,
        from_entity: Entity,
        to_entity: Entity,
        *,
        properties: Mapping[str, object] | None = None,
        disambiguator: str | None = None,
        warn_on_duplicate: bool = True,
        context: Mapping[str, object] | None = None,
    ) -> Outcome:
        """Connect two entities already known to be in the store."""

        if disambiguator is not None:
            relationship = build_multi_relationship(
                relationship_class,
                from_entity,
                to_entity,
                disambiguator=disambiguator,
                properties=properties,
            )
        else:
            relationship = build_relationship(
                relationship_class, from_entity, to_entity, properties
            )
        return self._insert_relationship(
            relationship, warn_on_duplicate=warn_on_duplicate, context=context
        )

    def add_mapped_relationship(
        self,
        relationship: MappedRelationship,
        *,
        context: Mapping[str, object] | None = None,
    ) -> Outcome:
        if self.store.find_entity(relationship.source_key) is None:
            return self.warn(
                SkipReason.MISSING_ENDPOINT,
                "Mapped relationship source does not exist",
                key=relationship.key,
                context={**(context or {}), "missingKeys": [relationship.source_key]},
            )
        if self.store.has_key(relationship.key):
            return self.warn(
                SkipReason.DUPLICATE_RELATIONSHIP_KEY,
                "Possible duplicate mapped relationship key",
                key=relationship.key,
                context=context,
            )
        self.store.add_mapped_relationship(relationship)
        return self.report.record(Success(key=relationship.key))

    def link_user_to_device(
        self,
        device_entity: Entity,
        *,
        user_id: str | None,
        email: str | None,
    ) -> Outcome:
        """Relate a device to its user.

        - user ingested in this run: direct ``user HAS device``;
        - user unknown but the device names an email: mapped relationship the
          host resolves against another integration's users;
        - neither: the edge is dropped with a warning.
        """

        user_entity = (
            self.store.find_entity(user_key(user_id)) if user_id and user_id.strip() else None
        )
        if user_entity is not None:
            return self.connect(RelationshipClass.HAS, user_entity, device_entity)

        mapped = build_user_device_mapped_relationship(device_entity, user_id=user_id, email=email)
        if mapped is not None:
            return self.add_mapped_relationship(mapped, context={"userId": user_id})

        return self.warn(
            SkipReason.UNIDENTIFIABLE_ENDPOINT,
            "Device user could not be identified",
            key=device_entity.key,
            context={"userId": user_id},
        )

    def _insert_relationship(
        self,
        relationship: Relationship,
        *,
        warn_on_duplicate: bool,
        context: Mapping[str, object] | None,
    ) -> Outcome:
        if self.store.has_key(relationship.key):
            if not warn_on_duplicate:
                return self.report.record(Reused(key=relationship.key))
            return self.warn(
                SkipReason.DUPLICATE_RELATIONSHIP_KEY,
                "Possible duplicate relationship key",
                key=relationship.key,
                context={
                    **(context or {}),
                    "relationshipClass": str(relationship.relationship_class),
                    "sourceKey": relationship.source_key,
                    "targetKey": relationship.target_key,
                },
            )
        self.store.add_relationship(relationship)
        return self.report.record(Success(key=relationship.key))
