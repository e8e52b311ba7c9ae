"""Immutable graph objects emitted by an ingestion run.

Entities and relationships are created once and never mutated afterwards. The
``properties`` mappings are copied and frozen on construction, and ``None``
values are dropped so that an absent source field stays absent in the graph
instead of turning into an empty value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from .enums import RelationshipClass, RelationshipDirection

if TYPE_CHECKING:
    from collections.abc import Mapping


def _frozen_properties(properties: Mapping[str, object]) -> Mapping[str, object]:
    return MappingProxyType({name: value for name, value in properties.items() if value is not None})


def _require_key(key: str, *, kind: str) -> None:
    if not key or not key.strip():
        raise ValueError(f"{kind} key must be a non-empty string")


@dataclass(frozen=True, slots=True, kw_only=True)
class Entity:
    """A typed node in the output graph."""

    key: str
    type: str
    classes: tuple[str, ...]
    properties: Mapping[str, object] = field(default_factory=dict["str", "object"])
    raw_data: Mapping[str, object] | None = None

    def __post_init__(self) -> None:
        _require_key(self.key, kind="Entity")
        if not self.classes:
            raise ValueError(f"Entity {self.key} must declare at least one class")
        object.__setattr__(self, "properties", _frozen_properties(self.properties))
        if self.raw_data is not None:
            object.__setattr__(self, "raw_data", MappingProxyType(dict(self.raw_data)))

    def get(self, name: str, default: object = None) -> object:
        return self.properties.get(name, default)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "_key": self.key,
            "_type": str(self.type),
            "_class": [str(entity_class) for entity_class in self.classes],
            **self.properties,
        }
        if self.raw_data is not None:
            payload["_rawData"] = [{"name": "default", "rawData": dict(self.raw_data)}]
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class Relationship:
    """A typed, directed edge between two entities of the same run."""

    key: str
    type: str
    relationship_class: RelationshipClass
    source_key: str
    target_key: str
    properties: Mapping[str, object] = field(default_factory=dict["str", "object"])

    def __post_init__(self) -> None:
        _require_key(self.key, kind="Relationship")
        object.__setattr__(self, "properties", _frozen_properties(self.properties))

    def with_key_suffix(self, suffix: str) -> Relationship:
        """Return a copy keyed ``<key>|<suffix>`` so parallel edges can coexist."""

        from intune_graph.domain.keys import relationship_key_with_disambiguator  # noqa: PLC0415

        return replace(self, key=relationship_key_with_disambiguator(self.key, suffix))

    def to_dict(self) -> dict[str, object]:
        return {
            "_key": self.key,
            "_type": self.type,
            "_class": str(self.relationship_class),
            "_fromEntityKey": self.source_key,
            "_toEntityKey": self.target_key,
            **self.properties,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class MappedRelationship:
    """Edge to an entity owned by another system, resolved later by the host.

    The host matches ``target_type`` plus the ``target_filter_keys`` subset of
    ``target_properties`` against entities it already knows about.
    """

    key: str
    type: str
    relationship_class: RelationshipClass
    source_key: str
    direction: RelationshipDirection
    target_type: str
    target_filter_keys: tuple[str, ...]
    target_properties: Mapping[str, object]
    skip_target_creation: bool = True

    def __post_init__(self) -> None:
        _require_key(self.key, kind="Mapped relationship")
        object.__setattr__(self, "target_properties", _frozen_properties(self.target_properties))
        missing = [name for name in self.target_filter_keys if name not in self.target_properties]
        if missing:
            raise ValueError(
                f"Mapped relationship {self.key} filters on missing properties: {', '.join(missing)}"
            )

    def to_dict(self) -> dict[str, object]:
        return {
            "_key": self.key,
            "_type": self.type,
            "_class": str(self.relationship_class),
            "_mapping": {
                "relationshipDirection": str(self.direction),
                "sourceEntityKey": self.source_key,
                "targetFilterKeys": [list(self.target_filter_keys)],
                "targetEntity": {"_type": self.target_type, **self.target_properties},
                "skipTargetCreation": self.skip_target_creation,
            },
        }

