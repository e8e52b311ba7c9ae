"""Identity and key rules for entities and relationships.

Two addressing policies exist:

- id-addressed entities (devices, managed applications, policies, users) use
  the id Graph assigns them, which is already globally unique;
- name-addressed entities (detected applications) use a fixed prefix plus the
  lowercased display name, so that every detection of "Slack" on every device
  folds into one canonical entity.

Keys are never shorter than ``MIN_KEY_LENGTH``; short natural ids are
namespaced so they cannot collide with reserved short keys of the host.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Final

from intune_graph.domain.model.enums import EntityType, RelationshipClass

if TYPE_CHECKING:
    from intune_graph.domain.records import (
        DetectedAppRecord,
        GraphRecord,
        PolicyStateRecord,
    )

MIN_KEY_LENGTH: Final = 10
KEY_SEPARATOR: Final = "|"

DETECTED_APP_KEY_PREFIX: Final = "IntuneDetected:"
HOST_AGENT_KEY_PREFIX: Final = "IntuneHostAgent:"
ACCOUNT_KEY_PREFIX: Final = "IntuneAccount:"
COMPLIANCE_STATE_KEY_PREFIX: Final = "IntuneComplianceState:"
CONFIGURATION_STATE_KEY_PREFIX: Final = "IntuneConfigurationState:"

# Devices share one namespace whatever ``_type`` they end up with, so a status
# record that only knows the device id resolves to the same key.
DEVICE_KEY_NAMESPACE: Final = "intune_device"


class KeyDerivationError(ValueError):
    """Raised when a record carries nothing a key could be derived from."""


def id_key(namespace: str, source_id: str | None) -> str:
    """Return ``source_id`` verbatim, namespaced when it is too short."""

    if source_id is None or not source_id.strip():
        raise KeyDerivationError(f"Missing source id for {namespace} key")
    if len(source_id) < MIN_KEY_LENGTH:
        return f"{namespace}:{source_id}"
    return source_id


def device_key(device_id: str | None) -> str:
    return id_key(DEVICE_KEY_NAMESPACE, device_id)


def user_key(user_id: str | None) -> str:
    return id_key(EntityType.USER, user_id)


def managed_application_key(app_id: str | None) -> str:
    return id_key(EntityType.MANAGED_APPLICATION, app_id)


def compliance_policy_key(policy_id: str | None) -> str:
    return id_key(EntityType.COMPLIANCE_POLICY, policy_id)


def device_configuration_key(configuration_id: str | None) -> str:
    return id_key(EntityType.DEVICE_CONFIGURATION, configuration_id)


def account_key(tenant_id: str) -> str:
    if not tenant_id.strip():
        raise KeyDerivationError("Missing tenant id for account key")
    return ACCOUNT_KEY_PREFIX + tenant_id


def host_agent_key(device_id: str | None) -> str:
    if device_id is None or not device_id.strip():
        raise KeyDerivationError("Missing device id for host agent key")
    return HOST_AGENT_KEY_PREFIX + device_id


def detected_application_key(detected_app: DetectedAppRecord) -> str:
    """Key a detected application by name, falling back to the detection id.

    The detection id is unique per device, so keying by it would defeat the
    lookup that lets many devices share one application entity. The id is only
    used when the display name is absent altogether.
    """

    if detected_app.display_name is not None:
        return DETECTED_APP_KEY_PREFIX + detected_app.display_name.lower()
    if detected_app.id and detected_app.id.strip():
        return DETECTED_APP_KEY_PREFIX + detected_app.id
    raise KeyDerivationError("Detected application has neither display name nor id")


def _state_key(prefix: str, device_id: str | None, state: PolicyStateRecord) -> str:
    if device_id is None or not device_id.strip():
        raise KeyDerivationError(f"Missing device id for {prefix} key")
    if not state.id.strip():
        raise KeyDerivationError(f"Missing state id for {prefix} key")
    return f"{prefix}{device_id}:{state.id}"


def compliance_policy_state_key(device_id: str | None, state: PolicyStateRecord) -> str:
    return _state_key(COMPLIANCE_STATE_KEY_PREFIX, device_id, state)


def device_configuration_state_key(device_id: str | None, state: PolicyStateRecord) -> str:
    return _state_key(CONFIGURATION_STATE_KEY_PREFIX, device_id, state)


def _record_id(record: GraphRecord) -> str | None:
    value = getattr(record, "id", None)
    return value if isinstance(value, str) else None


_KEY_RULES: Final[Mapping[EntityType, Callable[[GraphRecord], str]]] = {
    EntityType.USER: lambda record: user_key(_record_id(record)),
    EntityType.MANAGED_DEVICE: lambda record: device_key(_record_id(record)),
    EntityType.USER_ENDPOINT: lambda record: device_key(_record_id(record)),
    EntityType.HOST_AGENT: lambda record: host_agent_key(_record_id(record)),
    EntityType.MANAGED_APPLICATION: lambda record: managed_application_key(_record_id(record)),
    EntityType.DETECTED_APPLICATION: lambda record: detected_application_key(record),  # type: ignore[arg-type]
    EntityType.COMPLIANCE_POLICY: lambda record: compliance_policy_key(_record_id(record)),
    EntityType.DEVICE_CONFIGURATION: lambda record: device_configuration_key(_record_id(record)),
}

_DEVICE_SCOPED_KEY_RULES: Final[
    Mapping[EntityType, Callable[[str | None, PolicyStateRecord], str]]
] = {
    EntityType.COMPLIANCE_POLICY_STATE: compliance_policy_state_key,
    EntityType.DEVICE_CONFIGURATION_STATE: device_configuration_state_key,
}


def compute_entity_key(
    entity_type: EntityType,
    record: GraphRecord,
    *,
    device_id: str | None = None,
) -> str:
    """Compute the run-unique key of the entity ``record`` converts to.

    Per-device state records need the owning ``device_id`` because the state id
    alone repeats across devices.
    """

    scoped_rule = _DEVICE_SCOPED_KEY_RULES.get(entity_type)
    if scoped_rule is not None:
        return scoped_rule(device_id, record)  # type: ignore[arg-type]
    rule = _KEY_RULES.get(entity_type)
    if rule is None:
        raise KeyDerivationError(f"No key rule for entity type {entity_type}")
    return rule(record)


def relationship_key(
    relationship_class: RelationshipClass,
    source_key: str,
    target_key: str,
) -> str:
    """Default relationship key: ``<CLASS>|<sourceKey>|<targetKey>``."""

    return KEY_SEPARATOR.join((str(relationship_class), source_key, target_key))


def relationship_key_with_disambiguator(base_key: str, disambiguator: str) -> str:
    if not disambiguator:
        raise KeyDerivationError(f"Empty disambiguator for relationship {base_key}")
    return f"{base_key}{KEY_SEPARATOR}{disambiguator}"


def relationship_type(
    from_type: str,
    relationship_class: RelationshipClass,
    to_type: str,
) -> str:
    """``intune_device`` + ``HAS`` + ``intune_x`` -> ``intune_device_has_intune_x``."""

    return f"{from_type}_{str(relationship_class).lower()}_{to_type}"


def mapped_relationship_key(
    relationship_class: RelationshipClass,
    source_key: str,
    target_type: str,
    target_value: str,
) -> str:
    return relationship_key(relationship_class, source_key, f"{target_type}:{target_value}")
