"""Converters for compliance policies, device configurations and their states."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from intune_graph.domain.keys import (
    compliance_policy_key,
    compliance_policy_state_key,
    device_configuration_key,
    device_configuration_state_key,
)
from intune_graph.domain.model import Entity, EntityClass, EntityType
from intune_graph.domain.records.applications import discriminator_suffix

from .common import lowercase_or_none, parse_time_property

if TYPE_CHECKING:
    from collections.abc import Mapping

    from intune_graph.domain.records import PolicyRecord, PolicyStateRecord

_POLICY_CLASSES: Final = (EntityClass.CONFIGURATION, EntityClass.CONTROL_POLICY)

# States that still leave something for the tenant to act on.
_OPEN_STATES: Final = frozenset({"noncompliant", "error", "conflict", "ingraceperiod"})


def _policy_properties(policy: PolicyRecord) -> dict[str, object]:
    return {
        "id": policy.id,
        "name": lowercase_or_none(policy.display_name),
        "displayName": policy.display_name,
        "description": policy.description,
        "policyType": discriminator_suffix(policy.odata_type),
        "createdOn": parse_time_property(policy.created_date_time),
        "lastUpdatedOn": parse_time_property(policy.last_modified_date_time),
        "version": policy.version,
    }


def create_compliance_policy_entity(policy: PolicyRecord) -> Entity:
    return Entity(
        key=compliance_policy_key(policy.id),
        type=EntityType.COMPLIANCE_POLICY,
        classes=_POLICY_CLASSES,
        properties=_policy_properties(policy),
        raw_data=policy.raw(),
    )


def create_device_configuration_entity(configuration: PolicyRecord) -> Entity:
    return Entity(
        key=device_configuration_key(configuration.id),
        type=EntityType.DEVICE_CONFIGURATION,
        classes=_POLICY_CLASSES,
        properties=_policy_properties(configuration),
        raw_data=configuration.raw(),
    )


def _state_properties(
    state: PolicyStateRecord, *, device_id: str, category: str
) -> Mapping[str, object]:
    normalized_state = lowercase_or_none(state.state)
    return {
        "id": state.id,
        "name": state.display_name,
        "displayName": state.display_name,
        "category": category,
        "state": state.state,
        "compliant": normalized_state == "compliant",
        "open": normalized_state in _OPEN_STATES,
        "platformType": state.platform_type,
        "settingCount": state.setting_count,
        "version": state.version,
        "deviceId": device_id,
        "userId": state.user_id,
        "userPrincipalName": state.user_principal_name,
    }


def create_compliance_policy_state_entity(state: PolicyStateRecord, *, device_id: str) -> Entity:
    """Finding: how one compliance policy evaluated on one device."""

    return Entity(
        key=compliance_policy_state_key(device_id, state),
        type=EntityType.COMPLIANCE_POLICY_STATE,
        classes=(EntityClass.FINDING,),
        properties=_state_properties(state, device_id=device_id, category="Endpoint compliance"),
        raw_data=state.raw(),
    )


def create_device_configuration_state_entity(
    state: PolicyStateRecord, *, device_id: str
) -> Entity:
    return Entity(
        key=device_configuration_state_key(device_id, state),
        type=EntityType.DEVICE_CONFIGURATION_STATE,
        classes=(EntityClass.FINDING,),
        properties=_state_properties(
            state, device_id=device_id, category="Endpoint configuration"
        ),
        raw_data=state.raw(),
    )
