"""Ingestion steps for an Intune tenant and the runner that orders them."""

from __future__ import annotations

from typing import Final

from intune_graph.domain.keys import relationship_type
from intune_graph.domain.model import (
    DEVICE_ENTITY_TYPES,
    EntityType,
    ExternalEntityType,
    RelationshipClass,
)

from .account import create_account
from .applications import fetch_detected_applications, fetch_managed_applications
from .declarations import (
    Step,
    StepContext,
    StepDeclarationError,
    StepHandler,
    StepId,
    StepPreconditionError,
)
from .devices import build_device_host_agent_relationships, fetch_devices
from .policies import (
    fetch_compliance_policies,
    fetch_compliance_policy_states,
    fetch_device_configuration_states,
    fetch_device_configurations,
)
from .runner import RunResult, StepRunner
from .users import fetch_users


def _types(
    from_types: tuple[str, ...], relationship_class: RelationshipClass, to_types: tuple[str, ...]
) -> tuple[str, ...]:
    return tuple(
        relationship_type(from_type, relationship_class, to_type)
        for from_type in from_types
        for to_type in to_types
    )


_ACCOUNT = (EntityType.ACCOUNT,)

INTUNE_STEPS: Final[tuple[Step, ...]] = (
    Step(
        id=StepId.CREATE_ACCOUNT,
        name="Account",
        handler=create_account,
        entities=_ACCOUNT,
        mapped_relationships=_types(
            (ExternalEntityType.MICROSOFT_TENANT,), RelationshipClass.HAS, _ACCOUNT
        ),
    ),
    Step(
        id=StepId.FETCH_USERS,
        name="Users",
        handler=fetch_users,
        entities=(EntityType.USER,),
    ),
    Step(
        id=StepId.FETCH_DEVICES,
        name="Managed Devices",
        handler=fetch_devices,
        entities=DEVICE_ENTITY_TYPES,
        relationships=(
            *_types(_ACCOUNT, RelationshipClass.HAS, DEVICE_ENTITY_TYPES),
            *_types((EntityType.USER,), RelationshipClass.HAS, DEVICE_ENTITY_TYPES),
        ),
        mapped_relationships=_types(
            (ExternalEntityType.AZURE_USER,), RelationshipClass.HAS, DEVICE_ENTITY_TYPES
        ),
        depends_on=(StepId.CREATE_ACCOUNT, StepId.FETCH_USERS),
        reads=(EntityType.ACCOUNT, EntityType.USER),
    ),
    Step(
        id=StepId.BUILD_DEVICE_HOST_AGENT_RELATIONSHIPS,
        name="Build Device to Host Agent Relationships",
        handler=build_device_host_agent_relationships,
        entities=(EntityType.HOST_AGENT,),
        relationships=_types(
            (EntityType.HOST_AGENT,), RelationshipClass.MANAGES, DEVICE_ENTITY_TYPES
        ),
        depends_on=(StepId.FETCH_DEVICES,),
        reads=DEVICE_ENTITY_TYPES,
    ),
    Step(
        id=StepId.FETCH_COMPLIANCE_POLICIES,
        name="Compliance Policies",
        handler=fetch_compliance_policies,
        entities=(EntityType.COMPLIANCE_POLICY,),
        relationships=_types(_ACCOUNT, RelationshipClass.HAS, (EntityType.COMPLIANCE_POLICY,)),
        depends_on=(StepId.CREATE_ACCOUNT,),
        reads=_ACCOUNT,
    ),
    Step(
        id=StepId.FETCH_COMPLIANCE_POLICY_STATES,
        name="Compliance Policy States",
        handler=fetch_compliance_policy_states,
        entities=(EntityType.COMPLIANCE_POLICY_STATE,),
        relationships=(
            *_types(
                DEVICE_ENTITY_TYPES, RelationshipClass.HAS, (EntityType.COMPLIANCE_POLICY_STATE,)
            ),
            *_types(
                (EntityType.COMPLIANCE_POLICY,),
                RelationshipClass.IDENTIFIED,
                (EntityType.COMPLIANCE_POLICY_STATE,),
            ),
        ),
        depends_on=(StepId.FETCH_DEVICES, StepId.FETCH_COMPLIANCE_POLICIES),
        reads=(*DEVICE_ENTITY_TYPES, EntityType.COMPLIANCE_POLICY),
    ),
    Step(
        id=StepId.FETCH_DEVICE_CONFIGURATIONS,
        name="Device Configurations",
        handler=fetch_device_configurations,
        entities=(EntityType.DEVICE_CONFIGURATION,),
        relationships=_types(
            _ACCOUNT, RelationshipClass.HAS, (EntityType.DEVICE_CONFIGURATION,)
        ),
        depends_on=(StepId.CREATE_ACCOUNT,),
        reads=_ACCOUNT,
    ),
    Step(
        id=StepId.FETCH_DEVICE_CONFIGURATION_STATES,
        name="Device Configuration States",
        handler=fetch_device_configuration_states,
        entities=(EntityType.DEVICE_CONFIGURATION_STATE,),
        relationships=(
            *_types(
                DEVICE_ENTITY_TYPES,
                RelationshipClass.HAS,
                (EntityType.DEVICE_CONFIGURATION_STATE,),
            ),
            *_types(
                (EntityType.DEVICE_CONFIGURATION,),
                RelationshipClass.IDENTIFIED,
                (EntityType.DEVICE_CONFIGURATION_STATE,),
            ),
        ),
        depends_on=(StepId.FETCH_DEVICES, StepId.FETCH_DEVICE_CONFIGURATIONS),
        reads=(*DEVICE_ENTITY_TYPES, EntityType.DEVICE_CONFIGURATION),
    ),
    Step(
        id=StepId.FETCH_MANAGED_APPLICATIONS,
        name="Managed Applications",
        handler=fetch_managed_applications,
        entities=(EntityType.MANAGED_APPLICATION,),
        relationships=_types(
            DEVICE_ENTITY_TYPES, RelationshipClass.ASSIGNED, (EntityType.MANAGED_APPLICATION,)
        ),
        depends_on=(StepId.FETCH_DEVICES,),
        reads=DEVICE_ENTITY_TYPES,
    ),
    Step(
        id=StepId.FETCH_DETECTED_APPLICATIONS,
        name="Detected Applications",
        handler=fetch_detected_applications,
        entities=(EntityType.DETECTED_APPLICATION,),
        relationships=(
            *_types(
                DEVICE_ENTITY_TYPES,
                RelationshipClass.INSTALLED,
                (EntityType.DETECTED_APPLICATION,),
            ),
            *_types(
                (EntityType.MANAGED_APPLICATION,),
                RelationshipClass.MANAGES,
                (EntityType.DETECTED_APPLICATION,),
            ),
        ),
        depends_on=(StepId.FETCH_DEVICES, StepId.FETCH_MANAGED_APPLICATIONS),
        reads=(*DEVICE_ENTITY_TYPES, EntityType.MANAGED_APPLICATION),
    ),
)

__all__ = [
    "INTUNE_STEPS",
    "RunResult",
    "Step",
    "StepContext",
    "StepDeclarationError",
    "StepHandler",
    "StepId",
    "StepPreconditionError",
    "StepRunner",
]
