"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """``_type`` tags of the entities this integration produces."""

    ACCOUNT = "intune_account"
    USER = "azure_user"
    MANAGED_DEVICE = "intune_managed_device"
    USER_ENDPOINT = "user_endpoint"
    HOST_AGENT = "intune_host_agent"
    MANAGED_APPLICATION = "intune_managed_application"
    DETECTED_APPLICATION = "intune_detected_application"
    COMPLIANCE_POLICY = "intune_compliance_policy"
    COMPLIANCE_POLICY_STATE = "intune_compliance_policy_state"
    DEVICE_CONFIGURATION = "intune_device_configuration"
    DEVICE_CONFIGURATION_STATE = "intune_device_configuration_state"


# Every managed device lands in one of these types depending on its platform.
DEVICE_ENTITY_TYPES: tuple[EntityType, ...] = (
    EntityType.MANAGED_DEVICE,
    EntityType.USER_ENDPOINT,
)


class ExternalEntityType(StrEnum):
    """Entity types owned by other integrations, targeted by mapped relationships."""

    MICROSOFT_TENANT = "microsoft_tenant"
    AZURE_USER = "azure_user"


class EntityClass(StrEnum):
    """Taxonomy labels (``_class``) independent of ``_type``."""

    ACCOUNT = "Account"
    USER = "User"
    DEVICE = "Device"
    HOST = "Host"
    HOST_AGENT = "HostAgent"
    APPLICATION = "Application"
    CONFIGURATION = "Configuration"
    CONTROL_POLICY = "ControlPolicy"
    FINDING = "Finding"


class RelationshipClass(StrEnum):
    HAS = "HAS"
    IDENTIFIED = "IDENTIFIED"
    MANAGES = "MANAGES"
    ASSIGNED = "ASSIGNED"
    INSTALLED = "INSTALLED"


class RelationshipDirection(StrEnum):
    FORWARD = "FORWARD"
    REVERSE = "REVERSE"
