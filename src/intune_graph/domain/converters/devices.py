"""Converters for users, managed devices and their Intune host agents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from intune_graph.domain.keys import account_key, device_key, host_agent_key, user_key
from intune_graph.domain.model import Entity, EntityClass, EntityType

from .common import lowercase_or_none, parse_time_property

if TYPE_CHECKING:
    from intune_graph.domain.records import ManagedDeviceRecord, UserRecord

_DESKTOP_OPERATING_SYSTEMS: Final = ("windows", "macos", "linux")
_MOBILE_WINDOWS_MARKERS: Final = ("mobile", "phone")


def is_desktop(operating_system: str | None) -> bool:
    if not operating_system:
        return False
    normalized = operating_system.lower().replace(" ", "")
    if any(marker in normalized for marker in _MOBILE_WINDOWS_MARKERS):
        return False
    return normalized.startswith(_DESKTOP_OPERATING_SYSTEMS)


def device_entity_type(device: ManagedDeviceRecord) -> EntityType:
    if is_desktop(device.operating_system):
        return EntityType.USER_ENDPOINT
    return EntityType.MANAGED_DEVICE


def create_account_entity(tenant_id: str, *, client_id: str | None = None) -> Entity:
    return Entity(
        key=account_key(tenant_id),
        type=EntityType.ACCOUNT,
        classes=(EntityClass.ACCOUNT,),
        properties={
            "name": "Intune",
            "displayName": f"Intune ({tenant_id})",
            "tenantId": tenant_id,
            "clientId": client_id,
        },
    )


def create_user_entity(user: UserRecord) -> Entity:
    return Entity(
        key=user_key(user.id),
        type=EntityType.USER,
        classes=(EntityClass.USER,),
        properties={
            "id": user.id,
            "name": user.display_name,
            "displayName": user.display_name,
            "firstName": user.given_name,
            "lastName": user.surname,
            "email": lowercase_or_none(user.mail),
            "userPrincipalName": user.user_principal_name,
            "jobTitle": user.job_title,
            "active": user.account_enabled,
        },
        raw_data=user.raw(),
    )


def create_managed_device_entity(device: ManagedDeviceRecord) -> Entity:
    """Physical or virtual device enrolled in Intune.

    The raw record is kept because the host agent step rebuilds the agent
    entity from it.
    """

    entity_type = device_entity_type(device)
    classes = (
        (EntityClass.DEVICE, EntityClass.HOST)
        if entity_type is EntityType.USER_ENDPOINT
        else (EntityClass.DEVICE,)
    )
    return Entity(
        key=device_key(device.id),
        type=entity_type,
        classes=classes,
        properties={
            "id": device.id,
            "name": device.device_name,
            "displayName": device.device_name or device.id,
            "deviceName": device.device_name,
            "userId": device.user_id,
            "userPrincipalName": device.user_principal_name,
            "userName": device.user_display_name,
            "email": lowercase_or_none(device.email_address),
            "osName": device.operating_system,
            "osVersion": device.os_version,
            "platform": lowercase_or_none(device.operating_system),
            "complianceState": device.compliance_state,
            "compliant": device.compliance_state == "compliant",
            "ownerType": device.managed_device_owner_type,
            "enrolledOn": parse_time_property(device.enrolled_date_time),
            "lastSeenOn": parse_time_property(device.last_sync_date_time),
            "make": device.manufacturer,
            "model": device.device_model,
            "serial": device.serial_number,
            "imei": device.imei or None,
            "macAddress": device.wifi_mac_address or None,
            "encrypted": device.is_encrypted,
            "supervised": device.is_supervised,
            "jailBroken": (
                device.jail_broken.lower() == "true" if device.jail_broken is not None else None
            ),
            "azureActiveDirectoryDeviceId": device.azure_ad_device_id,
            "category": device.device_category_display_name,
            "managementAgent": device.management_agent,
        },
        raw_data=device.raw(),
    )


def create_host_agent_entity(device: ManagedDeviceRecord) -> Entity:
    """The Intune agent on a device.

    Devices may be shared with other integrations; the agent is what makes a
    device Intune-managed, so it is modeled on its own.
    """

    return Entity(
        key=host_agent_key(device.id),
        type=EntityType.HOST_AGENT,
        classes=(EntityClass.HOST_AGENT,),
        properties={
            "name": "Intune",
            "displayName": f"{device.device_name or device.id} Intune host agent",
            "function": ["endpoint-configuration", "endpoint-compliance"],
            "managementAgent": device.management_agent,
            "lastSeenOn": parse_time_property(device.last_sync_date_time),
            "active": True,
        },
    )
