"""Typed views of the Microsoft Graph payloads this integration consumes."""

from __future__ import annotations

from .applications import (
    AndroidLobAppRecord,
    AndroidManagedStoreAppRecord,
    AppInstallStatusRecord,
    IosLobAppRecord,
    MacOSLobAppRecord,
    ManagedAppRecord,
    MobileLobAppRecord,
    WebAppRecord,
    WindowsAppXRecord,
    WindowsPhoneXapRecord,
    WindowsUniversalAppXRecord,
    parse_managed_app,
)
from .base import GraphRecord
from .devices import DetectedAppRecord, ManagedDeviceRecord
from .policies import (
    CompliancePolicyRecord,
    CompliancePolicyStateRecord,
    DeviceConfigurationRecord,
    DeviceConfigurationStateRecord,
    PolicyRecord,
    PolicyStateRecord,
    SettingStateRecord,
)
from .users import UserRecord

__all__ = [
    "AndroidLobAppRecord",
    "AndroidManagedStoreAppRecord",
    "AppInstallStatusRecord",
    "CompliancePolicyRecord",
    "CompliancePolicyStateRecord",
    "DetectedAppRecord",
    "DeviceConfigurationRecord",
    "DeviceConfigurationStateRecord",
    "GraphRecord",
    "IosLobAppRecord",
    "MacOSLobAppRecord",
    "ManagedAppRecord",
    "ManagedDeviceRecord",
    "MobileLobAppRecord",
    "PolicyRecord",
    "PolicyStateRecord",
    "SettingStateRecord",
    "UserRecord",
    "WebAppRecord",
    "WindowsAppXRecord",
    "WindowsPhoneXapRecord",
    "WindowsUniversalAppXRecord",
    "parse_managed_app",
]
