"""Managed device records (``/deviceManagement/managedDevices``)."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import Field

from .base import GraphRecord


class DetectedAppRecord(GraphRecord):
    """One detection of an installed application on one device.

    ``id`` is unique per detection, not per application.
    """

    id: str
    display_name: str | None = None
    version: str | None = None
    size_in_byte: int | None = None
    device_count: int | None = None
    publisher: str | None = None
    platform: str | None = None


class ManagedDeviceRecord(GraphRecord):
    id: str
    user_id: str | None = None
    device_name: str | None = None
    managed_device_owner_type: str | None = None
    enrolled_date_time: datetime | None = None
    last_sync_date_time: datetime | None = None
    operating_system: str | None = None
    os_version: str | None = None
    compliance_state: str | None = None
    jail_broken: str | None = None
    management_agent: str | None = None
    email_address: str | None = None
    azure_ad_device_id: str | None = Field(default=None, alias="azureADDeviceId")
    device_category_display_name: str | None = None
    is_supervised: bool | None = None
    is_encrypted: bool | None = None
    user_principal_name: str | None = None
    user_display_name: str | None = None
    device_model: str | None = Field(default=None, alias="model")
    manufacturer: str | None = None
    imei: str | None = None
    serial_number: str | None = None
    wifi_mac_address: str | None = Field(default=None, alias="wiFiMacAddress")
    detected_apps: tuple[DetectedAppRecord, ...] | None = None
