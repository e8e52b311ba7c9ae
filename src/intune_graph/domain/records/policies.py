"""Compliance policy and device configuration records, plus per-device states."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import Field

from .base import GraphRecord


class PolicyRecord(GraphRecord):
    """Shared shape of ``deviceCompliancePolicy`` and ``deviceConfiguration``."""

    id: str
    odata_type: str | None = Field(default=None, alias="@odata.type")
    display_name: str | None = None
    description: str | None = None
    created_date_time: datetime | None = None
    last_modified_date_time: datetime | None = None
    version: int | None = None


class CompliancePolicyRecord(PolicyRecord):
    pass


class DeviceConfigurationRecord(PolicyRecord):
    pass


class SettingStateRecord(GraphRecord):
    setting: str | None = None
    setting_name: str | None = None
    state: str | None = None
    error_code: int | None = None
    error_description: str | None = None
    current_value: str | None = None


class PolicyStateRecord(GraphRecord):
    """Per-device evaluation result of one policy.

    ``id`` identifies the evaluated policy; it repeats across devices.
    """

    id: str
    display_name: str | None = None
    version: int | None = None
    platform_type: str | None = None
    state: str | None = None
    setting_count: int | None = None
    setting_states: tuple[SettingStateRecord, ...] | None = None
    user_id: str | None = None
    user_principal_name: str | None = None


class CompliancePolicyStateRecord(PolicyStateRecord):
    pass


class DeviceConfigurationStateRecord(PolicyStateRecord):
    pass
