"""Ports for fetching Intune source records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from intune_graph.domain.records import (
        AppInstallStatusRecord,
        CompliancePolicyRecord,
        CompliancePolicyStateRecord,
        DetectedAppRecord,
        DeviceConfigurationRecord,
        DeviceConfigurationStateRecord,
        ManagedAppRecord,
        ManagedDeviceRecord,
        UserRecord,
    )


@runtime_checkable
class IntuneFetcher(Protocol):
    """Source of Intune records; pagination is the implementation's concern."""

    def iterate_users(self) -> Iterable[UserRecord]: ...

    def iterate_managed_devices(self) -> Iterable[ManagedDeviceRecord]: ...

    def iterate_detected_apps(self, device_id: str) -> Iterable[DetectedAppRecord]: ...

    def iterate_managed_apps(self) -> Iterable[ManagedAppRecord]: ...

    def iterate_managed_app_device_statuses(
        self, app_id: str
    ) -> Iterable[AppInstallStatusRecord]: ...

    def iterate_compliance_policies(self) -> Iterable[CompliancePolicyRecord]: ...

    def iterate_compliance_policy_states(
        self, device_id: str
    ) -> Iterable[CompliancePolicyStateRecord]: ...

    def iterate_device_configurations(self) -> Iterable[DeviceConfigurationRecord]: ...

    def iterate_device_configuration_states(
        self, device_id: str
    ) -> Iterable[DeviceConfigurationStateRecord]: ...


__all__ = ["IntuneFetcher"]
