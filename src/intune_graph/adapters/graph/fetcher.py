"""Intune records read from Microsoft Graph."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from intune_graph.domain.ports.fetching import IntuneFetcher
from intune_graph.domain.records import (
    AppInstallStatusRecord,
    CompliancePolicyRecord,
    CompliancePolicyStateRecord,
    DeviceConfigurationRecord,
    DeviceConfigurationStateRecord,
    ManagedDeviceRecord,
    UserRecord,
    parse_managed_app,
)

from .client import GraphAPIError, GraphClient

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from intune_graph.config import IntuneConfig
    from intune_graph.domain.records import DetectedAppRecord, GraphRecord, ManagedAppRecord

    from .client import GraphPayload

log = getLogger(__name__)

USERS_PATH = "/users"
MANAGED_DEVICES_PATH = "/deviceManagement/managedDevices"
MANAGED_APPS_PATH = "/deviceAppManagement/mobileApps"
COMPLIANCE_POLICIES_PATH = "/deviceManagement/deviceCompliancePolicies"
DEVICE_CONFIGURATIONS_PATH = "/deviceManagement/deviceConfigurations"

USER_FIELDS = (
    "id",
    "displayName",
    "givenName",
    "surname",
    "mail",
    "userPrincipalName",
    "jobTitle",
    "accountEnabled",
)


def _parse_records[TRecord: GraphRecord](
    payloads: list[GraphPayload],
    parse: Callable[[GraphPayload], TRecord],
    *,
    path: str,
) -> Iterator[TRecord]:
    for payload in payloads:
        try:
            yield parse(payload)
        except ValidationError as exc:
            log.warning(
                "Skipping malformed Graph record from %s (id=%s): %s",
                path,
                payload.get("id"),
                exc.errors(include_url=False),
            )


class GraphIntuneFetcher:
    """Reads every collection the ingestion steps need, one Graph call per method."""

    def __init__(self, *, config: IntuneConfig, client: GraphClient | None = None) -> None:
        self._config = config
        self._client = client or GraphClient(config=config)

    def iterate_users(self) -> Iterator[UserRecord]:
        params = {"$select": ",".join(USER_FIELDS), "$top": str(self._config.page_size)}
        payloads = self._client.fetch_all(USERS_PATH, params=params)
        return _parse_records(payloads, UserRecord.model_validate, path=USERS_PATH)

    def iterate_managed_devices(self) -> Iterator[ManagedDeviceRecord]:
        params = {"$top": str(self._config.page_size)}
        payloads = self._client.fetch_all(MANAGED_DEVICES_PATH, params=params)
        return _parse_records(
            payloads, ManagedDeviceRecord.model_validate, path=MANAGED_DEVICES_PATH
        )

    def iterate_detected_apps(self, device_id: str) -> Iterator[DetectedAppRecord]:
        path = f"{MANAGED_DEVICES_PATH}/{device_id}"
        try:
            payload = self._client.fetch_object(path, params={"$expand": "detectedApps"})
        except GraphAPIError as exc:
            if exc.not_found:
                log.info("Device %s disappeared before its detected apps were read", device_id)
                return iter(())
            raise
        device = ManagedDeviceRecord.model_validate(payload)
        return iter(device.detected_apps or ())

    def iterate_managed_apps(self) -> Iterator[ManagedAppRecord]:
        payloads = self._client.fetch_all(MANAGED_APPS_PATH)
        return _parse_records(payloads, parse_managed_app, path=MANAGED_APPS_PATH)

    def iterate_managed_app_device_statuses(self, app_id: str) -> Iterator[AppInstallStatusRecord]:
        path = f"{MANAGED_APPS_PATH}/{app_id}/deviceStatuses"
        return self._iterate_optional(path, AppInstallStatusRecord.model_validate)

    def iterate_compliance_policies(self) -> Iterator[CompliancePolicyRecord]:
        payloads = self._client.fetch_all(COMPLIANCE_POLICIES_PATH)
        return _parse_records(
            payloads, CompliancePolicyRecord.model_validate, path=COMPLIANCE_POLICIES_PATH
        )

    def iterate_compliance_policy_states(
        self, device_id: str
    ) -> Iterator[CompliancePolicyStateRecord]:
        path = f"{MANAGED_DEVICES_PATH}/{device_id}/deviceCompliancePolicyStates"
        return self._iterate_optional(path, CompliancePolicyStateRecord.model_validate)

    def iterate_device_configurations(self) -> Iterator[DeviceConfigurationRecord]:
        payloads = self._client.fetch_all(DEVICE_CONFIGURATIONS_PATH)
        return _parse_records(
            payloads, DeviceConfigurationRecord.model_validate, path=DEVICE_CONFIGURATIONS_PATH
        )

    def iterate_device_configuration_states(
        self, device_id: str
    ) -> Iterator[DeviceConfigurationStateRecord]:
        path = f"{MANAGED_DEVICES_PATH}/{device_id}/deviceConfigurationStates"
        return self._iterate_optional(path, DeviceConfigurationStateRecord.model_validate)

    def _iterate_optional[TRecord: GraphRecord](
        self, path: str, parse: Callable[[GraphPayload], TRecord]
    ) -> Iterator[TRecord]:
        """Sub-collections of one object; a vanished parent yields nothing."""

        try:
            payloads = self._client.fetch_all(path)
        except GraphAPIError as exc:
            if exc.not_found:
                log.info("Graph object for %s no longer exists", path)
                return iter(())
            raise
        return _parse_records(payloads, parse, path=path)


if TYPE_CHECKING:

    def _fetcher_check(fetcher: GraphIntuneFetcher) -> IntuneFetcher:
        return fetcher
