"""Managed application records (``/deviceAppManagement/mobileApps``).

Graph returns every mobile app subtype from one endpoint; the concrete shape
is named by ``@odata.type``. Each subtype gets its own record class and
``parse_managed_app`` picks it through a dispatch table, falling back to the
generic record for subtypes nothing here needs to look into.
"""

from __future__ import annotations

from collections.abc import Mapping  # noqa: TC003
from datetime import datetime  # noqa: TC003
from typing import Final

from pydantic import Field

from .base import GraphRecord


class ManagedAppRecord(GraphRecord):
    id: str
    odata_type: str | None = Field(default=None, alias="@odata.type")
    display_name: str | None = None
    description: str | None = None
    publisher: str | None = None
    notes: str | None = None
    owner: str | None = None
    developer: str | None = None
    publishing_state: str | None = None
    is_featured: bool | None = None
    privacy_information_url: str | None = None
    information_url: str | None = None
    created_date_time: datetime | None = None
    last_modified_date_time: datetime | None = None
    version: str | None = None


class WebAppRecord(ManagedAppRecord):
    app_url: str | None = None
    use_managed_browser: bool | None = None


class AndroidManagedStoreAppRecord(ManagedAppRecord):
    package_id: str | None = None
    app_identifier: str | None = None
    app_store_url: str | None = None


class MobileLobAppRecord(ManagedAppRecord):
    committed_content_version: str | None = None
    file_name: str | None = None
    size: int | None = None


class AndroidLobAppRecord(MobileLobAppRecord):
    package_id: str | None = None
    version_name: str | None = None
    version_code: str | None = None


class IosLobAppRecord(MobileLobAppRecord):
    bundle_id: str | None = None
    build_number: str | None = None
    version_number: str | None = None


class WindowsPhoneXapRecord(MobileLobAppRecord):
    identity_version: str | None = None
    product_identifier: str | None = None


class WindowsAppXRecord(MobileLobAppRecord):
    identity_name: str | None = None
    identity_publisher_hash: str | None = None
    identity_resource_identifier: str | None = None
    identity_version: str | None = None


class WindowsUniversalAppXRecord(WindowsAppXRecord):
    """AppX or MSIX package; Graph sends the same identity fields."""


class MacOSLobAppRecord(MobileLobAppRecord):
    bundle_id: str | None = None
    build_number: str | None = None
    version_number: str | None = None


MANAGED_APP_RECORD_TYPES: Final[Mapping[str, type[ManagedAppRecord]]] = {
    "webapp": WebAppRecord,
    "androidmanagedstoreapp": AndroidManagedStoreAppRecord,
    "androidlobapp": AndroidLobAppRecord,
    "managedandroidlobapp": AndroidLobAppRecord,
    "ioslobapp": IosLobAppRecord,
    "managedioslobapp": IosLobAppRecord,
    "windowsphonexap": WindowsPhoneXapRecord,
    "mobilelobapp": MobileLobAppRecord,
    "windowsmobilemsi": MobileLobAppRecord,
    "windowsappx": WindowsAppXRecord,
    "windowsuniversalappx": WindowsUniversalAppXRecord,
    "win32lobapp": MobileLobAppRecord,
    "macoslobapp": MacOSLobAppRecord,
}


def discriminator_suffix(discriminator: str | None) -> str | None:
    """``"#microsoft.graph.androidLobApp"`` -> ``"androidlobapp"``."""

    if not discriminator:
        return None
    return discriminator.rsplit(".", 1)[-1].lstrip("#").lower()


def record_type_for(discriminator: str | None) -> type[ManagedAppRecord]:
    suffix = discriminator_suffix(discriminator)
    if suffix is None:
        return ManagedAppRecord
    return MANAGED_APP_RECORD_TYPES.get(suffix, ManagedAppRecord)


def parse_managed_app(payload: Mapping[str, object] | ManagedAppRecord) -> ManagedAppRecord:
    if isinstance(payload, ManagedAppRecord):
        return payload
    discriminator = payload.get("@odata.type")
    record_type = record_type_for(discriminator if isinstance(discriminator, str) else None)
    return record_type.model_validate(payload)


class AppInstallStatusRecord(GraphRecord):
    """Install status of one managed app on one device (``deviceStatuses``)."""

    id: str
    device_name: str | None = None
    device_id: str | None = None
    last_sync_date_time: datetime | None = None
    install_state: str | None = None
    install_state_detail: str | None = None
    error_code: int | None = None
    os_version: str | None = None
    os_description: str | None = None
    user_name: str | None = None
    user_principal_name: str | None = None
