"""Converters for managed and detected applications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from pydantic.alias_generators import to_camel

from intune_graph.domain.keys import detected_application_key, managed_application_key
from intune_graph.domain.model import Entity, EntityClass, EntityType
from intune_graph.domain.records import (
    AndroidLobAppRecord,
    AndroidManagedStoreAppRecord,
    MobileLobAppRecord,
    WebAppRecord,
)

from .common import lowercase_or_none, parse_time_property

if TYPE_CHECKING:
    from intune_graph.domain.records import DetectedAppRecord, ManagedAppRecord

UNVERSIONED: Final = "unversioned"

# Substrings of ``@odata.type`` that mark an app as usable on mobile platforms:
# iPhone/iPad types, Android types, Windows phone types, and web apps (which run
# on both mobile and desktop).
_MOBILE_MARKERS: Final = ("ios", "android", "mobile", "webApp")

# Ordered by preference; ``versionName`` is the human readable X.Y.Z form.
_VERSION_FIELDS: Final = (
    "version_name",
    "version_code",
    "version_number",
    "identity_version",
    "version",
)


def is_line_of_business(discriminator: str | None) -> bool:
    """Line-of-business apps are uploaded to Intune by the tenant itself.

    Everything else comes from a public store or a website. Examples of
    ``discriminator``: ``"#microsoft.graph.webApp"``,
    ``"#microsoft.graph.androidLobApp"``.
    """

    if not discriminator:
        return False
    return "lob" in discriminator.lower()


def is_mobile(discriminator: str | None) -> bool:
    if not discriminator:
        return False
    lowered = discriminator.lower()
    return any(marker.lower() in lowered for marker in _MOBILE_MARKERS)


def find_newest_version(app: ManagedAppRecord) -> str:
    """Return the best available version string of ``app``.

    Subtypes without a typed field for a version still keep it among the
    record's extras, under its wire name.
    """

    extras = app.model_extra or {}
    for field_name in _VERSION_FIELDS:
        value = getattr(app, field_name, None)
        if value is None:
            value = extras.get(to_camel(field_name))
        if value is not None:
            return str(value)
    return UNVERSIONED


def _production_url(app: ManagedAppRecord) -> str | None:
    if isinstance(app, WebAppRecord):
        return app.app_url
    if isinstance(app, AndroidManagedStoreAppRecord):
        return app.app_store_url
    return None


def _package_id(app: ManagedAppRecord) -> str | None:
    if isinstance(app, AndroidLobAppRecord | AndroidManagedStoreAppRecord):
        return app.package_id
    return None


def create_managed_application_entity(app: ManagedAppRecord) -> Entity:
    """Application as Intune manages it, independent of any installation.

    Intune uses these to apply policies and configurations to off-the-shelf or
    uploaded applications.
    """

    line_of_business = is_line_of_business(app.odata_type)
    return Entity(
        key=managed_application_key(app.id),
        type=EntityType.MANAGED_APPLICATION,
        classes=(EntityClass.APPLICATION,),
        properties={
            "id": app.id,
            "name": lowercase_or_none(app.display_name),
            "displayName": app.display_name,
            "description": app.description,
            "notes": [app.notes] if app.notes else [],
            "COTS": not line_of_business,
            "external": not line_of_business,
            "mobile": is_mobile(app.odata_type),
            "productionURL": _production_url(app),
            "publisher": app.publisher,
            # available for download
            "isPublished": app.publishing_state == "published",
            "createdOn": parse_time_property(app.created_date_time),
            "lastUpdatedOn": parse_time_property(app.last_modified_date_time),
            # featured on the Company Portal
            "featured": app.is_featured,
            "privacyInformationURL": app.privacy_information_url,
            "informationURL": app.information_url,
            "owner": app.owner or None,
            "developer": app.developer,
            "version": find_newest_version(app),
            "committedContentVersion": (
                app.committed_content_version if isinstance(app, MobileLobAppRecord) else None
            ),
            "packageId": _package_id(app),
        },
        raw_data=app.raw(),
    )


def create_detected_application_entity(detected_app: DetectedAppRecord) -> Entity:
    """Application as observed on devices, shared across every device running it.

    Other integrations may link to this entity, so it carries nothing specific
    to one detection.
    """

    return Entity(
        key=detected_application_key(detected_app),
        type=EntityType.DETECTED_APPLICATION,
        classes=(EntityClass.APPLICATION,),
        properties={
            "name": lowercase_or_none(detected_app.display_name),
            "displayName": detected_app.display_name,
            "version": detected_app.version,
            "sizeInByte": detected_app.size_in_byte,
            "publisher": detected_app.publisher,
        },
    )
