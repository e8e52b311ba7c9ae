"""Managed applications (what Intune deploys) and detected applications (what
devices report as installed)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from intune_graph.domain.converters import (
    UNVERSIONED,
    create_detected_application_entity,
    create_managed_application_entity,
    find_newest_version,
)
from intune_graph.domain.keys import (
    KeyDerivationError,
    detected_application_key,
    device_key,
)
from intune_graph.domain.model import EntityType, RelationshipClass
from intune_graph.domain.reconciliation import SkipReason, Success

from .common import iterate_unique_devices

if TYPE_CHECKING:
    from intune_graph.domain.model import Entity
    from intune_graph.domain.records import AppInstallStatusRecord, ManagedAppRecord

    from .declarations import StepContext


def fetch_managed_applications(context: StepContext) -> None:
    """Ingest every assigned or line-of-business app, installed anywhere or not."""

    reconciler = context.reconciler
    for managed_app in context.fetcher.iterate_managed_apps():
        try:
            app_entity = create_managed_application_entity(managed_app)
        except KeyDerivationError as exc:
            reconciler.warn(
                SkipReason.INVALID_RECORD, str(exc), context={"managedAppId": managed_app.id}
            )
            continue
        if not isinstance(reconciler.add_entity(app_entity), Success):
            continue

        for status in context.fetcher.iterate_managed_app_device_statuses(managed_app.id):
            _assign_to_device(context, managed_app, app_entity, status)


def _assign_to_device(
    context: StepContext,
    managed_app: ManagedAppRecord,
    app_entity: Entity,
    status: AppInstallStatusRecord,
) -> None:
    reconciler = context.reconciler
    status_context = {
        "deviceStatusId": status.id,
        "deviceId": status.device_id,
        "managedAppId": managed_app.id,
    }
    try:
        from_key = device_key(status.device_id)
    except KeyDerivationError:
        reconciler.warn(
            SkipReason.UNIDENTIFIABLE_ENDPOINT,
            "Install status does not name a device",
            context=status_context,
        )
        return
    if not status.id.strip():
        reconciler.warn(
            SkipReason.INVALID_RECORD, "Install status has no id", context=status_context
        )
        return

    reconciler.link(
        RelationshipClass.ASSIGNED,
        from_key,
        app_entity.key,
        disambiguator=status.id,
        properties={
            # installed, failed, notInstalled, uninstallFailed, pendingInstall or unknown
            "installState": status.install_state,
            "installStateDetail": status.install_state_detail,
            "errorCode": status.error_code,
            "installedVersion": managed_app.version or find_newest_version(managed_app),
        },
        context=status_context,
    )


def _managed_apps_by_name(context: StepContext) -> dict[str, Entity]:
    index: dict[str, Entity] = {}
    for app_entity in context.store.iterate_entities(EntityType.MANAGED_APPLICATION):
        name = app_entity.get("name")
        if isinstance(name, str) and name:
            index.setdefault(name, app_entity)
    return index


def fetch_detected_applications(context: StepContext) -> None:
    """One detected application entity per lowercased display name.

    Every device reporting an app with that name gets its own ``INSTALLED``
    edge, keyed by the detection id and carrying the detected version.
    """

    reconciler = context.reconciler
    managed_apps = _managed_apps_by_name(context)

    for device_id, device_entity in iterate_unique_devices(context):
        for detected_app in context.fetcher.iterate_detected_apps(device_id):
            try:
                app_key = detected_application_key(detected_app)
            except KeyDerivationError as exc:
                reconciler.warn(
                    SkipReason.INVALID_RECORD,
                    str(exc),
                    context={"deviceId": device_id},
                )
                continue
            if not detected_app.id.strip():
                reconciler.warn(
                    SkipReason.INVALID_RECORD,
                    "Detected application has no detection id",
                    key=app_key,
                    context={"deviceId": device_id},
                )
                continue

            detected_entity = reconciler.find_or_create_entity(
                app_key,
                lambda detected_app=detected_app: create_detected_application_entity(
                    detected_app
                ),
            )
            reconciler.connect(
                RelationshipClass.INSTALLED,
                device_entity,
                detected_entity,
                disambiguator=detected_app.id,
                properties={
                    "version": detected_app.version or UNVERSIONED,
                    "detectionId": detected_app.id,
                },
                context={"detectedAppId": detected_app.id},
            )

            managed_entity = managed_apps.get(str(detected_entity.get("name", "")))
            if managed_entity is not None:
                reconciler.connect(
                    RelationshipClass.MANAGES,
                    managed_entity,
                    detected_entity,
                    warn_on_duplicate=False,
                )
