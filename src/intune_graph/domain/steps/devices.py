"""Managed devices and the Intune host agent running on each of them.

A managed device is a physical or virtual device plus the Intune host agent.
They are separate entities because the device may be shared with other
integrations while the agent is unique to this one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from intune_graph.domain.converters import create_host_agent_entity, create_managed_device_entity
from intune_graph.domain.keys import KeyDerivationError
from intune_graph.domain.model import DEVICE_ENTITY_TYPES, RelationshipClass
from intune_graph.domain.reconciliation import SkipReason, Success
from intune_graph.domain.records import ManagedDeviceRecord

from .common import require_account

if TYPE_CHECKING:
    from .declarations import StepContext


def fetch_devices(context: StepContext) -> None:
    reconciler = context.reconciler
    account = require_account(context)

    for device in context.fetcher.iterate_managed_devices():
        try:
            device_entity = create_managed_device_entity(device)
        except KeyDerivationError as exc:
            reconciler.warn(SkipReason.INVALID_RECORD, str(exc), context={"deviceId": device.id})
            continue
        if not isinstance(reconciler.add_entity(device_entity), Success):
            continue

        reconciler.connect(RelationshipClass.HAS, account, device_entity)
        reconciler.link_user_to_device(
            device_entity, user_id=device.user_id, email=device.email_address
        )


def build_device_host_agent_relationships(context: StepContext) -> None:
    reconciler = context.reconciler
    for entity_type in DEVICE_ENTITY_TYPES:
        for device_entity in context.store.iterate_entities(entity_type):
            if device_entity.raw_data is None:
                reconciler.warn(
                    SkipReason.MISSING_RAW_DATA,
                    "Raw data was not found for device",
                    key=device_entity.key,
                )
                continue
            try:
                device = ManagedDeviceRecord.model_validate(dict(device_entity.raw_data))
            except ValidationError as exc:
                reconciler.warn(
                    SkipReason.MISSING_RAW_DATA,
                    "Raw data for device could not be read",
                    key=device_entity.key,
                    context={"errors": exc.error_count()},
                )
                continue

            host_agent = create_host_agent_entity(device)
            if not isinstance(reconciler.add_entity(host_agent), Success):
                continue
            reconciler.connect(RelationshipClass.MANAGES, host_agent, device_entity)
