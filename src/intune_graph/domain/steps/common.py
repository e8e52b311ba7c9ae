"""Lookups shared by several step handlers."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from intune_graph.domain.keys import account_key
from intune_graph.domain.model import DEVICE_ENTITY_TYPES

from .declarations import StepPreconditionError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from intune_graph.domain.model import Entity

    from .declarations import StepContext

log = getLogger(__name__)


def require_account(context: StepContext) -> Entity:
    account = context.store.find_entity(account_key(context.config.tenant_id))
    if account is None:
        raise StepPreconditionError(
            f"Account entity for tenant {context.config.tenant_id} has not been created"
        )
    return account


def iterate_unique_devices(context: StepContext) -> Iterator[tuple[str, Entity]]:
    """Yield ``(device_id, entity)`` once per Graph device id across device types."""

    seen: set[str] = set()
    for entity_type in DEVICE_ENTITY_TYPES:
        for entity in context.store.iterate_entities(entity_type):
            device_id = entity.get("id")
            if not isinstance(device_id, str) or not device_id:
                log.debug("Device entity %s has no id property", entity.key)
                continue
            if device_id in seen:
                log.debug("Found duplicate device entity id %s", device_id)
                continue
            seen.add(device_id)
            yield device_id, entity
