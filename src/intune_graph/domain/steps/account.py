"""The account entity every other Intune entity hangs off."""

from __future__ import annotations

from typing import TYPE_CHECKING

from intune_graph.domain.converters import create_account_entity
from intune_graph.domain.relationships import build_tenant_account_mapped_relationship

if TYPE_CHECKING:
    from .declarations import StepContext


def create_account(context: StepContext) -> None:
    config = context.config
    account = create_account_entity(config.tenant_id, client_id=config.client_id)
    context.reconciler.add_entity(account)
    context.reconciler.add_mapped_relationship(
        build_tenant_account_mapped_relationship(account, tenant_id=config.tenant_id)
    )
