"""Directory users, needed to attach devices to the people using them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from intune_graph.domain.converters import create_user_entity
from intune_graph.domain.keys import KeyDerivationError
from intune_graph.domain.reconciliation import SkipReason

if TYPE_CHECKING:
    from .declarations import StepContext


def fetch_users(context: StepContext) -> None:
    for user in context.fetcher.iterate_users():
        try:
            entity = create_user_entity(user)
        except KeyDerivationError as exc:
            context.reconciler.warn(
                SkipReason.INVALID_RECORD, str(exc), context={"userId": user.id}
            )
            continue
        context.reconciler.add_entity(entity)
