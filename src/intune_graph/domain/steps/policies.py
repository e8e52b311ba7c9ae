"""Compliance policies, device configurations and their per-device states.

Both families have the same shape: a tenant-wide policy entity owned by the
account, and one finding per device recording how that policy evaluated there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from intune_graph.domain.converters import (
    create_compliance_policy_entity,
    create_compliance_policy_state_entity,
    create_device_configuration_entity,
    create_device_configuration_state_entity,
)
from intune_graph.domain.keys import (
    KeyDerivationError,
    compliance_policy_key,
    device_configuration_key,
)
from intune_graph.domain.model import RelationshipClass
from intune_graph.domain.reconciliation import SkipReason, Success

from .common import iterate_unique_devices, require_account

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from intune_graph.domain.model import Entity
    from intune_graph.domain.ports import IntuneFetcher
    from intune_graph.domain.records import PolicyRecord, PolicyStateRecord

    from .declarations import StepContext


@dataclass(frozen=True, slots=True)
class _PolicyFamily:
    label: str
    iterate_policies: Callable[[IntuneFetcher], Iterable[PolicyRecord]]
    iterate_states: Callable[[IntuneFetcher, str], Iterable[PolicyStateRecord]]
    create_policy: Callable[[PolicyRecord], Entity]
    create_state: Callable[..., Entity]
    policy_key: Callable[[str | None], str]


_COMPLIANCE = _PolicyFamily(
    label="compliance policy",
    iterate_policies=lambda fetcher: fetcher.iterate_compliance_policies(),
    iterate_states=lambda fetcher, device_id: fetcher.iterate_compliance_policy_states(device_id),
    create_policy=create_compliance_policy_entity,
    create_state=create_compliance_policy_state_entity,
    policy_key=compliance_policy_key,
)

_CONFIGURATION = _PolicyFamily(
    label="device configuration",
    iterate_policies=lambda fetcher: fetcher.iterate_device_configurations(),
    iterate_states=lambda fetcher, device_id: fetcher.iterate_device_configuration_states(
        device_id
    ),
    create_policy=create_device_configuration_entity,
    create_state=create_device_configuration_state_entity,
    policy_key=device_configuration_key,
)


def _ingest_policies(context: StepContext, family: _PolicyFamily) -> None:
    reconciler = context.reconciler
    account = require_account(context)
    for policy in family.iterate_policies(context.fetcher):
        try:
            policy_entity = family.create_policy(policy)
        except KeyDerivationError as exc:
            reconciler.warn(SkipReason.INVALID_RECORD, str(exc), context={"policyId": policy.id})
            continue
        if isinstance(reconciler.add_entity(policy_entity), Success):
            reconciler.connect(RelationshipClass.HAS, account, policy_entity)


def _ingest_states(context: StepContext, family: _PolicyFamily) -> None:
    reconciler = context.reconciler
    for device_id, device_entity in iterate_unique_devices(context):
        for state in family.iterate_states(context.fetcher, device_id):
            try:
                state_entity = family.create_state(state, device_id=device_id)
                policy_key = family.policy_key(state.id)
            except KeyDerivationError as exc:
                reconciler.warn(
                    SkipReason.INVALID_RECORD,
                    str(exc),
                    context={"deviceId": device_id, "stateId": state.id},
                )
                continue
            if not isinstance(reconciler.add_entity(state_entity), Success):
                continue

            reconciler.connect(RelationshipClass.HAS, device_entity, state_entity)
            # state ids are the id of the policy that was evaluated
            reconciler.link(
                RelationshipClass.IDENTIFIED,
                policy_key,
                state_entity.key,
                context={"deviceId": device_id, "policy": family.label},
            )


def fetch_compliance_policies(context: StepContext) -> None:
    _ingest_policies(context, _COMPLIANCE)


def fetch_compliance_policy_states(context: StepContext) -> None:
    _ingest_states(context, _COMPLIANCE)


def fetch_device_configurations(context: StepContext) -> None:
    _ingest_policies(context, _CONFIGURATION)


def fetch_device_configuration_states(context: StepContext) -> None:
    _ingest_states(context, _CONFIGURATION)
