"""Step declarations: what a step writes, reads and depends on."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from intune_graph.domain.reconciliation import Reconciler, StepReport

if TYPE_CHECKING:
    from intune_graph.config import IntuneConfig
    from intune_graph.domain.ports import GraphObjectStore, IntuneFetcher


class StepId(StrEnum):
    CREATE_ACCOUNT = "create-account"
    FETCH_USERS = "fetch-users"
    FETCH_DEVICES = "fetch-devices"
    BUILD_DEVICE_HOST_AGENT_RELATIONSHIPS = "build-device-host-agent-relationships"
    FETCH_COMPLIANCE_POLICIES = "fetch-compliance-policies"
    FETCH_COMPLIANCE_POLICY_STATES = "fetch-compliance-policy-states"
    FETCH_DEVICE_CONFIGURATIONS = "fetch-device-configurations"
    FETCH_DEVICE_CONFIGURATION_STATES = "fetch-device-configuration-states"
    FETCH_MANAGED_APPLICATIONS = "fetch-managed-applications"
    FETCH_DETECTED_APPLICATIONS = "fetch-detected-applications"


class StepDeclarationError(ValueError):
    """Raised when the declared step graph cannot be executed."""


class StepPreconditionError(RuntimeError):
    """Raised by a handler when data a dependency should have written is absent."""


@dataclass(slots=True)
class StepContext:
    """Everything a step handler may touch during one run."""

    store: GraphObjectStore
    fetcher: IntuneFetcher
    config: IntuneConfig
    report: StepReport
    reconciler: Reconciler = field(init=False)

    def __post_init__(self) -> None:
        self.reconciler = Reconciler(self.store, self.report)


type StepHandler = Callable[[StepContext], None]


@dataclass(frozen=True, slots=True, kw_only=True)
class Step:
    """One unit of ingestion.

    ``reads`` names the entity types the handler looks up or iterates; every
    one of them must be written by a transitive dependency.
    """

    id: str
    name: str
    handler: StepHandler
    entities: tuple[str, ...] = ()
    relationships: tuple[str, ...] = ()
    mapped_relationships: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()
    reads: tuple[str, ...] = ()
