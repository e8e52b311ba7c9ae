"""Per-unit-of-work outcomes of the reconciliation engine.

Every attempt to write one entity or relationship ends in exactly one outcome.
Tolerated data anomalies become ``SkippedWithWarning``; the step continues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Mapping


class OutcomeStatus(StrEnum):
    CREATED = "created"
    REUSED = "reused"
    SKIPPED = "skipped"
    FATAL = "fatal"


class SkipReason(StrEnum):
    """Known upstream data anomalies that are skipped instead of failing a run."""

    MISSING_ENDPOINT = "missing_endpoint"
    DUPLICATE_ENTITY_KEY = "duplicate_entity_key"
    DUPLICATE_RELATIONSHIP_KEY = "duplicate_relationship_key"
    MISSING_RAW_DATA = "missing_raw_data"
    UNIDENTIFIABLE_ENDPOINT = "unidentifiable_endpoint"
    INVALID_RECORD = "invalid_record"


@dataclass(frozen=True, slots=True, kw_only=True)
class Success:
    """A new graph object was written."""

    key: str
    status: Literal[OutcomeStatus.CREATED] = OutcomeStatus.CREATED


@dataclass(frozen=True, slots=True, kw_only=True)
class Reused:
    """The key already existed and sharing it was intended (find-or-create)."""

    key: str
    status: Literal[OutcomeStatus.REUSED] = OutcomeStatus.REUSED


@dataclass(frozen=True, slots=True, kw_only=True)
class SkippedWithWarning:
    reason: SkipReason
    message: str
    key: str | None = None
    context: Mapping[str, object] = field(default_factory=dict["str", "object"])
    status: Literal[OutcomeStatus.SKIPPED] = OutcomeStatus.SKIPPED


@dataclass(frozen=True, slots=True, kw_only=True)
class Fatal:
    error: BaseException
    status: Literal[OutcomeStatus.FATAL] = OutcomeStatus.FATAL


type Outcome = Success | Reused | SkippedWithWarning | Fatal
