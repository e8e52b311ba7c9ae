"""Reconciliation engine: outcomes, per-step reports and the store orchestrator."""

from __future__ import annotations

from .outcome import (
    Fatal,
    Outcome,
    OutcomeStatus,
    Reused,
    SkippedWithWarning,
    SkipReason,
    Success,
)
from .reconciler import EntityKeyMismatchError, Reconciler
from .report import StepReport

__all__ = [
    "EntityKeyMismatchError",
    "Fatal",
    "Outcome",
    "OutcomeStatus",
    "Reconciler",
    "Reused",
    "SkipReason",
    "SkippedWithWarning",
    "StepReport",
    "Success",
]
