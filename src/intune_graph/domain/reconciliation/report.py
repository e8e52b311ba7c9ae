"""Aggregation of outcomes for one ingestion step."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .outcome import Fatal, Outcome, OutcomeStatus, Reused, SkippedWithWarning, Success

if TYPE_CHECKING:
    from .outcome import SkipReason

log = getLogger(__name__)


@dataclass(slots=True)
class StepReport:
    """Outcomes of one step, in the order they happened.

    ``record`` is the only place warnings are logged, so every skipped unit of
    work produces exactly one log record.
    """

    step_id: str
    outcomes: list[Outcome] = field(default_factory=list["Outcome"])

    def record[TOutcome: Outcome](self, outcome: TOutcome) -> TOutcome:
        self.outcomes.append(outcome)
        if isinstance(outcome, SkippedWithWarning):
            log.warning(
                "%s: %s (reason=%s, key=%s, context=%s)",
                self.step_id,
                outcome.message,
                outcome.reason,
                outcome.key,
                dict(outcome.context),
            )
        elif isinstance(outcome, Fatal):
            log.error(
                "%s: step failed: %s", self.step_id, outcome.error, exc_info=outcome.error
            )
        return outcome

    @property
    def warnings(self) -> tuple[SkippedWithWarning, ...]:
        return tuple(
            outcome for outcome in self.outcomes if isinstance(outcome, SkippedWithWarning)
        )

    def warnings_for(self, reason: SkipReason) -> tuple[SkippedWithWarning, ...]:
        return tuple(warning for warning in self.warnings if warning.reason is reason)

    @property
    def created(self) -> tuple[str, ...]:
        return tuple(outcome.key for outcome in self.outcomes if isinstance(outcome, Success))

    @property
    def reused(self) -> tuple[str, ...]:
        return tuple(outcome.key for outcome in self.outcomes if isinstance(outcome, Reused))

    @property
    def fatal(self) -> Fatal | None:
        for outcome in self.outcomes:
            if isinstance(outcome, Fatal):
                return outcome
        return None

    @property
    def failed(self) -> bool:
        return self.fatal is not None

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    def summary(self) -> dict[str, int]:
        return {str(status): self.count(status) for status in OutcomeStatus}
