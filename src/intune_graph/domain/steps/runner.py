"""Dependency-ordered execution of ingestion steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from logging import getLogger
from typing import TYPE_CHECKING

from intune_graph.domain.reconciliation import Fatal, StepReport

from .declarations import StepContext, StepDeclarationError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from intune_graph.config import IntuneConfig
    from intune_graph.domain.ports import GraphObjectStore, IntuneFetcher

    from .declarations import Step

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    reports: Mapping[str, StepReport]
    skipped: tuple[str, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(step_id for step_id, report in self.reports.items() if report.failed)

    @property
    def succeeded(self) -> bool:
        return not self.failed and not self.skipped

    @property
    def warning_count(self) -> int:
        return sum(len(report.warnings) for report in self.reports.values())


class StepRunner:
    """Validate a set of step declarations and run them in dependency order.

    Each step runs at most once per run. A step whose handler raises is recorded
    as failed and every step depending on it, directly or not, is skipped.
    """

    def __init__(self, steps: Iterable[Step]) -> None:
        self._steps: dict[str, Step] = {}
        for step in steps:
            if step.id in self._steps:
                raise StepDeclarationError(f"Duplicate step id: {step.id}")
            self._steps[step.id] = step
        self._order = self._resolve_order()
        self._validate_reads()

    @property
    def steps(self) -> tuple[Step, ...]:
        """Declared steps in execution order."""

        return tuple(self._steps[step_id] for step_id in self._order)

    def dependencies_of(self, step_id: str) -> frozenset[str]:
        """Transitive dependencies of ``step_id``."""

        seen: set[str] = set()
        pending = list(self._steps[step_id].depends_on)
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self._steps[current].depends_on)
        return frozenset(seen)

    def select(self, step_ids: Collection[str]) -> tuple[Step, ...]:
        """Steps needed to run ``step_ids``, dependencies included, in order."""

        unknown = sorted(set(step_ids) - self._steps.keys())
        if unknown:
            raise StepDeclarationError(f"Unknown step ids: {', '.join(unknown)}")
        wanted: set[str] = set(step_ids)
        for step_id in step_ids:
            wanted |= self.dependencies_of(step_id)
        return tuple(step for step in self.steps if step.id in wanted)

    def run(
        self,
        *,
        store: GraphObjectStore,
        fetcher: IntuneFetcher,
        config: IntuneConfig,
        only: Collection[str] | None = None,
    ) -> RunResult:
        selected = self.select(only) if only else self.steps
        reports: dict[str, StepReport] = {}
        incomplete: set[str] = set()
        skipped: list[str] = []

        for step in selected:
            blocked_by = sorted(set(step.depends_on) & incomplete)
            if blocked_by:
                log.warning(
                    "Skipping step %s: dependencies did not complete: %s",
                    step.id,
                    ", ".join(blocked_by),
                )
                incomplete.add(step.id)
                skipped.append(step.id)
                continue

            report = StepReport(step.id)
            reports[step.id] = report
            log.info("Running step %s (%s)", step.id, step.name)
            try:
                step.handler(StepContext(store, fetcher, config, report))
            except Exception as exc:  # noqa: BLE001
                report.record(Fatal(error=exc))
                incomplete.add(step.id)
                continue
            log.info("Finished step %s: %s", step.id, report.summary())

        return RunResult(reports=reports, skipped=tuple(skipped))

    def _resolve_order(self) -> tuple[str, ...]:
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for step in self._steps.values():
            for dependency in step.depends_on:
                if dependency not in self._steps:
                    raise StepDeclarationError(
                        f"Step {step.id} depends on unknown step {dependency}"
                    )
            sorter.add(step.id, *step.depends_on)
        try:
            return tuple(sorter.static_order())
        except CycleError as exc:
            cycle = " -> ".join(exc.args[1])
            raise StepDeclarationError(f"Step dependency cycle: {cycle}") from exc

    def _validate_reads(self) -> None:
        for step in self._steps.values():
            if not step.reads:
                continue
            written: set[str] = set()
            for dependency in self.dependencies_of(step.id):
                written.update(self._steps[dependency].entities)
            unsatisfied = sorted(set(step.reads) - written)
            if unsatisfied:
                raise StepDeclarationError(
                    f"Step {step.id} reads {', '.join(unsatisfied)} "
                    "which no dependency writes"
                )
