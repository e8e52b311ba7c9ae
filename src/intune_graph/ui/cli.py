from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from intune_graph import __version__
from intune_graph.app import (
    export_graph,
    ingest_intune,
    load_intune_config,
    open_store,
    verify_graph_access,
)
from intune_graph.config import ConfigurationError, configure_logging
from intune_graph.domain.steps import INTUNE_STEPS, StepDeclarationError, StepRunner

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from intune_graph.domain.steps import RunResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest an Intune tenant into an entity graph")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Run the ingestion steps")
    store_group = sync.add_mutually_exclusive_group()
    store_group.add_argument(
        "--database",
        type=str,
        help=(
            "SQLAlchemy URI to persist the graph to "
            "(defaults to INTUNE_GRAPH_DATABASE_URI or a per-tenant file in the data dir)"
        ),
    )
    store_group.add_argument(
        "--memory",
        action="store_true",
        help="Keep the graph in memory only",
    )
    sync.add_argument(
        "--step",
        dest="steps",
        action="append",
        choices=[step.id for step in INTUNE_STEPS],
        help="Only run this step and its dependencies (repeatable)",
    )
    sync.add_argument(
        "--http-cache",
        action="store_true",
        help="Cache Graph responses on disk between runs",
    )
    sync.add_argument(
        "--output",
        type=Path,
        help="Write the resulting graph to this JSON file",
    )

    subparsers.add_parser("steps", help="List steps in execution order")

    return parser.parse_args(list(argv))


def _list_steps() -> None:
    runner = StepRunner(INTUNE_STEPS)
    for step in runner.steps:
        depends_on = ", ".join(step.depends_on) or "-"
        sys.stdout.write(f"{step.id}\t{step.name}\tdepends on: {depends_on}\n")


def _log_result(result: RunResult) -> None:
    for step_id, report in result.reports.items():
        log.info("%s: %s", step_id, report.summary())
    for step_id in result.skipped:
        log.warning("%s: skipped", step_id)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    if parsed_args.command == "steps":
        _list_steps()
        return

    if parsed_args.steps:
        try:
            StepRunner(INTUNE_STEPS).select(parsed_args.steps)
        except StepDeclarationError:
            log.exception("Invalid step selection")
            sys.exit(2)

    try:
        config = load_intune_config(http_cache=parsed_args.http_cache)
        verify_graph_access(config)
        store = open_store(
            memory=parsed_args.memory,
            database_uri=parsed_args.database,
            tenant_id=config.tenant_id,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Could not reach Graph or open the graph store")
        sys.exit(1)

    try:
        result = ingest_intune(config=config, store=store, only=parsed_args.steps)
    except StepDeclarationError:
        log.exception("Invalid step selection")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during ingestion")
        sys.exit(1)

    _log_result(result)
    if parsed_args.output is not None:
        export_graph(store, parsed_args.output)
    if not result.succeeded:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
