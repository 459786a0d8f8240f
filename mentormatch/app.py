"""MentorMatch command-line entry point."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from mentormatch.config import LOG_PATH, ensure_data_dir, load_config, load_snapshot, save_snapshot
from mentormatch.errors import MatchingError
from mentormatch.matching.batch import ApplyReport, BatchMatchingResult, BatchMatchingService
from mentormatch.matching.hungarian import SolverMode
from mentormatch.output.export import export_result
from mentormatch.profile.models import Person
from mentormatch.storage.store import InMemoryPersonStore

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, log_path: Optional[Path] = None) -> None:
    """Configure application logging."""
    if log_path is None:
        ensure_data_dir()
        log_path = LOG_PATH

    root_logger = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    resolved = str(log_path.resolve())
    has_file_handler = any(
        isinstance(handler, logging.FileHandler)
        and handler.baseFilename == resolved
        for handler in root_logger.handlers
    )
    if not has_file_handler:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mentormatch",
        description="Assign volunteers to clients from a snapshot file"
    )
    parser.add_argument(
        "snapshot",
        type=Path,
        help="YAML or JSON file with clients and volunteers"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (defaults to data/config.yaml)"
    )
    parser.add_argument(
        "--min-score",
        type=float,
        default=None,
        help="Minimum acceptable compatibility score (overrides config)"
    )
    parser.add_argument(
        "--max-clients",
        type=int,
        default=None,
        help="Maximum clients per volunteer (overrides config)"
    )
    parser.add_argument(
        "--solver",
        choices=[mode.value for mode in SolverMode],
        default=None,
        help="Assignment solver (overrides config)"
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Write the result to a .json, .csv or .md file"
    )
    parser.add_argument(
        "--apply",
        type=Path,
        default=None,
        help="Apply assignments and write the updated snapshot to this path"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log pair-level decisions"
    )
    return parser


def render_result(
    console: Console,
    result: BatchMatchingResult,
    people: Sequence[Person],
    report: Optional[ApplyReport] = None,
) -> None:
    """Print assignments and unassigned clients as rich tables."""
    names = {p.id: p.name or p.id for p in people}

    table = Table(title="Assignments")
    table.add_column("Client")
    table.add_column("Volunteer")
    table.add_column("Slot", justify="right")
    table.add_column("Score", justify="right")

    for a in sorted(result.assignments, key=lambda a: a.score, reverse=True):
        if a.score >= 0.8:
            style = "bold #10b981"
        elif a.score >= 0.6:
            style = "#d4af37"
        else:
            style = "dim"
        table.add_row(
            names.get(a.client_id, a.client_id),
            names.get(a.volunteer_id, a.volunteer_id),
            str(a.slot_index),
            Text(f"{a.score:.0%}", style=style),
        )

    console.print(table)
    console.print(
        f"Assigned {len(result.assignments)} clients, "
        f"total score {result.total_score:.2f}"
    )

    if result.unassigned_client_ids:
        unassigned = ", ".join(names.get(cid, cid) for cid in result.unassigned_client_ids)
        console.print(Text(f"Unassigned: {unassigned}", style="#ef4444"))

    if report is not None:
        console.print(f"Applied {len(report.applied)}, skipped {len(report.skipped)}")
        for skipped in report.skipped:
            console.print(
                Text(f"  {skipped.assignment.client_id}: {skipped.reason}", style="dim")
            )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    console = Console()

    try:
        config = load_config(args.config)
        overrides = {}
        if args.min_score is not None:
            overrides["min_score"] = args.min_score
        if args.max_clients is not None:
            overrides["max_clients_per_volunteer"] = args.max_clients
            overrides["eligibility"] = {
                **config.eligibility.model_dump(exclude_unset=True),
                "max_clients_per_volunteer": args.max_clients,
            }
        if args.solver is not None:
            overrides["solver_mode"] = args.solver
        if overrides:
            config = config.model_validate({**config.model_dump(exclude_unset=True), **overrides})

        clients, volunteers = load_snapshot(args.snapshot)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        logger.error(f"Could not load input: {e}")
        console.print(Text(f"Error: {e}", style="bold #ef4444"))
        return 1

    service = BatchMatchingService(config)
    result = service.run_batch(clients, volunteers)
    people = [*clients, *volunteers]

    report = None
    if args.apply is not None:
        try:
            store = InMemoryPersonStore(people)
        except (ValueError, MatchingError) as e:
            logger.error(f"Snapshot has conflicting records: {e}")
            console.print(Text(f"Error: {e}", style="bold #ef4444"))
            return 1
        report = service.apply(result, store)
        save_snapshot(store.list_all(), args.apply)
        logger.info(f"Wrote updated snapshot to {args.apply}")

    render_result(console, result, people, report)

    if args.export:
        try:
            export_result(result, args.export, people)
        except (ValueError, OSError) as e:
            logger.error(f"Export failed: {e}")
            console.print(Text(f"Export failed: {e}", style="bold #ef4444"))
            return 1
        console.print(f"Exported to {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
