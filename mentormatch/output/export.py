"""Export functions for batch matching results in multiple formats."""

import csv
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from mentormatch.matching.batch import BatchMatchingResult
from mentormatch.profile.models import Person


def _name_lookup(people: Optional[Iterable[Person]]) -> Dict[str, str]:
    return {p.id: p.name for p in people or []}


def _result_hash(result: BatchMatchingResult) -> str:
    """Short fingerprint of the assignment set, for comparing runs."""
    pairs = sorted(f"{a.client_id}:{a.volunteer_id}" for a in result.assignments)
    return hashlib.md5("|".join(pairs).encode()).hexdigest()[:8]


def _rows(result: BatchMatchingResult, names: Dict[str, str]) -> List[Dict[str, Any]]:
    # Highest score first; the stable sort keeps solver order for ties
    ordered = sorted(result.assignments, key=lambda a: a.score, reverse=True)
    return [
        {
            "rank": i,
            "client_id": a.client_id,
            "client_name": names.get(a.client_id, ""),
            "volunteer_id": a.volunteer_id,
            "volunteer_name": names.get(a.volunteer_id, ""),
            "slot_index": a.slot_index,
            "score": round(a.score, 4),
        }
        for i, a in enumerate(ordered, 1)
    ]


def export_json(
    result: BatchMatchingResult,
    filepath: str,
    people: Optional[Iterable[Person]] = None,
) -> None:
    """Export a batch result to JSON format.

    Args:
        result: Batch matching result
        filepath: Path to write JSON file
        people: Optional records used to add names

    Raises:
        IOError: If file cannot be written
    """
    names = _name_lookup(people)

    export_data = {
        "exported_at": datetime.now().isoformat(),
        "result_hash": _result_hash(result),
        "total_score": round(result.total_score, 4),
        "assigned_count": len(result.assignments),
        "unassigned_count": len(result.unassigned_client_ids),
        "assignments": _rows(result, names),
        "unassigned_clients": [
            {"client_id": cid, "client_name": names.get(cid, "")}
            for cid in result.unassigned_client_ids
        ],
    }

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(export_data, f, indent=2, ensure_ascii=False)


def export_csv(
    result: BatchMatchingResult,
    filepath: str,
    people: Optional[Iterable[Person]] = None,
) -> None:
    """Export assignments to CSV format, one row per assignment.

    Raises:
        IOError: If file cannot be written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "rank",
        "client_id",
        "client_name",
        "volunteer_id",
        "volunteer_name",
        "slot_index",
        "score",
    ]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in _rows(result, _name_lookup(people)):
            row["score"] = f"{round(row['score'] * 100)}%"
            writer.writerow(row)


def export_markdown(
    result: BatchMatchingResult,
    filepath: str,
    people: Optional[Iterable[Person]] = None,
) -> None:
    """Export a batch result to Markdown format.

    Raises:
        IOError: If file cannot be written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    names = _name_lookup(people)

    lines = []

    # Header
    lines.append("# Mentor Matches")
    lines.append("")
    lines.append(f"**Exported:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"**Assigned:** {len(result.assignments)}")
    lines.append(f"**Unassigned:** {len(result.unassigned_client_ids)}")
    lines.append(f"**Total Score:** {result.total_score:.2f}")
    lines.append("")
    lines.append("---")
    lines.append("")

    if result.assignments:
        lines.append("## Assignments")
        lines.append("")
        lines.append("| # | Client | Volunteer | Slot | Score |")
        lines.append("|---|--------|-----------|------|-------|")
        for row in _rows(result, names):
            client = row["client_name"] or row["client_id"]
            volunteer = row["volunteer_name"] or row["volunteer_id"]
            score_pct = round(row["score"] * 100)
            lines.append(
                f"| {row['rank']} | {client} | {volunteer} | {row['slot_index']} | {score_pct}% |"
            )
        lines.append("")

    if result.unassigned_client_ids:
        lines.append("## Unassigned Clients")
        lines.append("")
        for cid in result.unassigned_client_ids:
            lines.append(f"- {names.get(cid) or cid}")
        lines.append("")

    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def export_result(
    result: BatchMatchingResult,
    filepath: str,
    people: Optional[Iterable[Person]] = None,
) -> None:
    """Export a batch result with format auto-detection from file extension.

    Raises:
        ValueError: If file extension is not recognized
        IOError: If file cannot be written
    """
    path = Path(filepath)
    extension = path.suffix.lower()

    if extension == ".json":
        export_json(result, filepath, people)
    elif extension == ".csv":
        export_csv(result, filepath, people)
    elif extension in (".md", ".markdown"):
        export_markdown(result, filepath, people)
    else:
        raise ValueError(
            f"Unsupported file format: {extension}. "
            "Supported formats: .json, .csv, .md, .markdown"
        )
