"""Catalog loading and report rendering: JSON file in, text or JSON out.

The engine works on in-memory records only; this module is the thin layer the
CLI uses to read a catalog file and to render a ``DetectionResult``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .engine import DetectionResult
from .report import KeyCollisions, flagged_pairs, reason_counts

RULE = "-" * 57


class CatalogLoadError(Exception):
    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


def load_catalog(path: str | Path) -> list[Any]:
    """Read a JSON catalog file (a list of exercise objects)."""
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise CatalogLoadError(path, f"cannot read file ({exc.strerror or exc})") from exc
    except json.JSONDecodeError as exc:
        raise CatalogLoadError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, list):
        raise CatalogLoadError(path, "expected a JSON list of exercises")
    return data


def to_json_report(result: DetectionResult) -> dict[str, Any]:
    names = {record.id: record.name for record in result.records}
    return {
        "summary": result.summary(),
        "invalid_records": [
            {"index": bad.index, "id": bad.record_id, "errors": list(bad.errors)}
            for bad in result.invalid_records
        ],
        "counts": reason_counts(result.grouped),
        "findings": {
            reason: [
                {**finding.to_dict(), "name_a": names.get(finding.id_a), "name_b": names.get(finding.id_b)}
                for finding in items
            ]
            for reason, items in result.grouped.items()
        },
    }


def write_json(report: dict[str, Any], output_path: str | Path) -> int:
    """Write a JSON report. Returns the number of findings written."""
    path = Path(output_path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return report["summary"]["findings"]


def render_text(result: DetectionResult) -> str:
    names = {record.id: record.name for record in result.records}
    lines = [
        f"Analyzed {len(result.records)} exercises across {result.block_count} muscle/category groups "
        f"({result.comparisons} comparisons).",
        RULE,
    ]

    for bad in result.invalid_records:
        lines.append(f"[SKIPPED] record #{bad.index} (id={bad.record_id}): {bad.message}")
    if result.invalid_records:
        lines.append("")

    if not result.findings:
        lines.append("No likely duplicates found.")
        return "\n".join(lines)

    lines.append(
        f"Found {len(result.findings)} potential similarities "
        f"across {len(flagged_pairs(result.findings))} pairs:"
    )
    lines.append("")
    for reason, items in result.grouped.items():
        lines.append(f"[ {reason} ] ({len(items)})")
        for finding in items:
            lines.append(
                f"  • {names.get(finding.id_a, '?')} ({finding.id_a})  <-->  "
                f"{names.get(finding.id_b, '?')} ({finding.id_b})"
            )
            lines.append(f"    ({finding.detail})")
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def render_collisions(collisions: KeyCollisions) -> str:
    lines: list[str] = []
    if collisions.names:
        lines.append("--- Exact Duplicate Names ---")
        lines.extend(f'"{name}": {count} times' for name, count in collisions.names.items())
    else:
        lines.append("No exact duplicate names found.")
    lines.append("")
    if collisions.slugs:
        lines.append("--- Exact Duplicate Slugs ---")
        lines.extend(f'"{slug}": {count} times' for slug, count in collisions.slugs.items())
    else:
        lines.append("No exact duplicate slugs found.")
    return "\n".join(lines)
