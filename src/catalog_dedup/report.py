"""Grouping of findings and the exact-key collision audit. No I/O here."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .models import CatalogRecord, MatchFinding, MatchReason


def aggregate(findings: Iterable[MatchFinding]) -> dict[MatchReason, list[MatchFinding]]:
    """Group findings by reason; groups and their members keep discovery order."""
    grouped: dict[MatchReason, list[MatchFinding]] = {}
    for finding in findings:
        grouped.setdefault(finding.reason, []).append(finding)
    return grouped


def reason_counts(grouped: Mapping[MatchReason, Sequence[MatchFinding]]) -> dict[MatchReason, int]:
    return {reason: len(items) for reason, items in grouped.items()}


def flagged_pairs(findings: Iterable[MatchFinding]) -> list[tuple[int, int]]:
    """Distinct (id_a, id_b) pairs with at least one finding, in discovery order."""
    return list(dict.fromkeys((f.id_a, f.id_b) for f in findings))


@dataclass(frozen=True)
class KeyCollisions:
    names: dict[str, int] = field(default_factory=dict)
    slugs: dict[str, int] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.names and not self.slugs


def find_key_collisions(records: Iterable[CatalogRecord]) -> KeyCollisions:
    """Exact duplicate names and slugs with their occurrence counts.

    Blank slugs are not counted.
    """
    names: Counter[str] = Counter()
    slugs: Counter[str] = Counter()
    for record in records:
        names[record.name] += 1
        if record.slug:
            slugs[record.slug] += 1
    return KeyCollisions(
        names={name: count for name, count in names.items() if count > 1},
        slugs={slug: count for slug, count in slugs.items() if count > 1},
    )
