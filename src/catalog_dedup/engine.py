"""Duplicate detection run: validate -> block -> classify pairs -> aggregate.

The catalog is read once and never mutated. Blocks are independent, so with
``workers > 1`` they are classified on a thread pool; results are merged in
block order, which keeps discovery order identical to a serial run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from .blocking import block_pairs, build_position_blocks, comparable_blocks, pair_count
from .classifier import MatchClassifier
from .config import DetectionConfig
from .models import BlockKey, CatalogRecord, InvalidRecord, MatchFinding, MatchReason
from .report import aggregate, flagged_pairs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionResult:
    records: tuple[CatalogRecord, ...]
    invalid_records: tuple[InvalidRecord, ...]
    block_count: int
    comparisons: int
    findings: tuple[MatchFinding, ...]
    grouped: dict[MatchReason, list[MatchFinding]]

    def summary(self) -> dict[str, Any]:
        return {
            "records": len(self.records),
            "invalid_records": len(self.invalid_records),
            "blocks": self.block_count,
            "comparisons": self.comparisons,
            "findings": len(self.findings),
            "flagged_pairs": len(flagged_pairs(self.findings)),
        }


def _error_messages(exc: ValidationError) -> tuple[str, ...]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "record"
        messages.append(f"{location}: {error.get('msg', 'invalid')}")
    return tuple(messages)


def parse_records(
    entries: Iterable[CatalogRecord | Mapping[str, Any]],
) -> tuple[list[CatalogRecord], list[InvalidRecord]]:
    """Validate raw catalog entries, skipping (and reporting) the malformed ones."""
    records: list[CatalogRecord] = []
    invalid: list[InvalidRecord] = []
    for index, entry in enumerate(entries):
        if isinstance(entry, CatalogRecord):
            records.append(entry)
            continue
        if not isinstance(entry, Mapping):
            record_id = None
            errors: tuple[str, ...] = (f"expected an object, got {type(entry).__name__}",)
        else:
            record_id = entry.get("id")
            try:
                records.append(CatalogRecord.model_validate(dict(entry)))
                continue
            except ValidationError as exc:
                errors = _error_messages(exc)

        bad = InvalidRecord(index, record_id, errors)
        invalid.append(bad)
        logger.warning(
            "Skipping invalid catalog record #%d (id=%s): %s",
            index,
            record_id,
            bad.message,
            extra={"dedup_record_index": index, "dedup_record_id": record_id},
        )
    return records, invalid


class DuplicateDetector:
    """Finds likely duplicate exercises within each (muscle group, category) block."""

    def __init__(self, config: DetectionConfig | None = None) -> None:
        self.config = config or DetectionConfig()
        self.classifier = MatchClassifier(self.config)

    def run(self, entries: Iterable[CatalogRecord | Mapping[str, Any]]) -> DetectionResult:
        records, invalid = parse_records(entries)
        blocks = comparable_blocks(build_position_blocks(records))
        comparisons = pair_count(blocks)

        logger.info(
            "Analyzing %d exercises across %d muscle/category blocks (%d comparisons)",
            len(records),
            len(blocks),
            comparisons,
            extra={"dedup_records": len(records), "dedup_blocks": len(blocks)},
        )

        findings: list[MatchFinding] = []
        for block_findings in self._classify_blocks(records, blocks):
            findings.extend(block_findings)

        grouped = aggregate(findings)
        logger.info(
            "Found %d findings over %d reasons",
            len(findings),
            len(grouped),
            extra={"dedup_findings": len(findings), "dedup_comparisons": comparisons},
        )
        return DetectionResult(
            records=tuple(records),
            invalid_records=tuple(invalid),
            block_count=len(blocks),
            comparisons=comparisons,
            findings=tuple(findings),
            grouped=grouped,
        )

    def _classify_blocks(
        self,
        records: Sequence[CatalogRecord],
        blocks: Mapping[BlockKey, Sequence[int]],
    ) -> list[list[MatchFinding]]:
        items = list(blocks.items())
        if self.config.workers == 1 or len(items) < 2:
            return [self._classify_block(records, key, positions) for key, positions in items]
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            # map() yields in submission order
            return list(
                executor.map(lambda item: self._classify_block(records, item[0], item[1]), items)
            )

    def _classify_block(
        self,
        records: Sequence[CatalogRecord],
        key: BlockKey,
        positions: Sequence[int],
    ) -> list[MatchFinding]:
        findings: list[MatchFinding] = []
        for i, j in block_pairs(positions):
            findings.extend(self.classifier.classify(records[i], records[j], block=key))
        logger.debug(
            "Block %s / %s: %d records, %d findings",
            key[0],
            key[1],
            len(positions),
            len(findings),
            extra={"dedup_block": key},
        )
        return findings


def detect_duplicates(
    entries: Iterable[CatalogRecord | Mapping[str, Any]],
    config: DetectionConfig | None = None,
) -> DetectionResult:
    return DuplicateDetector(config).run(entries)
