"""Integration tests for the detection run."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from catalog_dedup.config import DetectionConfig
from catalog_dedup.engine import DuplicateDetector, detect_duplicates, parse_records
from catalog_dedup.models import CatalogRecord

from .conftest import make_record, raw_entry


class TestRun:
    def test_finds_expected_pairs(self, small_catalog):
        result = detect_duplicates(small_catalog)
        pairs = {(f.id_a, f.id_b, f.reason) for f in result.findings}
        assert (1, 2, "SubstringContainment") in pairs
        assert (1, 2, "RedundantEquipmentInName") in pairs
        assert (3, 4, "FuzzyEditDistance") in pairs

    def test_blocking_excludes_cross_block_pairs(self, small_catalog):
        result = detect_duplicates(small_catalog)
        # "Deadlift" #5 (back/pull) and #6 (chest/push) share a name but not a block
        assert all({f.id_a, f.id_b} != {5, 6} for f in result.findings)

    def test_every_finding_stays_within_its_block(self, small_catalog):
        result = detect_duplicates(small_catalog)
        by_id = {record.id: record for record in result.records}
        for finding in result.findings:
            a, b = by_id[finding.id_a], by_id[finding.id_b]
            assert a.block_key == b.block_key == finding.block

    def test_identical_names_in_different_muscle_groups_are_not_reported(self):
        result = detect_duplicates([
            raw_entry(1, "Pullover", primaryMuscleGroup="back"),
            raw_entry(2, "Pullover", primaryMuscleGroup="chest"),
        ])
        assert result.findings == ()
        assert result.comparisons == 0
        assert result.block_count == 0

    def test_summary(self, small_catalog):
        result = detect_duplicates(small_catalog)
        # chest/push holds 1, 2 and 6; legs/quads holds 3 and 4; back/pull only 5
        assert result.summary() == {
            "records": 6,
            "invalid_records": 0,
            "blocks": 2,
            "comparisons": 4,
            "findings": len(result.findings),
            "flagged_pairs": 2,
        }

    def test_grouped_preserves_discovery_order(self, small_catalog):
        result = detect_duplicates(small_catalog)
        assert list(result.grouped) == list(dict.fromkeys(f.reason for f in result.findings))
        for reason, items in result.grouped.items():
            assert items == [f for f in result.findings if f.reason == reason]

    def test_accepts_catalog_records(self):
        records = [make_record(1, "Squat"), make_record(2, "Squats")]
        result = DuplicateDetector().run(records)
        assert [f.reason for f in result.findings] == ["FuzzyEditDistance"]

    def test_config_mode_limits_reasons(self, small_catalog):
        result = detect_duplicates(small_catalog, DetectionConfig.for_mode("semantic"))
        assert {f.reason for f in result.findings} <= {
            "ExactNormalized",
            "WordSaladMatch",
            "RedundantEquipmentInName",
        }

    def test_repeated_ids_are_compared_by_position(self):
        result = detect_duplicates([
            raw_entry(7, "Bench Press"),
            raw_entry(7, "Bench Press"),
        ])
        assert [f.reason for f in result.findings][:1] == ["ExactName"]

    def test_empty_catalog(self):
        result = detect_duplicates([])
        assert result.findings == ()
        assert result.grouped == {}


class TestInvalidRecords:
    def test_malformed_entries_are_skipped(self, caplog):
        entries = [
            raw_entry(1, "Bench Press"),
            {"slug": "no-id", "name": "Mystery Press"},
            raw_entry(3, "   "),
            "not a record",
            raw_entry(5, "Barbell Bench Press"),
        ]
        with caplog.at_level(logging.WARNING, logger="catalog_dedup.engine"):
            result = detect_duplicates(entries)

        assert [r.id for r in result.records] == [1, 5]
        assert [bad.index for bad in result.invalid_records] == [1, 2, 3]
        assert result.invalid_records[1].record_id == 3
        assert any("id" in msg for msg in result.invalid_records[0].errors)
        assert "expected an object" in result.invalid_records[2].message
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3
        # Detection still runs over the remaining records
        assert {(f.id_a, f.id_b) for f in result.findings} == {(1, 5)}

    def test_parse_records_applies_defaults(self):
        records, invalid = parse_records([{"id": 1, "name": "Plank"}])
        assert invalid == []
        assert records[0].category == "other"
        assert records[0].primary_muscle_group == "other"
        assert records[0].equipment == frozenset()

    def test_non_string_equipment_is_invalid(self):
        _, invalid = parse_records([raw_entry(1, "Curl", equipment=[3])])
        assert len(invalid) == 1

    def test_null_attributes_use_defaults(self):
        records, _ = parse_records([raw_entry(1, "Curl", category=None, equipment=None, slug=None)])
        assert records[0].category == "other"
        assert records[0].slug == ""
        assert records[0].equipment == frozenset()

    def test_non_string_description_keeps_record(self, caplog):
        with caplog.at_level(logging.WARNING, logger="catalog_dedup.engine"):
            records, invalid = parse_records([
                raw_entry(1, "Curl", description=42),
                raw_entry(2, "Row", description={"en": "Pull to the hip"}),
            ])
        assert invalid == []
        assert [r.id for r in records] == [1, 2]
        assert all(r.description is None for r in records)
        assert not caplog.records

    def test_numeric_attributes_are_kept_as_text(self):
        records, invalid = parse_records([raw_entry(1, "Curl", category=3, slug=7)])
        assert invalid == []
        assert records[0].category == "3"
        assert records[0].slug == "7"


class TestParallel:
    @pytest.mark.parametrize("workers", [2, 4])
    def test_parallel_matches_serial(self, workers):
        muscles = ["chest", "back", "quads", "shoulders"]
        names = ["Press", "Presses", "DB Press", "Dumbbell Press", "Incline Press", "Press Incline"]
        entries = [
            raw_entry(i * 10 + j, name, primaryMuscleGroup=muscle)
            for i, muscle in enumerate(muscles)
            for j, name in enumerate(names)
        ]
        serial = detect_duplicates(entries)
        parallel = detect_duplicates(entries, DetectionConfig(workers=workers))
        assert parallel.findings == serial.findings
        assert list(parallel.grouped) == list(serial.grouped)
        assert serial.findings


def test_records_are_not_mutated(small_catalog):
    records, _ = parse_records(small_catalog)
    snapshot = [r.model_dump() for r in records]
    detect_duplicates(records)
    assert [r.model_dump() for r in records] == snapshot
    with pytest.raises(ValidationError):
        records[0].name = "Changed"  # type: ignore[misc]
    assert isinstance(records[0], CatalogRecord)
