from __future__ import annotations

from typing import Any

import pytest

from catalog_dedup.models import CatalogRecord


def make_record(
    id: int,
    name: str,
    *,
    category: str = "push",
    muscle: str = "chest",
    equipment: list[str] | None = None,
    slug: str | None = None,
) -> CatalogRecord:
    return CatalogRecord(
        id=id,
        slug=slug if slug is not None else name.lower().replace(" ", "-"),
        name=name,
        category=category,
        primaryMuscleGroup=muscle,
        equipment=equipment or [],
    )


def raw_entry(id: Any, name: Any, **extra: Any) -> dict[str, Any]:
    entry = {
        "id": id,
        "slug": str(name).lower().replace(" ", "-"),
        "name": name,
        "category": "push",
        "primaryMuscleGroup": "chest",
        "equipment": ["Barbell"],
    }
    entry.update(extra)
    return entry


@pytest.fixture
def small_catalog() -> list[dict[str, Any]]:
    return [
        raw_entry(1, "Bench Press"),
        raw_entry(2, "Barbell Bench Press"),
        raw_entry(3, "Squat", category="legs", primaryMuscleGroup="quads", equipment=[]),
        raw_entry(4, "Squats", category="legs", primaryMuscleGroup="quads", equipment=[]),
        raw_entry(5, "Deadlift", category="pull", primaryMuscleGroup="back"),
        raw_entry(6, "Deadlift", category="push", primaryMuscleGroup="chest", equipment=["Dumbbell"]),
    ]
