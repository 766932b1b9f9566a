"""Catalog records and match findings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MatchReason = Literal[
    "ExactName",
    "ExactNormalized",
    "SubstringContainment",
    "RedundantEquipmentInName",
    "FuzzyEditDistance",
    "AttributeMatch",
    "WordSaladMatch",
]

# Evaluation order; also the order of findings for a single pair.
MATCH_REASONS: tuple[MatchReason, ...] = (
    "ExactName",
    "ExactNormalized",
    "SubstringContainment",
    "RedundantEquipmentInName",
    "FuzzyEditDistance",
    "AttributeMatch",
    "WordSaladMatch",
)

# (primaryMuscleGroup, category)
BlockKey = tuple[str, str]


class CatalogRecord(BaseModel):
    """One exercise definition as delivered by the catalog loader."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    slug: str = ""
    category: str = "other"
    primary_muscle_group: str = Field(default="other", alias="primaryMuscleGroup")
    equipment: frozenset[str] = frozenset()
    description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v

    @field_validator("slug", "category", "primary_muscle_group", mode="before")
    @classmethod
    def attribute_text(cls, v: Any, info: Any) -> Any:
        if v is None:
            return "" if info.field_name == "slug" else "other"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("description", mode="before")
    @classmethod
    def description_text_or_none(cls, v: Any) -> Any:
        # non-string descriptions are dropped
        return v if isinstance(v, str) else None

    @field_validator("equipment", mode="before")
    @classmethod
    def coerce_equipment(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError("equipment must be a list of strings")
        entries: set[str] = set()
        for item in v:
            if not isinstance(item, str):
                raise ValueError("equipment entries must be strings")
            item = item.strip()
            if item:
                entries.add(item)
        return frozenset(entries)

    @property
    def block_key(self) -> BlockKey:
        return (self.primary_muscle_group, self.category)


@dataclass(frozen=True)
class MatchFinding:
    """One suspected duplicate pair. ``id_a`` is always the smaller id."""

    id_a: int
    id_b: int
    reason: MatchReason
    detail: str
    block: BlockKey | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id_a": self.id_a,
            "id_b": self.id_b,
            "reason": self.reason,
            "detail": self.detail,
        }
        if self.block is not None:
            payload["block"] = {"primaryMuscleGroup": self.block[0], "category": self.block[1]}
        return payload


@dataclass(frozen=True)
class InvalidRecord:
    """A catalog entry that failed validation and was skipped."""

    index: int
    record_id: Any
    errors: tuple[str, ...]

    @property
    def message(self) -> str:
        return "; ".join(self.errors)
