"""Detection configuration.

Every threshold the classifier uses lives here so runs can be tuned from a JSON
file or CLI options. Invalid values raise ``ConfigurationError`` at construction,
before any comparison work begins.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from .models import MATCH_REASONS, MatchReason

DEFAULT_ABBREVIATIONS: Mapping[str, str] = MappingProxyType({
    "db": "dumbbell",
    "bb": "barbell",
    "kb": "kettlebell",
    "bw": "bodyweight",
    "alt": "alternating",
    "inc": "incline",
    "dec": "decline",
    "lat": "lateral",
    "med": "medball",
})

MODE_PRESETS: dict[str, tuple[MatchReason, ...]] = {
    "all": MATCH_REASONS,
    "fuzzy": ("ExactName", "SubstringContainment", "FuzzyEditDistance"),
    "full": ("ExactName", "SubstringContainment", "FuzzyEditDistance", "AttributeMatch"),
    "semantic": ("ExactNormalized", "WordSaladMatch", "RedundantEquipmentInName"),
}

_TOKEN_RE = re.compile(r"^[a-z0-9]+$")


class ConfigurationError(ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


@dataclass(frozen=True)
class DetectionConfig:
    abbreviations: Mapping[str, str] = field(default_factory=lambda: DEFAULT_ABBREVIATIONS)
    substring_min_length: int = 6
    substring_length_ratio: float = 0.5
    fuzzy_length_breakpoints: tuple[int, ...] = (5, 10)
    fuzzy_max_distances: tuple[int, ...] = (1, 2, 3)
    jaccard_threshold: float = 0.8
    attribute_sentinels: frozenset[str] = frozenset({"other"})
    enabled_reasons: tuple[MatchReason, ...] = MATCH_REASONS
    workers: int = 1

    def __post_init__(self) -> None:
        # Coerce containers to immutable types.
        coercions = {
            "abbreviations": lambda v: MappingProxyType(dict(v)),
            "fuzzy_length_breakpoints": tuple,
            "fuzzy_max_distances": tuple,
            "attribute_sentinels": frozenset,
            "enabled_reasons": tuple,
        }
        for name, coerce in coercions.items():
            value = getattr(self, name)
            if isinstance(value, str):
                raise ConfigurationError(name, "must be a collection, not a string")
            try:
                object.__setattr__(self, name, coerce(value))
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(name, f"invalid value: {exc}") from exc
        self.validate()

    def validate(self) -> None:
        _check_abbreviations(self.abbreviations)
        _check_types(self)

        if self.substring_min_length < 0:
            raise ConfigurationError("substring_min_length", "must be >= 0")
        if not 0.0 <= self.substring_length_ratio <= 1.0:
            raise ConfigurationError("substring_length_ratio", "must be within [0, 1]")
        if not 0.0 <= self.jaccard_threshold <= 1.0:
            raise ConfigurationError("jaccard_threshold", "must be within [0, 1]")

        breakpoints = self.fuzzy_length_breakpoints
        if any(b < 0 for b in breakpoints):
            raise ConfigurationError("fuzzy_length_breakpoints", "must be >= 0")
        if any(later <= earlier for earlier, later in zip(breakpoints, breakpoints[1:])):
            raise ConfigurationError("fuzzy_length_breakpoints", "must be strictly ascending")
        if len(self.fuzzy_max_distances) != len(breakpoints) + 1:
            raise ConfigurationError(
                "fuzzy_max_distances",
                f"expected {len(breakpoints) + 1} values for {len(breakpoints)} breakpoints",
            )
        if any(d < 0 for d in self.fuzzy_max_distances):
            raise ConfigurationError("fuzzy_max_distances", "edit-distance thresholds must be >= 0")

        unknown = [r for r in self.enabled_reasons if r not in MATCH_REASONS]
        if unknown:
            raise ConfigurationError("enabled_reasons", f"unknown reasons: {', '.join(map(str, unknown))}")

        if self.workers < 1:
            raise ConfigurationError("workers", "must be >= 1")

    def max_edit_distance(self, length: int) -> int:
        """Allowed edit distance for a normalized name of ``length`` characters."""
        for breakpoint, distance in zip(self.fuzzy_length_breakpoints, self.fuzzy_max_distances):
            if length <= breakpoint:
                return distance
        return self.fuzzy_max_distances[-1]

    def is_enabled(self, reason: MatchReason) -> bool:
        return reason in self.enabled_reasons

    def with_overrides(self, **overrides: Any) -> DetectionConfig:
        """Copy with the non-None overrides applied (CLI options)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)

    @classmethod
    def for_mode(cls, mode: str, **kwargs: Any) -> DetectionConfig:
        if mode not in MODE_PRESETS:
            raise ConfigurationError("mode", f"unknown mode {mode!r}")
        return cls(enabled_reasons=MODE_PRESETS[mode], **kwargs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DetectionConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known - {"mode"})
        if unknown:
            raise ConfigurationError(unknown[0], "unknown configuration key")

        kwargs: dict[str, Any] = {k: v for k, v in data.items() if k != "mode"}
        if "mode" in data:
            if "enabled_reasons" in data:
                raise ConfigurationError("mode", "cannot combine mode with enabled_reasons")
            return cls.for_mode(str(data["mode"]), **kwargs)
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | Path) -> DetectionConfig:
        path = Path(path)
        try:
            with path.open() as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError("config_file", f"cannot read {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("config_file", f"{path} must contain a JSON object")
        return cls.from_mapping(data)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_types(config: DetectionConfig) -> None:
    for name in ("substring_min_length", "workers"):
        if not _is_int(getattr(config, name)):
            raise ConfigurationError(name, "must be an integer")
    for name in ("substring_length_ratio", "jaccard_threshold"):
        value = getattr(config, name)
        if not (_is_int(value) or isinstance(value, float)):
            raise ConfigurationError(name, "must be a number")
    for name in ("fuzzy_length_breakpoints", "fuzzy_max_distances"):
        if not all(_is_int(v) for v in getattr(config, name)):
            raise ConfigurationError(name, "must contain integers only")
    if not all(isinstance(s, str) for s in config.attribute_sentinels):
        raise ConfigurationError("attribute_sentinels", "must contain strings only")


def _check_abbreviations(table: Mapping[str, str]) -> None:
    for key, expansion in table.items():
        if not isinstance(key, str) or not _TOKEN_RE.match(key):
            raise ConfigurationError("abbreviations", f"key {key!r} must be a lowercase alphanumeric token")
        if not isinstance(expansion, str):
            raise ConfigurationError("abbreviations", f"expansion for {key!r} must be a string")
        words = expansion.split(" ")
        if not all(_TOKEN_RE.match(w) for w in words):
            raise ConfigurationError(
                "abbreviations",
                f"expansion {expansion!r} must be lowercase alphanumeric words separated by single spaces",
            )
        chained = [w for w in words if w in table]
        if chained:
            raise ConfigurationError(
                "abbreviations", f"expansion {expansion!r} contains abbreviation {chained[0]!r}"
            )
