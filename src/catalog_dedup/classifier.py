"""Match classifier: runs every duplicate heuristic over one candidate pair.

All heuristics that qualify are reported, in ``MATCH_REASONS`` order:

1. ExactName                 case-insensitive raw name equality
2. ExactNormalized           normalized names equal, raw names differ
3. SubstringContainment      one normalized name inside the other, length gated
4. RedundantEquipmentInName  containment where the extra words are equipment
5. FuzzyEditDistance         small, length-adaptive Levenshtein distance
6. AttributeMatch            same category/muscle/equipment plus a shared word
7. WordSaladMatch            high Jaccard overlap of the word sets

Identical normalized names also satisfy 3, 4 and 7; 5 needs a nonzero distance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .config import DetectionConfig
from .models import BlockKey, CatalogRecord, MatchFinding, MatchReason
from .similarity import Normalizer, jaccard, levenshtein, tokens


@dataclass(frozen=True)
class _PairView:
    a: CatalogRecord
    b: CatalogRecord
    norm_a: str
    norm_b: str

    @property
    def differ(self) -> bool:
        return self.norm_a != self.norm_b

    @property
    def shorter_longer(self) -> tuple[str, str]:
        if len(self.norm_a) > len(self.norm_b):
            return self.norm_b, self.norm_a
        return self.norm_a, self.norm_b

    @property
    def contained(self) -> bool:
        shorter, longer = self.shorter_longer
        return shorter in longer


def _format_equipment(equipment: frozenset[str]) -> str:
    return ", ".join(sorted(equipment)) or "none"


class MatchClassifier:
    def __init__(self, config: DetectionConfig | None = None) -> None:
        self.config = config or DetectionConfig()
        self.normalize = Normalizer(self.config.abbreviations)

    def classify(
        self,
        record_a: CatalogRecord,
        record_b: CatalogRecord,
        *,
        block: BlockKey | None = None,
    ) -> list[MatchFinding]:
        """Evaluate all enabled heuristics; returns findings in evaluation order."""
        if record_b.id < record_a.id:
            record_a, record_b = record_b, record_a
        pair = _PairView(
            a=record_a,
            b=record_b,
            norm_a=self.normalize(record_a.name),
            norm_b=self.normalize(record_b.name),
        )

        findings: list[MatchFinding] = []
        for reason, check in self._checks():
            if not self.config.is_enabled(reason):
                continue
            detail = check(pair)
            if detail is not None:
                findings.append(MatchFinding(record_a.id, record_b.id, reason, detail, block))
        return findings

    def _checks(self) -> tuple[tuple[MatchReason, Callable[[_PairView], str | None]], ...]:
        return (
            ("ExactName", self._exact_name),
            ("ExactNormalized", self._exact_normalized),
            ("SubstringContainment", self._substring_containment),
            ("RedundantEquipmentInName", self._redundant_equipment),
            ("FuzzyEditDistance", self._fuzzy_edit_distance),
            ("AttributeMatch", self._attribute_match),
            ("WordSaladMatch", self._word_salad),
        )

    # Each check returns the finding detail, or None when the heuristic does not fire.

    def _exact_name(self, pair: _PairView) -> str | None:
        if pair.a.name.lower() != pair.b.name.lower():
            return None
        return f"IDs: {pair.a.id} vs {pair.b.id}"

    def _exact_normalized(self, pair: _PairView) -> str | None:
        if not pair.norm_a or pair.differ:
            return None
        if pair.a.name.lower() == pair.b.name.lower():
            return None
        return f'both normalize to "{pair.norm_a}"'

    def _substring_containment(self, pair: _PairView) -> str | None:
        if not pair.norm_a or not pair.norm_b or not pair.contained:
            return None
        shorter, longer = pair.shorter_longer
        if len(shorter) < self.config.substring_min_length:
            return None
        if len(shorter) / len(longer) <= self.config.substring_length_ratio:
            return None
        return f'"{shorter}" is in "{longer}"'

    def _redundant_equipment(self, pair: _PairView) -> str | None:
        if not pair.norm_a or not pair.norm_b or not pair.contained:
            return None
        if pair.a.equipment != pair.b.equipment:
            return None
        shorter, longer = pair.shorter_longer
        extra_words = longer.replace(shorter, " ", 1).split()
        equipment = [e.lower() for e in pair.a.equipment]
        if not all(any(word in entry for entry in equipment) for word in extra_words):
            return None
        if not extra_words:
            return f"no extra words; same equipment [{_format_equipment(pair.a.equipment)}]"
        return (
            f'extra words "{" ".join(extra_words)}" repeat equipment '
            f"[{_format_equipment(pair.a.equipment)}]"
        )

    def _fuzzy_edit_distance(self, pair: _PairView) -> str | None:
        if not pair.norm_a or not pair.norm_b or not pair.differ:
            return None
        max_dist = self.config.max_edit_distance(len(pair.norm_a))
        # Distance is at least the length difference; skip the table when that already exceeds.
        if abs(len(pair.norm_a) - len(pair.norm_b)) > max_dist:
            return None
        dist = levenshtein(pair.norm_a, pair.norm_b)
        if not 0 < dist <= max_dist:
            return None
        return f"Dist: {dist} (max {max_dist})"

    def _attribute_match(self, pair: _PairView) -> str | None:
        a, b = pair.a, pair.b
        if a.category != b.category or a.primary_muscle_group != b.primary_muscle_group:
            return None
        if a.equipment != b.equipment:
            return None
        sentinels = self.config.attribute_sentinels
        if a.category in sentinels or a.primary_muscle_group in sentinels:
            return None
        shared = tokens(pair.norm_a) & tokens(pair.norm_b)
        if not shared:
            return None
        return (
            f"Cat: {a.category}, Muscle: {a.primary_muscle_group}, "
            f"Equip: {_format_equipment(a.equipment)}; shared words: {', '.join(sorted(shared))}"
        )

    def _word_salad(self, pair: _PairView) -> str | None:
        if not pair.norm_a or not pair.norm_b:
            return None
        similarity = jaccard(pair.norm_a, pair.norm_b)
        if similarity <= self.config.jaccard_threshold:
            return None
        return f"Jaccard {similarity:.0%} overlap"


def classify(
    record_a: CatalogRecord,
    record_b: CatalogRecord,
    config: DetectionConfig | None = None,
) -> list[MatchFinding]:
    return MatchClassifier(config).classify(record_a, record_b)
