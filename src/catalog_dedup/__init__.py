"""Approximate duplicate detection for exercise catalogs."""

from .blocking import build_blocks
from .classifier import MatchClassifier, classify
from .config import DEFAULT_ABBREVIATIONS, MODE_PRESETS, ConfigurationError, DetectionConfig
from .engine import DetectionResult, DuplicateDetector, detect_duplicates
from .models import MATCH_REASONS, CatalogRecord, InvalidRecord, MatchFinding, MatchReason
from .report import aggregate, find_key_collisions
from .similarity import Normalizer, jaccard, levenshtein, normalize

__all__ = [
    "DEFAULT_ABBREVIATIONS",
    "MATCH_REASONS",
    "MODE_PRESETS",
    "CatalogRecord",
    "ConfigurationError",
    "DetectionConfig",
    "DetectionResult",
    "DuplicateDetector",
    "InvalidRecord",
    "MatchClassifier",
    "MatchFinding",
    "MatchReason",
    "Normalizer",
    "aggregate",
    "build_blocks",
    "classify",
    "detect_duplicates",
    "find_key_collisions",
    "jaccard",
    "levenshtein",
    "normalize",
]
