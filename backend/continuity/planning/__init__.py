"""Continuity analysis, duration inference and gap filling."""

from .classifier import CLASSIFICATION_RULES, GapClassifier
from .continuity import ContinuityAnalyzer, is_actionable, sort_segments
from .duration import DURATION_RULES, DurationInferencer
from .gap_filler import GapFiller, select_transfer_type

__all__ = [
    "CLASSIFICATION_RULES",
    "ContinuityAnalyzer",
    "DURATION_RULES",
    "DurationInferencer",
    "GapClassifier",
    "GapFiller",
    "is_actionable",
    "select_transfer_type",
    "sort_segments",
]
