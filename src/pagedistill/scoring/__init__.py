"""Bypass-path island scoring, pruning and quality assessment."""

from .engine import ContentIsland, ScoringEngine
from .quality import QualityAssessor, QualityMetrics

__all__ = [
    "ContentIsland",
    "QualityAssessor",
    "QualityMetrics",
    "ScoringEngine",
]
