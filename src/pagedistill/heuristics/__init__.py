"""Path-selection heuristics."""

from .bypass import BypassDecision, BypassHeuristic

__all__ = ["BypassDecision", "BypassHeuristic"]
