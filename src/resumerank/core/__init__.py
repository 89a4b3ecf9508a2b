"""Core triage components: scoring, ranking and triage policy."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# NOTE: keep imports explicit for export clarity.
from .ranking import is_valid_score, rank_candidates
from .scoring import ResumeScorer, build_analysis_request
from .triage import TriageConfig, TriagePolicy


@runtime_checkable
class AnalysisClient(Protocol):
    """Oracle contract for scoring one resume against a job description."""

    def analyze(self, request: dict[str, Any]) -> dict[str, Any] | str:
        """Return a ScoredCandidate-shaped object (or its JSON text)."""


__all__ = [
    "AnalysisClient",
    "ResumeScorer",
    "TriageConfig",
    "TriagePolicy",
    "build_analysis_request",
    "is_valid_score",
    "rank_candidates",
]
