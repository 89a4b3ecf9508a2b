"""Pydantic schema definitions for pipeline inputs and candidate records."""

from __future__ import annotations

from .candidate import (
    OracleAnalysis,
    RankedCandidate,
    ScoredCandidate,
    TriagedCandidate,
)
from .job import JobRequest, ResumeDocument

__all__ = [
    "JobRequest",
    "OracleAnalysis",
    "RankedCandidate",
    "ResumeDocument",
    "ScoredCandidate",
    "TriagedCandidate",
]
