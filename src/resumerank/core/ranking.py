"""Deterministic ranking of scored candidates."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Sequence

import structlog

from ..errors import PipelineWarning
from ..schemas import RankedCandidate, ScoredCandidate

MIN_SCORE = 0.0
MAX_SCORE = 100.0

_logger = structlog.get_logger(__name__)
_SCORED_FIELDS = set(ScoredCandidate.model_fields)


def is_valid_score(value: Any) -> bool:
    """Return True when ``value`` is a finite number within the 0-100 scale."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value) and MIN_SCORE <= value <= MAX_SCORE


def ordering_score(value: Any) -> float:
    return float(value) if is_valid_score(value) else MIN_SCORE


def rank_candidates(
    candidates: Sequence[ScoredCandidate],
) -> tuple[list[RankedCandidate], list[PipelineWarning]]:
    """Assign contiguous 1-based ranks by descending match score.

    Ties keep input order. Missing or invalid scores sort as 0 and are
    reported as ``malformed_score`` warnings; the record keeps the raw value.
    """
    warnings: list[PipelineWarning] = []
    for candidate in candidates:
        if not is_valid_score(candidate.match_score):
            warning = PipelineWarning(
                kind="malformed_score",
                source_index=candidate.source_index,
                detail=f"unusable match score {candidate.match_score!r}; ranked as 0",
            )
            warnings.append(warning)
            _logger.warning(
                "ranking.malformed_score",
                source_index=candidate.source_index,
                match_score=repr(candidate.match_score),
            )

    order = sorted(
        range(len(candidates)),
        key=lambda position: (-ordering_score(candidates[position].match_score), position),
    )
    ranked = [
        RankedCandidate(
            **candidates[position].model_dump(include=_SCORED_FIELDS), rank=rank
        )
        for rank, position in enumerate(order, start=1)
    ]
    return ranked, warnings
