"""Shortlist triage of ranked candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import structlog

from ..errors import PreconditionError
from ..schemas import RankedCandidate, TriagedCandidate
from ..templates import REJECTION_REASON_FIELDS, check_template
from .ranking import is_valid_score

DEFAULT_REJECTION_REASON = (
    "Not shortlisted: match score {score} placed the application at rank {rank}. "
    "Main concerns: {weak_points}"
)

_RANKED_FIELDS = set(RankedCandidate.model_fields)

# Feedback fields withheld from candidates that are not shortlisted.
_PRESENTATION_FIELDS: dict[str, Any] = {
    "top_skills": [],
    "highlights": "",
    "suggestions": "",
    "interview_questions": [],
    "model_answers": [],
}


@dataclass
class TriageConfig:
    """Configuration for shortlist triage."""

    rejection_reason_template: str = DEFAULT_REJECTION_REASON

    def __post_init__(self) -> None:
        check_template(
            self.rejection_reason_template, REJECTION_REASON_FIELDS, label="rejection reason"
        )


class TriagePolicy:
    """Split ranked candidates into shortlisted and rejected."""

    def __init__(self, *, config: TriageConfig | None = None) -> None:
        self._config = config or TriageConfig()
        self._logger = structlog.get_logger(__name__)

    def triage(
        self,
        ranked: Sequence[RankedCandidate],
        shortlist_size: int,
    ) -> list[TriagedCandidate]:
        if isinstance(shortlist_size, bool) or shortlist_size < 1:
            raise PreconditionError(
                f"shortlist size must be a positive integer, got {shortlist_size!r}"
            )

        triaged = [self._triage_one(candidate, shortlist_size) for candidate in ranked]
        self._logger.info(
            "triage.completed",
            shortlisted=sum(1 for item in triaged if item.shortlisted),
            rejected=sum(1 for item in triaged if not item.shortlisted),
            shortlist_size=shortlist_size,
        )
        return triaged

    def rejection_reason(self, candidate: RankedCandidate) -> str:
        score = candidate.match_score
        formatted_score = f"{float(score):g}" if is_valid_score(score) else "n/a"
        return self._config.rejection_reason_template.format(
            score=formatted_score,
            rank=candidate.rank,
            weak_points=candidate.weak_points.strip() or "none noted",
        )

    def _triage_one(self, candidate: RankedCandidate, shortlist_size: int) -> TriagedCandidate:
        fields = candidate.model_dump(include=_RANKED_FIELDS)
        if candidate.rank <= shortlist_size:
            return TriagedCandidate(
                **fields,
                shortlisted=True,
                salary_suggestion=getattr(candidate, "salary_suggestion", None),
                rejection_reason=None,
            )

        fields.update(_PRESENTATION_FIELDS)
        return TriagedCandidate(
            **fields,
            shortlisted=False,
            salary_suggestion=None,
            rejection_reason=self.rejection_reason(candidate),
        )
