"""Salary suggestions for shortlisted candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal

import structlog

from ..errors import EstimationFailure
from ..pdf_utils import resume_text
from ..schemas import JobRequest, ResumeDocument, TriagedCandidate

if TYPE_CHECKING:
    from . import SalaryEstimator

SalaryStatus = Literal["suggested", "failed"]


def build_estimation_request(
    job: JobRequest,
    candidate: TriagedCandidate,
    resume_content: str,
) -> dict[str, Any]:
    """Construct the payload expected by the salary estimator."""
    return {
        "jobDescriptionText": job.job_description,
        "expectedSalaryText": job.expected_salary,
        "resumeContent": resume_content,
        "topSkillsText": ", ".join(candidate.top_skills),
        "highlightsText": candidate.highlights,
    }


@dataclass(slots=True)
class SalaryOutcome:
    """Result of one salary estimation."""

    source_index: int
    status: SalaryStatus
    suggestion: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceIndex": self.source_index,
            "status": self.status,
            "suggestion": self.suggestion,
            "reason": self.reason,
        }


class CompensationAdvisor:
    """Ask the salary estimator for a suggestion for one shortlisted candidate."""

    def __init__(
        self,
        estimator: "SalaryEstimator",
        *,
        text_extractor: Callable[[ResumeDocument], str] = resume_text,
    ) -> None:
        self._estimator = estimator
        self._extract_text = text_extractor
        self._logger = structlog.get_logger(__name__)

    def suggest_salary(
        self,
        job: JobRequest,
        candidate: TriagedCandidate,
        document: ResumeDocument,
    ) -> str:
        index = candidate.source_index
        if not candidate.shortlisted:
            raise ValueError(f"candidate {index} is not shortlisted; no salary is suggested")

        try:
            content = self._extract_text(document)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("estimate.resume_text_unavailable", source_index=index, error=str(exc))
            content = ""

        request = build_estimation_request(job, candidate, content)
        try:
            suggestion = self._estimator.estimate(request)
        except EstimationFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            raise EstimationFailure(f"salary estimator failed ({exc})") from exc

        if not isinstance(suggestion, str) or not suggestion.strip():
            raise EstimationFailure("salary estimator returned an empty suggestion")

        self._logger.info("estimate.completed", source_index=index)
        return suggestion.strip()


class ExpectedSalaryEstimator:
    """Estimator that echoes the job's expected salary range."""

    template = "Based on your qualifications, a suggested salary is in the range of {expected}"

    def estimate(self, request: dict[str, Any]) -> str:
        expected = (request.get("expectedSalaryText") or "").strip()
        if not expected:
            raise EstimationFailure("no expected salary was provided for the job")
        return self.template.format(expected=expected)
