from __future__ import annotations

from typing import Any

import pytest

from resumerank.errors import EstimationFailure
from resumerank.schemas import JobRequest, ResumeDocument, TriagedCandidate
from resumerank.services import CompensationAdvisor, ExpectedSalaryEstimator


class RecordingEstimator:
    def __init__(self, answer: Any = "USD 120k", error: Exception | None = None) -> None:
        self._answer = answer
        self._error = error
        self.requests: list[dict[str, Any]] = []

    def estimate(self, request: dict[str, Any]) -> Any:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return self._answer


def shortlisted() -> TriagedCandidate:
    return TriagedCandidate(
        source_index=0,
        match_score=91,
        rank=1,
        shortlisted=True,
        top_skills=["Python", "Kafka", "AWS"],
        highlights="Led the streaming platform",
    )


@pytest.fixture
def job() -> JobRequest:
    return JobRequest(job_description="Streaming engineer", expected_salary="110k-130k", num_to_shortlist=1)


@pytest.fixture
def doc() -> ResumeDocument:
    return ResumeDocument(content=b"Ten years of Python", media_type="text/plain")


def test_suggest_salary_supplies_full_context(job: JobRequest, doc: ResumeDocument):
    estimator = RecordingEstimator()

    suggestion = CompensationAdvisor(estimator).suggest_salary(job, shortlisted(), doc)

    assert suggestion == "USD 120k"
    assert estimator.requests == [
        {
            "jobDescriptionText": "Streaming engineer",
            "expectedSalaryText": "110k-130k",
            "resumeContent": "Ten years of Python",
            "topSkillsText": "Python, Kafka, AWS",
            "highlightsText": "Led the streaming platform",
        }
    ]


def test_suggest_salary_wraps_estimator_errors(job: JobRequest, doc: ResumeDocument):
    advisor = CompensationAdvisor(RecordingEstimator(error=RuntimeError("503")))

    with pytest.raises(EstimationFailure):
        advisor.suggest_salary(job, shortlisted(), doc)


@pytest.mark.parametrize("answer", ["", "   ", None])
def test_empty_suggestion_is_a_failure(job: JobRequest, doc: ResumeDocument, answer: Any):
    with pytest.raises(EstimationFailure):
        CompensationAdvisor(RecordingEstimator(answer=answer)).suggest_salary(job, shortlisted(), doc)


def test_text_extraction_failure_falls_back_to_empty_content(job: JobRequest, doc: ResumeDocument):
    def broken_extractor(_: ResumeDocument) -> str:
        raise RuntimeError("corrupt pdf")

    estimator = RecordingEstimator()
    CompensationAdvisor(estimator, text_extractor=broken_extractor).suggest_salary(job, shortlisted(), doc)

    assert estimator.requests[0]["resumeContent"] == ""


def test_rejected_candidates_get_no_suggestion(job: JobRequest, doc: ResumeDocument):
    candidate = shortlisted().model_copy(update={"shortlisted": False})

    with pytest.raises(ValueError):
        CompensationAdvisor(RecordingEstimator()).suggest_salary(job, candidate, doc)


def test_expected_salary_estimator_echoes_expected_range():
    suggestion = ExpectedSalaryEstimator().estimate({"expectedSalaryText": "110k-130k"})

    assert suggestion == "Based on your qualifications, a suggested salary is in the range of 110k-130k"


def test_expected_salary_estimator_needs_expected_salary():
    with pytest.raises(EstimationFailure):
        ExpectedSalaryEstimator().estimate({"expectedSalaryText": ""})
