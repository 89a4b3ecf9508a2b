"""Candidate records produced along the pipeline."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class OracleAnalysis(BaseModel):
    """Structured object returned by the analysis oracle for one resume.

    ``match_score`` is kept as whatever the oracle sent; the ranker decides
    whether it is usable.
    """

    match_score: Any = None
    name: str | None = None
    top_skills: list[str]
    highlights: str
    weak_points: str
    suggestions: str
    interview_questions: list[str]
    model_answers: list[str]
    candidate_email: str | None = None

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    @field_validator("name", "candidate_email", mode="before")
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class ScoredCandidate(BaseModel):
    """Normalized oracle output for the resume at ``source_index``."""

    source_index: int = Field(ge=0)
    name: str | None = None
    match_score: Any = None
    top_skills: list[str] = Field(default_factory=list)
    highlights: str = ""
    weak_points: str = ""
    suggestions: str = ""
    interview_questions: list[str] = Field(default_factory=list)
    model_answers: list[str] = Field(default_factory=list)
    candidate_email: str | None = None

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    @field_validator("name", "candidate_email", mode="before")
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @classmethod
    def from_analysis(cls, analysis: OracleAnalysis, *, source_index: int) -> "ScoredCandidate":
        return cls(source_index=source_index, **analysis.model_dump())

    def interview_pairs(self) -> list[tuple[str, str]]:
        """Pair questions with model answers, dropping unmatched trailing entries."""
        return list(zip(self.interview_questions, self.model_answers))


class RankedCandidate(ScoredCandidate):
    """Scored candidate with its 1-based position in the run."""

    rank: int = Field(ge=1)


class TriagedCandidate(RankedCandidate):
    """Ranked candidate annotated for exactly one downstream branch."""

    shortlisted: bool
    salary_suggestion: str | None = None
    rejection_reason: str | None = None

    def to_record(self) -> dict[str, Any]:
        record = self.model_dump(mode="json", by_alias=True)
        record["interviewPairs"] = [
            {"question": question, "answer": answer} for question, answer in self.interview_pairs()
        ]
        return record


__all__ = [
    "OracleAnalysis",
    "RankedCandidate",
    "ScoredCandidate",
    "TriagedCandidate",
]
