from __future__ import annotations

import pytest

from resumerank.core import TriageConfig, TriagePolicy, rank_candidates
from resumerank.errors import PreconditionError
from resumerank.schemas import RankedCandidate, ScoredCandidate


def build_ranked(scores: list[float | None], email: str | None = "c@example.com") -> list[RankedCandidate]:
    candidates = [
        ScoredCandidate(
            source_index=index,
            match_score=score,
            top_skills=["Python", "SQL"],
            highlights="Strong backend work",
            weak_points="Little cloud exposure",
            suggestions="Add metrics",
            interview_questions=["Q1", "Q2"],
            model_answers=["A1"],
            candidate_email=email,
        )
        for index, score in enumerate(scores)
    ]
    ranked, _ = rank_candidates(candidates)
    return ranked


def test_triage_partitions_by_rank():
    policy = TriagePolicy()

    triaged = policy.triage(build_ranked([40, 90, 70]), 2)

    partition = {c.source_index: c.shortlisted for c in triaged}
    assert partition == {1: True, 2: True, 0: False}


def test_shortlist_depends_on_rank_not_score():
    policy = TriagePolicy()

    triaged = policy.triage(build_ranked([50]), 1)

    assert triaged[0].shortlisted is True
    assert triaged[0].rejection_reason is None


def test_rejected_candidate_loses_presentation_fields_but_keeps_email():
    policy = TriagePolicy()

    rejected = policy.triage(build_ranked([90, 35]), 1)[1]

    assert rejected.shortlisted is False
    assert rejected.top_skills == []
    assert rejected.highlights == ""
    assert rejected.suggestions == ""
    assert rejected.interview_questions == []
    assert rejected.model_answers == []
    assert rejected.candidate_email == "c@example.com"
    assert rejected.weak_points == "Little cloud exposure"
    assert rejected.salary_suggestion is None


def test_rejection_reason_is_deterministic_text():
    policy = TriagePolicy()

    rejected = policy.triage(build_ranked([90, 35]), 1)[1]

    assert rejected.rejection_reason == (
        "Not shortlisted: match score 35 placed the application at rank 2. "
        "Main concerns: Little cloud exposure"
    )


def test_rejection_reason_uses_configured_template_and_handles_bad_score():
    policy = TriagePolicy(config=TriageConfig(rejection_reason_template="{score}|{weak_points}"))

    rejected = policy.triage(build_ranked([90, None]), 1)[1]

    assert rejected.rejection_reason == "n/a|Little cloud exposure"


def test_shortlisted_candidate_passes_through_unchanged():
    policy = TriagePolicy()
    ranked = build_ranked([90, 35])

    shortlisted = policy.triage(ranked, 1)[0]

    assert shortlisted.top_skills == ranked[0].top_skills
    assert shortlisted.model_answers == ["A1"]
    assert shortlisted.rank == 1


def test_triage_is_idempotent():
    policy = TriagePolicy()
    first = policy.triage(build_ranked([10, 80, 55, 55]), 2)

    second = policy.triage(first, 2)

    assert second == first


def test_shortlist_larger_than_batch_shortlists_everyone():
    policy = TriagePolicy()

    triaged = policy.triage(build_ranked([10, 20, 30]), 5)

    assert all(c.shortlisted for c in triaged)


@pytest.mark.parametrize("size", [0, -3])
def test_shortlist_size_must_be_positive(size: int):
    with pytest.raises(PreconditionError):
        TriagePolicy().triage(build_ranked([10]), size)


@pytest.mark.parametrize("template", ["{reason}", "Rank {0}", "Score {score:d}", "{weak_points"])
def test_unknown_rejection_placeholders_fail_at_configuration(template: str):
    with pytest.raises(PreconditionError, match="rejection reason template"):
        TriageConfig(rejection_reason_template=template)


def test_custom_rejection_template_renders_all_placeholders():
    config = TriageConfig(rejection_reason_template="#{rank} ({score}): {weak_points}")
    triaged = TriagePolicy(config=config).triage(build_ranked([90, 35]), 1)

    assert triaged[1].rejection_reason == "#2 (35): Little cloud exposure"
