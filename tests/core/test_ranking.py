from __future__ import annotations

from typing import Any

import pytest

from biaswatch.core import (
    apply_rankings,
    assign_ranks,
    average_divergence,
    build_counterfactual_explanation,
    compute_divergence,
    rank_candidates_by_composite,
    rank_candidates_by_similarity_only,
)
from biaswatch.core.ranking import divergence_risk, mandate_bias_risk, top_candidate_changes
from biaswatch.errors import InvalidInputError
from biaswatch.schemas import CandidateScoreSummary


def build_summary(candidate_id: str, **kwargs: Any) -> CandidateScoreSummary:
    defaults: dict[str, Any] = {
        "candidate_id": candidate_id,
        "name": f"Candidate {candidate_id}",
        "mandate_id": "M-001",
        "expertise_score": 50.0,
        "similarity_score": 50.0,
        "reliability_score": 50.0,
        "overall_score": 50.0,
    }
    defaults.update(kwargs)
    return CandidateScoreSummary(**defaults)


def example_summaries() -> list[CandidateScoreSummary]:
    return [
        build_summary("A", expertise_score=90, similarity_score=20, reliability_score=70, overall_score=74.5),
        build_summary("B", expertise_score=40, similarity_score=85, reliability_score=70, overall_score=54.25, bias_risk="high"),
        build_summary("C", expertise_score=60, similarity_score=60, reliability_score=70, overall_score=62.5),
    ]


def test_rankings_are_dense_and_ordered():
    summaries = example_summaries()

    composite = rank_candidates_by_composite(summaries)
    similarity = rank_candidates_by_similarity_only(summaries)

    assert [(r.rank, r.candidate_id) for r in composite] == [(1, "A"), (2, "C"), (3, "B")]
    assert [(r.rank, r.candidate_id) for r in similarity] == [(1, "B"), (2, "C"), (3, "A")]


def test_rank_ties_break_on_expertise_then_id():
    summaries = [
        build_summary("z-2", overall_score=60, expertise_score=55),
        build_summary("a-1", overall_score=60, expertise_score=55),
        build_summary("m-3", overall_score=60, expertise_score=70),
    ]

    ranked = rank_candidates_by_composite(summaries)

    assert [r.candidate_id for r in ranked] == ["m-3", "a-1", "z-2"]
    assert [r.rank for r in ranked] == [1, 2, 3]


def test_ranking_ignores_input_order():
    summaries = example_summaries()

    forward = rank_candidates_by_similarity_only(summaries)
    backward = rank_candidates_by_similarity_only(list(reversed(summaries)))

    assert [r.candidate_id for r in forward] == [r.candidate_id for r in backward]


def test_empty_inputs_rank_to_empty_lists():
    assert rank_candidates_by_composite([]) == []
    assert rank_candidates_by_similarity_only([]) == []
    assert compute_divergence([], []) == []
    assert average_divergence([]) == 0.0


def test_assign_ranks_rejects_duplicate_ids():
    with pytest.raises(InvalidInputError):
        assign_ranks([build_summary("A"), build_summary("A")])


def test_apply_rankings_sets_both_ranks():
    ranked = apply_rankings(example_summaries())

    assert [(s.candidate_id, s.expertise_rank, s.similarity_rank) for s in ranked] == [
        ("A", 1, 3),
        ("C", 2, 2),
        ("B", 3, 1),
    ]


def test_divergence_movements_sum_to_zero():
    summaries = example_summaries() + [
        build_summary("D", expertise_score=10, similarity_score=95, overall_score=40.0),
        build_summary("E", expertise_score=80, similarity_score=5, overall_score=70.0),
    ]

    divergences = compute_divergence(
        rank_candidates_by_composite(summaries),
        rank_candidates_by_similarity_only(summaries),
    )

    assert len(divergences) == 5
    assert sum(d.movement for d in divergences) == 0
    assert [d.expertise_rank for d in divergences] == [1, 2, 3, 4, 5]


def test_counterfactual_reports_top_change():
    summaries = example_summaries()
    divergences = compute_divergence(
        rank_candidates_by_composite(summaries),
        rank_candidates_by_similarity_only(summaries),
    )

    explanation = build_counterfactual_explanation(divergences)

    assert explanation == (
        "Expertise-based ranking keeps Candidate A at the top. "
        "A similarity-led ranking would promote Candidate B on shared background "
        "and affinity signals."
    )


def test_counterfactual_reports_stable_ranking():
    summaries = [
        build_summary("A", overall_score=80, similarity_score=70),
        build_summary("B", overall_score=70, similarity_score=60),
        build_summary("C", overall_score=60, similarity_score=50),
    ]
    divergences = compute_divergence(
        rank_candidates_by_composite(summaries),
        rank_candidates_by_similarity_only(summaries),
    )

    explanation = build_counterfactual_explanation(divergences)

    assert explanation.startswith("Similarity signals do not materially change the top 3 candidates.")
    assert "(0.00)" in explanation


def test_mandate_bias_risk_escalates_on_divergence():
    calm = [build_summary("A"), build_summary("B")]

    assert mandate_bias_risk(calm, 0.5) == "low"
    assert mandate_bias_risk(calm, 1.5) == "moderate"
    assert mandate_bias_risk(calm, 3.0) == "high"
    assert mandate_bias_risk([build_summary("A", bias_risk="moderate")], 0.0) == "moderate"
    assert mandate_bias_risk(example_summaries(), 0.0) == "high"


def test_counterfactual_reports_large_move_below_the_top():
    summaries = [
        build_summary("A", overall_score=90, similarity_score=90),
        build_summary("B", overall_score=80, similarity_score=10),
        build_summary("C", overall_score=70, similarity_score=80),
        build_summary("D", overall_score=60, similarity_score=70),
        build_summary("E", overall_score=50, similarity_score=60),
    ]
    divergences = compute_divergence(
        rank_candidates_by_composite(summaries),
        rank_candidates_by_similarity_only(summaries),
    )

    explanation = build_counterfactual_explanation(divergences)

    assert not top_candidate_changes(divergences)
    assert explanation == (
        "Top candidate remains the same, but Candidate B would move 3 positions "
        "in a similarity-led ranking. Affinity signals may be distorting their perceived fit."
    )


def test_top_candidate_changes():
    summaries = example_summaries()
    changed = compute_divergence(
        rank_candidates_by_composite(summaries),
        rank_candidates_by_similarity_only(summaries),
    )
    stable = [build_summary("A", overall_score=80, similarity_score=70), build_summary("B")]
    unchanged = compute_divergence(
        rank_candidates_by_composite(stable),
        rank_candidates_by_similarity_only(stable),
    )

    assert top_candidate_changes(changed)
    assert not top_candidate_changes(unchanged)
    assert not top_candidate_changes([])


def test_divergence_risk_thresholds():
    assert divergence_risk(0.0) == "low"
    assert divergence_risk(1.49) == "low"
    assert divergence_risk(1.5) == "moderate"
    assert divergence_risk(2.99) == "moderate"
    assert divergence_risk(3.0) == "high"
