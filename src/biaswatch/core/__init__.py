"""Core scoring engine components."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .config import DEFAULT_CONFIG, ScoringConfig
from .evaluators import (
    ExpertiseEvaluator,
    ReliabilityEvaluator,
    SimilarityEvaluator,
    candidate_reliability_score,
    expertise_score,
    similarity_score,
    source_reliability_score,
)
from .ranking import (
    RankedCandidate,
    apply_rankings,
    assign_ranks,
    average_divergence,
    build_counterfactual_explanation,
    compute_divergence,
    divergence_risk,
    mandate_bias_risk,
    rank_candidates_by_composite,
    rank_candidates_by_similarity_only,
    top_candidate_changes,
)
from .reasoning import (
    build_source_attributions,
    build_weekly_bias_summary,
    classify_reasoning_basis,
    summarise_candidate_scores,
)
from .scoring import (
    CandidateEvaluation,
    EvaluationResult,
    ScoringCore,
    bias_risk,
    overall_score,
)
from .tags import (
    TagVocabulary,
    build_candidate_context,
    build_mandate_requirements,
    build_source_profile,
)


@runtime_checkable
class Evaluator(Protocol):
    """Evaluator contract for computing one sub-score."""

    def evaluate(self, candidate: dict, context: dict) -> dict:
        """Return evaluation results for a candidate under the given context."""


__all__ = [
    "DEFAULT_CONFIG",
    "Evaluator",
    "ScoringConfig",
    "ScoringCore",
    "CandidateEvaluation",
    "EvaluationResult",
    "ExpertiseEvaluator",
    "SimilarityEvaluator",
    "ReliabilityEvaluator",
    "RankedCandidate",
    "TagVocabulary",
    "apply_rankings",
    "assign_ranks",
    "average_divergence",
    "bias_risk",
    "build_candidate_context",
    "build_counterfactual_explanation",
    "build_mandate_requirements",
    "build_source_attributions",
    "build_source_profile",
    "build_weekly_bias_summary",
    "candidate_reliability_score",
    "classify_reasoning_basis",
    "compute_divergence",
    "divergence_risk",
    "mandate_bias_risk",
    "top_candidate_changes",
    "expertise_score",
    "overall_score",
    "rank_candidates_by_composite",
    "rank_candidates_by_similarity_only",
    "similarity_score",
    "source_reliability_score",
    "summarise_candidate_scores",
]
