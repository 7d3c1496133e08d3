"""Scoring core orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

import structlog

from ..schemas import (
    BiasRiskLevel,
    CandidateContext,
    CandidateScoreSummary,
    MandateRequirements,
    MandateScoringResult,
)
from .config import DEFAULT_CONFIG, ScoringConfig
from .evaluators import ExpertiseEvaluator, ReliabilityEvaluator, SimilarityEvaluator
from .evaluators.reliability import NEUTRAL_RELIABILITY
from .ranking import (
    apply_rankings,
    average_divergence,
    build_counterfactual_explanation,
    compute_divergence,
    mandate_bias_risk,
    rank_candidates_by_composite,
    rank_candidates_by_similarity_only,
    top_candidate_changes,
)
from .reasoning import (
    build_source_attributions,
    classify_reasoning_basis,
    summarise_candidate_scores,
)


def overall_score(
    expertise: float,
    similarity: float,
    reliability: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Fixed-weight composite of the three sub-scores, 0-100.

    The weighted sum is divided by the total weight so overridden weights
    that do not sum to one still land in range. With
    ``similarity_dominance_cap`` set, similarity counts for at most
    ``expertise + cap`` here; the reported similarity score is untouched.
    """
    if config.similarity_dominance_cap is not None:
        similarity = min(similarity, expertise + config.similarity_dominance_cap)
    total_weight = config.expertise_weight + config.similarity_weight + config.reliability_weight
    if total_weight <= 0:
        return 0.0
    weighted = (
        config.expertise_weight * expertise
        + config.similarity_weight * similarity
        + config.reliability_weight * reliability
    )
    return min(max(weighted / total_weight, 0.0), 100.0)


def bias_risk(
    expertise: float,
    similarity: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> BiasRiskLevel:
    gap = similarity - expertise
    if gap > config.high_risk_gap and similarity > config.high_risk_min_similarity:
        return "high"
    if gap > config.moderate_risk_gap:
        return "moderate"
    return "low"


@dataclass(slots=True)
class EvaluationResult:
    """Normalized evaluator output."""

    method: str
    scores: dict[str, float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class CandidateEvaluation:
    """Evaluator outputs and the resulting (unranked) summary for one candidate."""

    candidate_id: str
    mandate_id: str
    evaluations: list[EvaluationResult]
    summary: CandidateScoreSummary


class ScoringCore:
    """Runs the sub-score evaluators and combines them into rankings."""

    def __init__(
        self,
        evaluators: Iterable[Any] | None = None,
        *,
        config: ScoringConfig | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        if evaluators is None:
            evaluators = [
                ExpertiseEvaluator(config=self._config),
                SimilarityEvaluator(config=self._config),
                ReliabilityEvaluator(config=self._config),
            ]
        self._evaluators = list(evaluators)
        self._logger = structlog.get_logger(__name__)

    @property
    def config(self) -> ScoringConfig:
        return self._config

    def evaluate(
        self,
        *,
        candidate: CandidateContext,
        mandate: MandateRequirements,
    ) -> CandidateEvaluation:
        serialized_candidate = candidate.model_dump(mode="python")
        evaluation_context = {"mandate": mandate.model_dump(mode="python")}

        evaluations: list[EvaluationResult] = []
        aggregated: dict[str, float] = {}
        for evaluator in self._evaluators:
            raw_result = evaluator.evaluate(serialized_candidate, evaluation_context)
            normalized = self._normalize_evaluation_result(raw_result)
            evaluations.append(normalized)
            for key, value in normalized.scores.items():
                aggregated[key] = aggregated.get(key, 0.0) + value

        expertise = _clamp(aggregated.get("expertise", 0.0))
        similarity = _clamp(aggregated.get("similarity", 0.0))
        reliability = _clamp(aggregated.get("reliability", NEUTRAL_RELIABILITY))

        summary = CandidateScoreSummary(
            candidate_id=candidate.candidate_id,
            name=candidate.name,
            mandate_id=candidate.mandate_id,
            expertise_score=expertise,
            similarity_score=similarity,
            reliability_score=reliability,
            overall_score=overall_score(expertise, similarity, reliability, self._config),
            bias_risk=bias_risk(expertise, similarity, self._config),
            similarity_tags=sorted(
                {tag for signal in candidate.signals for tag in signal.similarity_tags}
            ),
            attributions=build_source_attributions(
                candidate,
                mandate,
                self._config,
                reasoning_basis=classify_reasoning_basis(expertise, similarity, self._config),
            ),
        )
        return CandidateEvaluation(
            candidate_id=candidate.candidate_id,
            mandate_id=mandate.mandate_id,
            evaluations=evaluations,
            summary=summary,
        )

    def score_candidates(
        self,
        candidates: Iterable[CandidateContext],
        mandate: MandateRequirements,
    ) -> list[CandidateScoreSummary]:
        """Score and rank candidates; each summary carries both ranks and its reasoning."""
        summaries: list[CandidateScoreSummary] = []
        for candidate in candidates:
            if candidate.mandate_id != mandate.mandate_id:
                self._logger.warning(
                    "scoring.mandate_mismatch",
                    candidate_id=candidate.candidate_id,
                    candidate_mandate_id=candidate.mandate_id,
                    mandate_id=mandate.mandate_id,
                )
                continue
            summaries.append(self.evaluate(candidate=candidate, mandate=mandate).summary)

        return [
            summary.model_copy(update={"reasoning": summarise_candidate_scores(summary)})
            for summary in apply_rankings(summaries)
        ]

    def score_mandate(
        self,
        candidates: Iterable[CandidateContext],
        mandate: MandateRequirements,
        *,
        scored_at: datetime,
    ) -> MandateScoringResult:
        ranked = self.score_candidates(candidates, mandate)
        divergences = compute_divergence(
            rank_candidates_by_composite(ranked),
            rank_candidates_by_similarity_only(ranked),
        )
        divergence = average_divergence(divergences)
        top_changes = top_candidate_changes(divergences)
        risk = mandate_bias_risk(ranked, divergence, self._config)

        self._logger.info(
            "scoring.mandate_scored",
            mandate_id=mandate.mandate_id,
            candidate_count=len(ranked),
            average_divergence=divergence,
            bias_risk=risk,
            top_candidate_changes=top_changes,
            high_risk_candidates=[s.candidate_id for s in ranked if s.bias_risk == "high"],
        )

        return MandateScoringResult(
            mandate_id=mandate.mandate_id,
            mandate_name=mandate.name,
            sector=mandate.sector,
            scored_at=scored_at,
            candidates=ranked,
            divergences=divergences,
            average_divergence=divergence,
            bias_risk=risk,
            top_candidate_changes=top_changes,
            explanation=build_counterfactual_explanation(divergences),
        )

    @staticmethod
    def _normalize_evaluation_result(payload: dict[str, Any]) -> EvaluationResult:
        method = payload.get("method")
        scores = payload.get("scores") or {}
        metadata = payload.get("metadata") or {}
        if method is None:
            raise ValueError("Evaluator result must include 'method'.")
        if not isinstance(scores, dict):
            raise ValueError("Evaluator result 'scores' must be a mapping.")
        return EvaluationResult(
            method=str(method),
            scores={k: float(v) for k, v in scores.items()},
            metadata=dict(metadata),
        )


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 100.0)
