"""Human-readable explanations and the weekly bias-watch aggregate.

Every function here is a deterministic template over its inputs so the same
scores always produce the same text.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable, Sequence

from ..schemas import (
    SIGNAL_TYPES,
    CandidateContext,
    CandidateScoreSummary,
    MandateBiasBreakdown,
    MandateRequirements,
    MandateScoringResult,
    ReasoningBasis,
    SourceAttribution,
    SourceTypeBiasBreakdown,
    WeeklyBiasSummary,
    WeekWindow,
)
from .config import DEFAULT_CONFIG, ScoringConfig
from .evaluators import expertise_score, similarity_score, source_reliability_score
from .ranking import divergence_risk

MAX_MANDATE_BREAKDOWN = 5

SOURCE_TYPE_COMMENTS: dict[str, str] = {
    "cv": "CV evidence is carrying relational signal; check parsed employer and school tags.",
    "notes": "Mandate notes may reflect client preference for familiarity. Separate explicit requirements from relationships.",
    "voice": "Voice notes often reference shared background. Tighten call prompts toward demonstrable expertise.",
    "market": "Market data is picking up relationship patterns from comparable placements.",
}


def classify_reasoning_basis(
    expertise: float,
    similarity: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> ReasoningBasis:
    gap = similarity - expertise
    if gap > config.similarity_heavy_gap:
        return "similarity-heavy"
    if gap > config.moderate_risk_gap:
        return "mixed"
    return "expertise-led"


def build_source_attributions(
    context: CandidateContext,
    mandate: MandateRequirements,
    config: ScoringConfig = DEFAULT_CONFIG,
    *,
    reasoning_basis: ReasoningBasis | None = None,
) -> list[SourceAttribution]:
    """Per-signal scores tagged with the candidate's reasoning basis.

    Every attribution of one candidate carries the same basis, classified
    from the candidate-level expertise and similarity scores unless
    ``reasoning_basis`` is given.
    """
    weighted = {tag: mandate.weight_for(tag) for tag in mandate.required_tags}
    if reasoning_basis is None:
        reasoning_basis = classify_reasoning_basis(
            expertise_score(context.signals, weighted, config),
            similarity_score(context.signals, config),
            config,
        )
    attributions: list[SourceAttribution] = []
    for signal in context.signals:
        expertise = expertise_score([signal], weighted, config)
        similarity = similarity_score([signal], config)
        attributions.append(
            SourceAttribution(
                signal_id=signal.id,
                signal_type=signal.type,
                label=signal.label,
                reasoning_basis=reasoning_basis,
                expertise_score=expertise,
                similarity_score=similarity,
                reliability_score=source_reliability_score(signal.reliability_history, config),
            )
        )
    return attributions


def summarise_candidate_scores(summary: CandidateScoreSummary) -> str:
    """Explain which score dominates a candidate's position, and by how much."""
    name = summary.name or summary.candidate_id
    expertise = summary.expertise_score
    similarity = summary.similarity_score
    gap = abs(expertise - similarity)

    parts: list[str] = []
    if summary.expertise_rank:
        parts.append(
            f"{name} ranks #{summary.expertise_rank} with a composite score of "
            f"{summary.overall_score:.1f}."
        )
    else:
        parts.append(f"{name} has a composite score of {summary.overall_score:.1f}.")

    if expertise >= similarity:
        parts.append(
            f"Expertise leads similarity by {gap:.1f} points "
            f"({expertise:.1f} vs {similarity:.1f})."
        )
    else:
        parts.append(
            f"Similarity exceeds expertise by {gap:.1f} points "
            f"({similarity:.1f} vs {expertise:.1f})."
        )
    parts.append(f"Source reliability is {summary.reliability_score:.1f}.")

    if summary.expertise_rank and summary.similarity_rank:
        if summary.similarity_rank < summary.expertise_rank:
            parts.append(
                f"A similarity-only ranking would lift them from #{summary.expertise_rank} "
                f"to #{summary.similarity_rank}."
            )
        elif summary.similarity_rank > summary.expertise_rank:
            parts.append(
                f"A similarity-only ranking would drop them from #{summary.expertise_rank} "
                f"to #{summary.similarity_rank}."
            )

    if summary.bias_risk == "high":
        parts.append(
            "High bias risk: relational signals outweigh demonstrated expertise. "
            "Review the reasoning before sharing with the client."
        )
    elif summary.bias_risk == "moderate":
        parts.append("Moderate bias risk: check that similarity signals are not inflating this candidate.")
    else:
        parts.append("Bias risk is low.")
    return " ".join(parts)


def build_weekly_bias_summary(
    results: Iterable[MandateScoringResult],
    window: WeekWindow,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> WeeklyBiasSummary:
    """Aggregate the mandate results scored inside ``window``.

    A mandate is listed in the breakdown when it has a high-risk candidate,
    was rated high risk itself, or was rated moderate while a similarity-led
    ranking would change its top candidate. ``overall_bias_risk`` follows the
    mean divergence across decisions. An empty window yields a summary with
    every count at zero.
    """
    in_window = [result for result in results if window.contains(result.scored_at)]
    if not in_window:
        return WeeklyBiasSummary(week_id=window.week_id, week_label=window.label)

    high_risk_decisions = sum(1 for result in in_window if result.bias_risk == "high")

    events: Counter[str] = Counter()
    divergences: dict[str, list[float]] = defaultdict(list)
    latest: dict[str, MandateScoringResult] = {}
    flagged: set[str] = set()
    driver_counts: Counter[str] = Counter()
    heavy_sources: Counter[str] = Counter()

    for result in sorted(in_window, key=lambda item: item.scored_at):
        latest[result.mandate_id] = result
        divergences[result.mandate_id].append(result.average_divergence)
        if result.bias_risk == "high" or (
            result.bias_risk == "moderate" and result.top_candidate_changes
        ):
            flagged.add(result.mandate_id)
        for candidate in result.candidates:
            if candidate.bias_risk == "high":
                events[result.mandate_id] += 1
                driver_counts.update(candidate.similarity_tags)
            for attribution in candidate.attributions:
                if attribution.reasoning_basis == "similarity-heavy":
                    heavy_sources[attribution.signal_type] += 1

    flagged.update(mandate_id for mandate_id, count in events.items() if count > 0)
    breakdown = [
        MandateBiasBreakdown(
            mandate_id=mandate_id,
            mandate_name=latest[mandate_id].mandate_name,
            sector=latest[mandate_id].sector,
            high_bias_events=events[mandate_id],
            avg_divergence=_mean(divergences[mandate_id]),
            bias_risk=latest[mandate_id].bias_risk,
            top_candidate_changes=latest[mandate_id].top_candidate_changes,
        )
        for mandate_id in flagged
    ]
    breakdown.sort(
        key=lambda item: (-item.high_bias_events, -item.avg_divergence, item.mandate_id)
    )

    source_breakdown = [
        SourceTypeBiasBreakdown(
            source_type=source_type,
            similarity_heavy_count=heavy_sources[source_type],
            comment=SOURCE_TYPE_COMMENTS[source_type],
        )
        for source_type in SIGNAL_TYPES
        if heavy_sources[source_type] > 0
    ]
    source_breakdown.sort(key=lambda item: -item.similarity_heavy_count)

    avg_divergence = _mean([result.average_divergence for result in in_window])
    return WeeklyBiasSummary(
        week_id=window.week_id,
        week_label=window.label,
        high_risk_decisions=high_risk_decisions,
        affected_mandates=len(breakdown),
        top_similarity_driver=top_similarity_driver(driver_counts),
        avg_divergence=avg_divergence,
        overall_bias_risk=divergence_risk(avg_divergence, config),
        mandate_breakdown=breakdown[:MAX_MANDATE_BREAKDOWN],
        source_type_breakdown=source_breakdown,
    )


def top_similarity_driver(counts: Counter[str]) -> str | None:
    """Most frequent tag; ties go to the lexically smallest."""
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0
