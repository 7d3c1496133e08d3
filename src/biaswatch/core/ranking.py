"""Composite and similarity-only rankings, and the divergence between them.

Sorting and rank assignment are separate steps: the sort functions define a
deterministic total order (score desc, expertise desc, candidate id asc) and
:func:`assign_ranks` numbers any ordered sequence densely from 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..errors import InvalidInputError
from ..schemas import BiasRiskLevel, CandidateScoreSummary, RankingDivergence
from .config import DEFAULT_CONFIG, ScoringConfig


@dataclass(frozen=True, slots=True)
class RankedCandidate:
    """A summary paired with its 1-based position in one ordering."""

    rank: int
    summary: CandidateScoreSummary

    @property
    def candidate_id(self) -> str:
        return self.summary.candidate_id


def composite_sort_key(summary: CandidateScoreSummary) -> tuple[float, float, str]:
    return (-summary.overall_score, -summary.expertise_score, summary.candidate_id)


def similarity_sort_key(summary: CandidateScoreSummary) -> tuple[float, float, str]:
    return (-summary.similarity_score, -summary.expertise_score, summary.candidate_id)


def sort_by_composite(candidates: Iterable[CandidateScoreSummary]) -> list[CandidateScoreSummary]:
    return sorted(candidates, key=composite_sort_key)


def sort_by_similarity(candidates: Iterable[CandidateScoreSummary]) -> list[CandidateScoreSummary]:
    return sorted(candidates, key=similarity_sort_key)


def assign_ranks(ordered: Sequence[CandidateScoreSummary]) -> list[RankedCandidate]:
    """Number an already-ordered sequence 1..N."""
    seen: set[str] = set()
    for summary in ordered:
        if summary.candidate_id in seen:
            raise InvalidInputError(
                f"duplicate candidate_id in ranking: {summary.candidate_id!r}",
                field="candidate_id",
            )
        seen.add(summary.candidate_id)
    return [RankedCandidate(rank=index, summary=summary) for index, summary in enumerate(ordered, start=1)]


def rank_candidates_by_composite(
    candidates: Iterable[CandidateScoreSummary],
) -> list[RankedCandidate]:
    return assign_ranks(sort_by_composite(candidates))


def rank_candidates_by_similarity_only(
    candidates: Iterable[CandidateScoreSummary],
) -> list[RankedCandidate]:
    return assign_ranks(sort_by_similarity(candidates))


def apply_rankings(candidates: Iterable[CandidateScoreSummary]) -> list[CandidateScoreSummary]:
    """Return copies carrying both ranks, in composite order."""
    summaries = list(candidates)
    similarity_ranks = {
        ranked.candidate_id: ranked.rank
        for ranked in rank_candidates_by_similarity_only(summaries)
    }
    return [
        ranked.summary.model_copy(
            update={
                "expertise_rank": ranked.rank,
                "similarity_rank": similarity_ranks[ranked.candidate_id],
            }
        )
        for ranked in rank_candidates_by_composite(summaries)
    ]


def compute_divergence(
    expertise_ranking: Sequence[RankedCandidate],
    similarity_ranking: Sequence[RankedCandidate],
) -> list[RankingDivergence]:
    """Per-candidate ``similarity_rank - expertise_rank``, in composite order.

    Candidates absent from either ranking are skipped.
    """
    similarity_ranks = {ranked.candidate_id: ranked.rank for ranked in similarity_ranking}
    divergences: list[RankingDivergence] = []
    for ranked in expertise_ranking:
        similarity_rank = similarity_ranks.get(ranked.candidate_id)
        if similarity_rank is None:
            continue
        divergences.append(
            RankingDivergence(
                candidate_id=ranked.candidate_id,
                candidate_name=ranked.summary.name,
                expertise_rank=ranked.rank,
                similarity_rank=similarity_rank,
                movement=similarity_rank - ranked.rank,
            )
        )
    return divergences


def average_divergence(divergences: Sequence[RankingDivergence]) -> float:
    """Mean absolute rank movement; 0 for an empty set."""
    if not divergences:
        return 0.0
    return sum(abs(item.movement) for item in divergences) / len(divergences)


def top_candidate_changes(divergences: Sequence[RankingDivergence]) -> bool:
    """True when the similarity-only ranking puts a different candidate first."""
    if not divergences:
        return False
    expertise_top = min(divergences, key=lambda item: item.expertise_rank)
    similarity_top = min(divergences, key=lambda item: item.similarity_rank)
    return expertise_top.candidate_id != similarity_top.candidate_id


def build_counterfactual_explanation(
    divergences: Sequence[RankingDivergence],
    *,
    top_n: int = 3,
    jump_threshold: int = 2,
) -> str:
    """Describe what a similarity-led ranking would change at the top."""
    if not divergences:
        return "No candidates were scored for this mandate."

    by_expertise = sorted(divergences, key=lambda item: item.expertise_rank)
    by_similarity = sorted(divergences, key=lambda item: item.similarity_rank)
    expertise_top = by_expertise[0]
    similarity_top = by_similarity[0]

    if top_candidate_changes(divergences):
        return (
            f"Expertise-based ranking keeps {_display(expertise_top)} at the top. "
            f"A similarity-led ranking would promote {_display(similarity_top)} "
            "on shared background and affinity signals."
        )

    biggest: RankingDivergence | None = None
    for item in by_expertise[:top_n]:
        if biggest is None or abs(item.movement) > abs(biggest.movement):
            biggest = item
    if biggest is not None and abs(biggest.movement) > jump_threshold:
        return (
            f"Top candidate remains the same, but {_display(biggest)} would move "
            f"{abs(biggest.movement)} positions in a similarity-led ranking. "
            "Affinity signals may be distorting their perceived fit."
        )

    return (
        f"Similarity signals do not materially change the top {top_n} candidates. "
        f"Divergence is low ({average_divergence(divergences):.2f}), so the "
        "expertise-led ranking is robust here."
    )


def mandate_bias_risk(
    candidates: Iterable[CandidateScoreSummary],
    divergence: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> BiasRiskLevel:
    levels = {summary.bias_risk for summary in candidates}
    levels.add(divergence_risk(divergence, config))
    if "high" in levels:
        return "high"
    if "moderate" in levels:
        return "moderate"
    return "low"


def divergence_risk(divergence: float, config: ScoringConfig = DEFAULT_CONFIG) -> BiasRiskLevel:
    """Risk level implied by an average rank divergence alone."""
    if divergence >= config.severe_divergence_threshold:
        return "high"
    if divergence >= config.high_divergence_threshold:
        return "moderate"
    return "low"


def _display(item: RankingDivergence) -> str:
    return item.candidate_name or item.candidate_id
