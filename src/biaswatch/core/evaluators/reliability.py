"""Source reliability from historical outcomes."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from ...schemas import CandidateContext, SourceSignal
from ..config import DEFAULT_CONFIG, ScoringConfig

NEUTRAL_RELIABILITY = 50.0


def source_reliability_score(
    history: Sequence[bool],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Share of correct historical outcomes, 0-100.

    Short histories are Laplace-smoothed (one extra success, two extra
    trials), which makes an empty history exactly 50. With
    ``reliability_min_observations`` at 0 nothing is smoothed, but an empty
    history still scores 50.
    """
    total = len(history)
    if total == 0:
        return NEUTRAL_RELIABILITY
    correct = sum(1 for outcome in history if outcome)
    if total < config.reliability_min_observations:
        ratio = (correct + 1) / (total + 2)
    else:
        ratio = correct / total
    return min(max(100.0 * ratio, 0.0), 100.0)


def candidate_reliability_score(
    signals: Iterable[SourceSignal],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Signal-type weighted mean of per-source reliability; 50 with no evidence."""
    weighted_sum = 0.0
    total_weight = 0.0
    for signal in signals:
        weight = config.type_weight(signal.type)
        if weight <= 0:
            continue
        weighted_sum += weight * source_reliability_score(signal.reliability_history, config)
        total_weight += weight
    if total_weight <= 0:
        return NEUTRAL_RELIABILITY
    return weighted_sum / total_weight


class ReliabilityEvaluator:
    """Weigh each source by how often it has been right before."""

    method = "reliability"

    def __init__(self, *, config: ScoringConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = CandidateContext.model_validate(candidate)
        per_signal = {
            signal.id: source_reliability_score(signal.reliability_history, self._config)
            for signal in profile.signals
        }
        return {
            "method": self.method,
            "scores": {"reliability": candidate_reliability_score(profile.signals, self._config)},
            "metadata": {
                "per_signal": per_signal,
                "observations": {
                    signal.id: len(signal.reliability_history) for signal in profile.signals
                },
                "smoothed": sorted(
                    signal.id
                    for signal in profile.signals
                    if len(signal.reliability_history) < self._config.reliability_min_observations
                ),
            },
        }
