"""Relational (similarity) signal density, independent of mandate needs."""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from ...schemas import CandidateContext, SourceSignal
from ..config import DEFAULT_CONFIG, ScoringConfig


def similarity_score(
    signals: Iterable[SourceSignal],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Signal-type weighted density of similarity tags, 0-100.

    A signal reaches full density once it carries ``similarity_saturation``
    distinct similarity tags.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for signal in signals:
        weight = config.type_weight(signal.type)
        if weight <= 0:
            continue
        density = min(len(signal.similarity_tags) / config.similarity_saturation, 1.0)
        weighted_sum += weight * density
        total_weight += weight
    if total_weight <= 0:
        return 0.0
    return min(max(100.0 * weighted_sum / total_weight, 0.0), 100.0)


class SimilarityEvaluator:
    """Measure how much of the evidence is relational rather than expertise."""

    method = "similarity"

    def __init__(self, *, config: ScoringConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = CandidateContext.model_validate(candidate)
        tag_counts = Counter(
            tag for signal in profile.signals for tag in signal.similarity_tags
        )
        return {
            "method": self.method,
            "scores": {"similarity": similarity_score(profile.signals, self._config)},
            "metadata": {
                "similarity_tags": sorted(tag_counts),
                "tag_counts": dict(sorted(tag_counts.items())),
                "saturation": self._config.similarity_saturation,
                "per_signal": {
                    signal.id: similarity_score([signal], self._config)
                    for signal in profile.signals
                },
            },
        }
