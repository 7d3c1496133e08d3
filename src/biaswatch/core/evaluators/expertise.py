"""Expertise relevance: overlap between asserted domain tags and mandate needs."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ...schemas import CandidateContext, MandateRequirements, SourceSignal
from ...text import canonical_tag
from ..config import DEFAULT_CONFIG, ScoringConfig


def expertise_credits(
    signals: Iterable[SourceSignal],
    required_tags: Iterable[str],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> dict[str, float]:
    """Credit each required tag with the strongest signal type asserting it."""
    required = {canonical_tag(tag) for tag in required_tags} - {""}
    credits = {tag: 0.0 for tag in required}
    for signal in signals:
        weight = config.type_weight(signal.type)
        for tag in signal.domain_tags:
            if tag in credits and weight > credits[tag]:
                credits[tag] = weight
    return credits


def expertise_score(
    signals: Iterable[SourceSignal],
    required_tags: Iterable[str] | Mapping[str, float],
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Weighted share of the mandate's required tags backed by evidence, 0-100.

    ``required_tags`` may be a mapping of tag to importance weight; plain
    iterables weigh every tag at 1.0. Each matched tag earns the weight of
    the strongest signal type asserting it, so a tag seen only in market
    data counts for less than one on the CV.
    """
    if isinstance(required_tags, Mapping):
        tag_weights = {canonical_tag(tag): max(float(w), 0.0) for tag, w in required_tags.items()}
    else:
        tag_weights = {canonical_tag(tag): 1.0 for tag in required_tags}
    tag_weights.pop("", None)

    credits = expertise_credits(signals, tag_weights, config)
    denominator = sum(tag_weights.values()) * config.max_type_weight
    if denominator <= 0:
        return 0.0
    numerator = sum(tag_weights[tag] * credit for tag, credit in credits.items())
    return _clamp(100.0 * numerator / denominator)


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 100.0)


class ExpertiseEvaluator:
    """Score how well a candidate's evidence covers the mandate's required tags."""

    method = "expertise"

    def __init__(self, *, config: ScoringConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    def evaluate(self, candidate: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        profile = CandidateContext.model_validate(candidate)
        mandate = MandateRequirements.model_validate(context["mandate"])
        weighted = {tag: mandate.weight_for(tag) for tag in mandate.required_tags}

        score = expertise_score(profile.signals, weighted, self._config)
        credits = expertise_credits(profile.signals, mandate.required_tags, self._config)
        matched = sorted(tag for tag, credit in credits.items() if credit > 0)
        missing = sorted(tag for tag, credit in credits.items() if credit <= 0)

        return {
            "method": self.method,
            "scores": {"expertise": score},
            "metadata": {
                "required_tags": mandate.required_tags,
                "matched_tags": matched,
                "missing_tags": missing,
                "credits": credits,
                "per_signal": {
                    signal.id: expertise_score([signal], weighted, self._config)
                    for signal in profile.signals
                },
            },
        }
