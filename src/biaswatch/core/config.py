"""Weight tables and thresholds for the scoring core."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any

from ..schemas.signal import SIGNAL_TYPES


def _default_signal_type_weights() -> dict[str, float]:
    return {"cv": 1.0, "notes": 0.8, "voice": 0.6, "market": 0.4}


@dataclass(frozen=True)
class ScoringConfig:
    """Single, inspectable configuration object for every scoring decision.

    Similarity carries the smallest composite weight so relationship-driven
    signal cannot outrank demonstrated expertise on its own.
    """

    expertise_weight: float = 0.6
    similarity_weight: float = 0.15
    reliability_weight: float = 0.25
    signal_type_weights: dict[str, float] = field(
        default_factory=_default_signal_type_weights
    )
    high_risk_gap: float = 25.0
    high_risk_min_similarity: float = 50.0
    moderate_risk_gap: float = 5.0
    similarity_heavy_gap: float = 15.0
    reliability_min_observations: int = 5
    similarity_saturation: int = 3
    similarity_dominance_cap: float | None = None
    high_divergence_threshold: float = 1.5
    severe_divergence_threshold: float = 3.0

    def __post_init__(self) -> None:
        for name in ("expertise_weight", "similarity_weight", "reliability_weight"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        unknown = set(self.signal_type_weights) - set(SIGNAL_TYPES)
        if unknown:
            raise ValueError(f"Unknown signal types in weights: {sorted(unknown)}")
        if any(weight < 0 for weight in self.signal_type_weights.values()):
            raise ValueError("signal_type_weights must be non-negative")
        if self.reliability_min_observations < 0:
            raise ValueError("reliability_min_observations must be non-negative")
        if self.similarity_saturation < 1:
            raise ValueError("similarity_saturation must be at least 1")

    def type_weight(self, signal_type: str) -> float:
        return self.signal_type_weights.get(signal_type, 0.0)

    @property
    def max_type_weight(self) -> float:
        return max(self.signal_type_weights.values(), default=0.0)

    @classmethod
    def from_settings(cls, settings: dict[str, Any] | None) -> "ScoringConfig":
        """Build a config from a (possibly partial) settings mapping.

        Partial ``signal_type_weights`` are merged over the defaults.
        """
        if not settings:
            return cls()
        known = {item.name for item in fields(cls)}
        unknown = set(settings) - known
        if unknown:
            raise ValueError(f"Unknown scoring settings: {sorted(unknown)}")
        values = dict(settings)
        if "signal_type_weights" in values:
            merged = _default_signal_type_weights()
            merged.update(values["signal_type_weights"] or {})
            values["signal_type_weights"] = merged
        return replace(cls(), **values)

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


DEFAULT_CONFIG = ScoringConfig()
