"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .signal import SignalType


class ScoringSection(BaseModel):
    expertise_weight: float | None = Field(default=None, ge=0.0)
    similarity_weight: float | None = Field(default=None, ge=0.0)
    reliability_weight: float | None = Field(default=None, ge=0.0)
    signal_type_weights: dict[SignalType, float] | None = None
    high_risk_gap: float | None = None
    high_risk_min_similarity: float | None = None
    moderate_risk_gap: float | None = None
    similarity_heavy_gap: float | None = None
    reliability_min_observations: int | None = Field(default=None, ge=0)
    similarity_saturation: int | None = Field(default=None, ge=1)
    similarity_dominance_cap: float | None = Field(default=None, ge=0.0)
    high_divergence_threshold: float | None = None
    severe_divergence_threshold: float | None = None

    model_config = ConfigDict(extra="forbid")


class VocabularySection(BaseModel):
    domain: dict[str, str] | None = None
    similarity: dict[str, str] | None = None
    fuzzy_cutoff: float | None = Field(default=None, ge=0.0, le=100.0)

    model_config = ConfigDict(extra="forbid")


class AdapterSection(BaseModel):
    timeout_seconds: float | None = Field(default=None, gt=0.0)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    scoring: ScoringSection = Field(default_factory=ScoringSection)
    vocabulary: VocabularySection = Field(default_factory=VocabularySection)
    adapter: AdapterSection = Field(default_factory=AdapterSection)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("scoring", "vocabulary", "adapter"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    return AppConfig.model_validate(raw)
