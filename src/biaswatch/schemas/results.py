"""Scoring outputs handed to the presentation layer."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

import pendulum
from pydantic import BaseModel, ConfigDict, Field

from .signal import SignalType

BiasRiskLevel = Literal["low", "moderate", "high"]
ReasoningBasis = Literal["expertise-led", "mixed", "similarity-heavy"]


class SourceAttribution(BaseModel):
    """Per-signal provenance for a candidate's scores."""

    signal_id: str
    signal_type: SignalType
    label: str = ""
    reasoning_basis: ReasoningBasis
    expertise_score: float = Field(ge=0.0, le=100.0)
    similarity_score: float = Field(ge=0.0, le=100.0)
    reliability_score: float = Field(ge=0.0, le=100.0)

    model_config = ConfigDict(extra="forbid")


class CandidateScoreSummary(BaseModel):
    """Scores, ranks and explanation for one candidate on one mandate."""

    candidate_id: str
    name: str = ""
    mandate_id: str = ""
    expertise_score: float = Field(ge=0.0, le=100.0)
    similarity_score: float = Field(ge=0.0, le=100.0)
    reliability_score: float = Field(ge=0.0, le=100.0)
    overall_score: float = Field(ge=0.0, le=100.0)
    expertise_rank: int = Field(default=0, ge=0)
    similarity_rank: int = Field(default=0, ge=0)
    bias_risk: BiasRiskLevel = "low"
    reasoning: str = ""
    similarity_tags: list[str] = Field(default_factory=list)
    attributions: list[SourceAttribution] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class RankingDivergence(BaseModel):
    """Rank movement between the composite and similarity-only orderings.

    ``movement`` is ``similarity_rank - expertise_rank``: a negative value
    means the candidate climbs when ranked on similarity alone.
    """

    candidate_id: str
    candidate_name: str = ""
    expertise_rank: int = Field(ge=1)
    similarity_rank: int = Field(ge=1)
    movement: int

    model_config = ConfigDict(extra="forbid")


class MandateScoringResult(BaseModel):
    """Everything produced by scoring one mandate's candidate set."""

    mandate_id: str
    mandate_name: str = ""
    sector: str = ""
    scored_at: datetime
    candidates: list[CandidateScoreSummary] = Field(default_factory=list)
    divergences: list[RankingDivergence] = Field(default_factory=list)
    average_divergence: float = Field(default=0.0, ge=0.0)
    bias_risk: BiasRiskLevel = "low"
    top_candidate_changes: bool = False
    explanation: str = ""

    model_config = ConfigDict(extra="forbid")


class WeekWindow(BaseModel):
    """Half-open ``[start, end)`` ISO week."""

    week_id: str
    label: str = ""
    start: datetime
    end: datetime

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def containing(cls, moment: datetime | str, *, label: str | None = None) -> "WeekWindow":
        """Return the ISO week (Monday 00:00 UTC onwards) that contains *moment*."""
        if isinstance(moment, str):
            instant = pendulum.parse(moment)
        else:
            instant = pendulum.instance(moment)
        instant = instant.in_timezone("UTC")
        start = instant.start_of("week")
        end = start.add(weeks=1)
        year, week, _ = start.isocalendar()
        week_id = f"{year}-W{week:02d}"
        return cls(
            week_id=week_id,
            label=label or f"Week of {start.to_date_string()}",
            start=start,
            end=end,
        )

    def contains(self, moment: datetime) -> bool:
        instant = pendulum.instance(moment)
        return pendulum.instance(self.start) <= instant < pendulum.instance(self.end)


class MandateBiasBreakdown(BaseModel):
    mandate_id: str
    mandate_name: str = ""
    sector: str = ""
    high_bias_events: int = Field(ge=0)
    avg_divergence: float = Field(ge=0.0)
    bias_risk: BiasRiskLevel = "low"
    top_candidate_changes: bool = False

    model_config = ConfigDict(extra="forbid")


class SourceTypeBiasBreakdown(BaseModel):
    source_type: SignalType
    similarity_heavy_count: int = Field(ge=0)
    comment: str = ""

    model_config = ConfigDict(extra="forbid")


class WeeklyBiasSummary(BaseModel):
    """Bias-watch aggregate over the mandates scored in one week."""

    week_id: str
    week_label: str = ""
    high_risk_decisions: int = 0
    affected_mandates: int = 0
    top_similarity_driver: str | None = None
    avg_divergence: float = 0.0
    overall_bias_risk: BiasRiskLevel = "low"
    mandate_breakdown: list[MandateBiasBreakdown] = Field(default_factory=list)
    source_type_breakdown: list[SourceTypeBiasBreakdown] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
