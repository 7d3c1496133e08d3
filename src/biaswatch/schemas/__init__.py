"""Pydantic schema definitions for scoring inputs and outputs."""

from __future__ import annotations

from .records import (
    CandidateEvidence,
    CandidateRecord,
    EducationEntry,
    EvidenceRecord,
    ExperienceEntry,
    MandateRecord,
)
from .results import (
    BiasRiskLevel,
    CandidateScoreSummary,
    MandateBiasBreakdown,
    MandateScoringResult,
    RankingDivergence,
    ReasoningBasis,
    SourceAttribution,
    SourceTypeBiasBreakdown,
    WeeklyBiasSummary,
    WeekWindow,
)
from .signal import (
    SIGNAL_TYPES,
    CandidateContext,
    MandateRequirements,
    SignalType,
    SourceSignal,
)

__all__ = [
    "SIGNAL_TYPES",
    "BiasRiskLevel",
    "CandidateContext",
    "CandidateEvidence",
    "CandidateRecord",
    "CandidateScoreSummary",
    "EducationEntry",
    "EvidenceRecord",
    "ExperienceEntry",
    "MandateBiasBreakdown",
    "MandateRecord",
    "MandateRequirements",
    "MandateScoringResult",
    "RankingDivergence",
    "ReasoningBasis",
    "SignalType",
    "SourceAttribution",
    "SourceSignal",
    "SourceTypeBiasBreakdown",
    "WeekWindow",
    "WeeklyBiasSummary",
]
