"""Canonical evidence records consumed by the scoring core."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..errors import InvalidInputError
from ..text import canonical_tags

SignalType = Literal["cv", "notes", "voice", "market"]

SIGNAL_TYPES: tuple[SignalType, ...] = ("cv", "notes", "voice", "market")


class SourceSignal(BaseModel):
    """One piece of evidence about a candidate."""

    id: str = Field(min_length=1)
    type: SignalType
    label: str = ""
    domain_tags: list[str] = Field(default_factory=list)
    similarity_tags: list[str] = Field(default_factory=list)
    reliability_history: list[bool] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("domain_tags", "similarity_tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return canonical_tags(str(item) for item in value)  # type: ignore[union-attr]

    @model_validator(mode="after")
    def _check_disjoint(self) -> "SourceSignal":
        overlap = set(self.domain_tags) & set(self.similarity_tags)
        if overlap:
            raise ValueError(
                f"tags cannot be both domain and similarity tags: {sorted(overlap)}"
            )
        return self


class CandidateContext(BaseModel):
    """Evidence for one candidate with respect to one mandate.

    Scores are never stored here; they are recomputed from ``signals`` on
    every scoring call.
    """

    candidate_id: str
    mandate_id: str
    name: str = ""
    signals: list[SourceSignal] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _require_identity(cls, data: object) -> object:
        if isinstance(data, dict):
            candidate_id = data.get("candidate_id")
            if candidate_id is None or not str(candidate_id).strip():
                raise InvalidInputError(
                    "candidate context requires a candidate_id", field="candidate_id"
                )
            data = {**data, "candidate_id": str(candidate_id).strip()}
        return data


class MandateRequirements(BaseModel):
    """Required domain tags for a mandate, with optional per-tag weights."""

    mandate_id: str
    name: str = ""
    sector: str = ""
    required_tags: list[str] = Field(default_factory=list)
    tag_weights: dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @field_validator("required_tags", mode="before")
    @classmethod
    def _normalise_required(cls, value: object) -> list[str]:
        if value is None:
            return []
        return canonical_tags(str(item) for item in value)  # type: ignore[union-attr]

    @field_validator("tag_weights", mode="before")
    @classmethod
    def _normalise_weights(cls, value: object) -> dict[str, float]:
        if not value:
            return {}
        weights: dict[str, float] = {}
        for key, weight in dict(value).items():  # type: ignore[call-overload]
            tags = canonical_tags([str(key)])
            if tags:
                weights[tags[0]] = float(weight)
        return weights

    def weight_for(self, tag: str) -> float:
        return max(self.tag_weights.get(tag, 1.0), 0.0)
