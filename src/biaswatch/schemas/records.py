"""Raw rows handed over by the data-access layer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExperienceEntry(BaseModel):
    """Employment history entry."""

    firm: str = ""
    title: str = ""
    start: str | None = None
    end: str | None = None

    model_config = ConfigDict(extra="ignore")


class EducationEntry(BaseModel):
    """Education history entry."""

    institution: str = ""
    degree: str | None = None
    field: str | None = None
    year: str | None = None

    model_config = ConfigDict(extra="ignore")


class CandidateRecord(BaseModel):
    """Candidate row as stored by the CRM."""

    candidate_id: str | None = None
    name: str = ""
    current_title: str | None = None
    current_firm: str | None = None
    location: str | None = None
    seniority: str | None = None
    skills: list[str] = Field(default_factory=list)
    sectors: list[str] = Field(default_factory=list)
    functions: list[str] = Field(default_factory=list)
    asset_classes: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    networks: list[str] = Field(default_factory=list)
    referral: str | None = None
    cv_text: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("candidate_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> str | None:
        # Postgres ids arrive as integers.
        if value is None:
            return None
        return str(value).strip() or None

    @field_validator(
        "skills", "sectors", "functions", "asset_classes", "networks", mode="before"
    )
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return [] if value is None else value


class MandateRecord(BaseModel):
    """Mandate row as stored by the CRM."""

    mandate_id: str
    title: str = ""
    client_firm: str | None = None
    sector: str = ""
    sectors: list[str] = Field(default_factory=list)
    functions: list[str] = Field(default_factory=list)
    asset_classes: list[str] = Field(default_factory=list)
    geographies: list[str] = Field(default_factory=list)
    seniority: str | None = None
    required_skills: list[str] = Field(default_factory=list)
    tag_weights: dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @field_validator("mandate_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


EvidenceKind = Literal["notes", "voice", "market"]


class EvidenceRecord(BaseModel):
    """A note, voice transcript or market-data entry about a candidate.

    ``terms`` holds keywords already attached to the record (tagging UI,
    transcript keyword spotting); ``text`` is scanned for vocabulary phrases.
    """

    id: str
    kind: EvidenceKind
    label: str = ""
    terms: list[str] = Field(default_factory=list)
    text: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


class CandidateEvidence(BaseModel):
    """Everything the adapter fetched for one candidate."""

    candidate: CandidateRecord
    evidence: list[EvidenceRecord] = Field(default_factory=list)
    reliability_history: dict[str, list[bool]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")
