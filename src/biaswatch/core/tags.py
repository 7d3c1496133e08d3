"""Tag vocabulary and source-signal extraction.

Raw candidate rows and evidence records are mapped onto a fixed vocabulary of
canonical tags. Domain tags describe subject-matter expertise; similarity
tags describe relational affinity (shared firms, schools, networks,
referrals). Terms the vocabulary does not know are dropped, so extraction
never fails on unfamiliar wording.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Literal, Mapping

from rapidfuzz import fuzz, process

from ..errors import InvalidInputError
from ..schemas import (
    CandidateContext,
    CandidateEvidence,
    MandateRecord,
    MandateRequirements,
    SourceSignal,
)
from ..text import canonical_tag

TagKind = Literal["domain", "similarity"]

DEFAULT_DOMAIN_TERMS: dict[str, str] = {
    # sectors and asset classes
    "private-equity": "private-equity",
    "pe": "private-equity",
    "private-credit": "private-credit",
    "direct-lending": "private-credit",
    "credit": "credit",
    "infrastructure": "infrastructure",
    "infra": "infrastructure",
    "infrastructure-credit": "infrastructure-credit",
    "infrastructure-debt": "infrastructure-credit",
    "digital-infrastructure": "digital-infrastructure",
    "real-estate": "real-estate",
    "property": "real-estate",
    "real-assets": "real-assets",
    "venture-capital": "venture-capital",
    "vc": "venture-capital",
    "growth-equity": "growth-equity",
    "growth": "growth-equity",
    "buyout": "buyout",
    "leveraged-buyout": "buyout",
    "renewables": "renewables",
    "renewable-energy": "renewables",
    "energy-transition": "energy-transition",
    "healthcare": "healthcare",
    "technology": "technology",
    "esg": "esg",
    "hedge-funds": "hedge-funds",
    # functions and skills
    "portfolio-management": "portfolio-management",
    "asset-management": "asset-management",
    "deal-origination": "deal-origination",
    "origination": "deal-origination",
    "deal-execution": "deal-execution",
    "due-diligence": "due-diligence",
    "financial-modeling": "financial-modeling",
    "financial-modelling": "financial-modeling",
    "valuation": "valuation",
    "structuring": "structuring",
    "restructuring": "restructuring",
    "fundraising": "fundraising",
    "investor-relations": "investor-relations",
    "capital-markets": "capital-markets",
    "risk-management": "risk-management",
    "mergers-and-acquisitions": "mergers-and-acquisitions",
    "ma": "mergers-and-acquisitions",
    # geographies
    "europe": "europe",
    "uk": "uk",
    "united-kingdom": "uk",
    "london": "london",
    "north-america": "north-america",
    "new-york": "new-york",
    "apac": "apac",
    "asia-pacific": "apac",
    "emea": "emea",
    # seniority
    "analyst": "analyst",
    "associate": "associate",
    "vice-president": "vice-president",
    "vp": "vice-president",
    "director": "director",
    "managing-director": "managing-director",
    "md": "managing-director",
    "principal": "principal",
    "partner": "partner",
    "senior": "senior",
}

DEFAULT_SIMILARITY_TERMS: dict[str, str] = {
    # firms
    "goldman-sachs": "goldman-sachs",
    "goldman": "goldman-sachs",
    "morgan-stanley": "morgan-stanley",
    "jp-morgan": "jp-morgan",
    "jpmorgan": "jp-morgan",
    "blackstone": "blackstone",
    "kkr": "kkr",
    "carlyle": "carlyle",
    "apollo": "apollo",
    "brookfield": "brookfield",
    "macquarie": "macquarie",
    "mckinsey": "mckinsey",
    "bain": "bain",
    "bcg": "bcg",
    "boston-consulting-group": "bcg",
    # schools
    "harvard": "harvard",
    "harvard-business-school": "harvard",
    "stanford": "stanford",
    "insead": "insead",
    "wharton": "wharton",
    "london-business-school": "london-business-school",
    "lbs": "london-business-school",
    "oxford": "oxford",
    "cambridge": "cambridge",
    "lse": "lse",
    # networks and relationships
    "london-finance-club": "london-finance-club",
    "personal-referral": "personal-referral",
    "referral": "personal-referral",
    "referred-by": "personal-referral",
    "former-colleague": "former-colleague",
    "ex-colleague": "former-colleague",
    "worked-together": "former-colleague",
    "prior-team": "prior-team-connection",
    "same-team": "prior-team-connection",
    "shared-deal": "shared-deal-experience",
    "alumni-network": "alumni-network",
}


@dataclass(frozen=True)
class TagMatch:
    kind: TagKind
    tag: str


class TagVocabulary:
    """Alias maps from raw terms to canonical domain and similarity tags."""

    MIN_FUZZY_LENGTH = 5

    def __init__(
        self,
        domain: Mapping[str, str] | None = None,
        similarity: Mapping[str, str] | None = None,
        *,
        fuzzy_cutoff: float = 92.0,
    ) -> None:
        self._domain = self._normalise(DEFAULT_DOMAIN_TERMS if domain is None else domain)
        self._similarity = self._normalise(
            DEFAULT_SIMILARITY_TERMS if similarity is None else similarity
        )
        self._fuzzy_cutoff = fuzzy_cutoff

        shared_aliases = set(self._domain) & set(self._similarity)
        shared_tags = set(self._domain.values()) & set(self._similarity.values())
        if shared_aliases or shared_tags:
            raise ValueError(
                "Vocabulary terms must be either domain or similarity terms, not both: "
                f"{sorted(shared_aliases | shared_tags)}"
            )

        self._domain_aliases = sorted(self._domain)
        self._similarity_aliases = sorted(self._similarity)
        aliases: list[tuple[str, TagMatch]] = [
            *((alias, TagMatch("domain", tag)) for alias, tag in self._domain.items()),
            *((alias, TagMatch("similarity", tag)) for alias, tag in self._similarity.items()),
        ]
        # Longest phrases first so "london-finance-club" is not read as "london".
        aliases.sort(key=lambda item: (-len(item[0]), item[0]))
        self._patterns: list[tuple[re.Pattern[str], TagMatch]] = [
            (re.compile(rf"(?:^|-){re.escape(alias)}(?:-|$)"), match)
            for alias, match in aliases
        ]

    @classmethod
    def with_overrides(
        cls,
        *,
        domain: Mapping[str, str] | None = None,
        similarity: Mapping[str, str] | None = None,
        fuzzy_cutoff: float | None = None,
    ) -> "TagVocabulary":
        """Default vocabulary extended with operator-supplied aliases."""
        merged_domain = dict(DEFAULT_DOMAIN_TERMS)
        merged_domain.update(domain or {})
        merged_similarity = dict(DEFAULT_SIMILARITY_TERMS)
        merged_similarity.update(similarity or {})
        if fuzzy_cutoff is None:
            return cls(merged_domain, merged_similarity)
        return cls(merged_domain, merged_similarity, fuzzy_cutoff=fuzzy_cutoff)

    def domain_tag(self, term: str | None) -> str | None:
        return self._lookup(term, self._domain, self._domain_aliases)

    def similarity_tag(self, term: str | None) -> str | None:
        return self._lookup(term, self._similarity, self._similarity_aliases)

    def classify(self, term: str | None) -> TagMatch | None:
        """Look a term up in both maps; exact hits win over fuzzy ones."""
        key = canonical_tag(term)
        if not key:
            return None
        if key in self._domain:
            return TagMatch("domain", self._domain[key])
        if key in self._similarity:
            return TagMatch("similarity", self._similarity[key])
        domain = self.domain_tag(key)
        if domain:
            return TagMatch("domain", domain)
        similarity = self.similarity_tag(key)
        if similarity:
            return TagMatch("similarity", similarity)
        return None

    def scan_text(self, text: str | None) -> list[TagMatch]:
        """Return vocabulary phrases found in free text.

        Matched text is consumed so shorter aliases nested inside a longer
        phrase are not reported twice.
        """
        flattened = canonical_tag(text)
        if not flattened:
            return []
        found: list[TagMatch] = []
        for pattern, match in self._patterns:
            flattened, hits = pattern.subn("-", flattened)
            if hits and match not in found:
                found.append(match)
        return found

    def _lookup(
        self,
        term: str | None,
        mapping: dict[str, str],
        aliases: list[str],
    ) -> str | None:
        key = canonical_tag(term)
        if not key:
            return None
        if key in mapping:
            return mapping[key]
        if len(key) < self.MIN_FUZZY_LENGTH:
            return None
        best = process.extractOne(
            key, aliases, scorer=fuzz.ratio, score_cutoff=self._fuzzy_cutoff
        )
        if best is None:
            return None
        return mapping[best[0]]

    @staticmethod
    def _normalise(mapping: Mapping[str, str]) -> dict[str, str]:
        normalised: dict[str, str] = {}
        for alias, tag in mapping.items():
            alias_key = canonical_tag(alias)
            canonical = canonical_tag(tag)
            if not alias_key or not canonical:
                continue
            normalised[alias_key] = canonical
            normalised.setdefault(canonical, canonical)
        return normalised


def build_source_profile(
    evidence: CandidateEvidence,
    vocabulary: TagVocabulary | None = None,
) -> list[SourceSignal]:
    """Turn one candidate's raw rows into canonical source signals.

    The CV signal always comes first, followed by one signal per evidence
    record in arrival order.
    """
    vocab = vocabulary or TagVocabulary()
    candidate = evidence.candidate
    if not candidate.candidate_id:
        raise InvalidInputError("candidate record requires a candidate_id", field="candidate_id")

    history = evidence.reliability_history
    signals: list[SourceSignal] = []

    domain: set[str] = set()
    similarity: set[str] = set()
    for term in _cv_domain_terms(evidence):
        _add(domain, vocab.domain_tag(term))
    for term in _cv_similarity_terms(evidence):
        tag = vocab.similarity_tag(term)
        if tag:
            similarity.add(tag)
            continue
        # Employer and school names carry suffixes ("Goldman Sachs International").
        similarity.update(
            match.tag for match in vocab.scan_text(term) if match.kind == "similarity"
        )
    if candidate.referral:
        _add(similarity, vocab.similarity_tag("personal-referral"))
    for text in (candidate.current_title, candidate.cv_text):
        _merge(domain, similarity, vocab.scan_text(text))

    cv_id = f"cv-{candidate.candidate_id}"
    signals.append(
        SourceSignal(
            id=cv_id,
            type="cv",
            label=f"CV - {candidate.name}" if candidate.name else "CV",
            domain_tags=sorted(domain),
            similarity_tags=sorted(similarity),
            reliability_history=history.get(cv_id, []),
        )
    )

    for record in evidence.evidence:
        domain = set()
        similarity = set()
        for term in record.terms:
            match = vocab.classify(term)
            if match is not None:
                _merge(domain, similarity, [match])
        _merge(domain, similarity, vocab.scan_text(record.text))
        signal_id = f"{record.kind}-{record.id}"
        signals.append(
            SourceSignal(
                id=signal_id,
                type=record.kind,
                label=record.label or f"{record.kind.title()} #{record.id}",
                domain_tags=sorted(domain),
                similarity_tags=sorted(similarity),
                reliability_history=history.get(signal_id, history.get(record.id, [])),
            )
        )
    return signals


def build_candidate_context(
    evidence: CandidateEvidence,
    mandate_id: str,
    vocabulary: TagVocabulary | None = None,
) -> CandidateContext:
    signals = build_source_profile(evidence, vocabulary)
    return CandidateContext(
        candidate_id=evidence.candidate.candidate_id,
        mandate_id=mandate_id,
        name=evidence.candidate.name,
        signals=signals,
    )


def build_mandate_requirements(
    mandate: MandateRecord,
    vocabulary: TagVocabulary | None = None,
) -> MandateRequirements:
    vocab = vocabulary or TagVocabulary()
    terms: list[str | None] = [
        *mandate.sectors,
        *mandate.functions,
        *mandate.asset_classes,
        *mandate.geographies,
        mandate.seniority,
        *mandate.required_skills,
    ]
    required: set[str] = set()
    for term in terms:
        _add(required, vocab.domain_tag(term))
    weights = {}
    for term, weight in mandate.tag_weights.items():
        tag = vocab.domain_tag(term)
        if tag in required:
            weights[tag] = weight
    return MandateRequirements(
        mandate_id=mandate.mandate_id,
        name=mandate.title,
        sector=mandate.sector,
        required_tags=sorted(required),
        tag_weights=weights,
    )


def _cv_domain_terms(evidence: CandidateEvidence) -> Iterable[str | None]:
    candidate = evidence.candidate
    yield from candidate.skills
    yield from candidate.sectors
    yield from candidate.functions
    yield from candidate.asset_classes
    yield candidate.seniority
    yield candidate.location


def _cv_similarity_terms(evidence: CandidateEvidence) -> Iterable[str | None]:
    candidate = evidence.candidate
    yield candidate.current_firm
    for entry in candidate.experience:
        yield entry.firm
    for entry in candidate.education:
        yield entry.institution
    yield from candidate.networks


def _add(target: set[str], tag: str | None) -> None:
    if tag:
        target.add(tag)


def _merge(domain: set[str], similarity: set[str], matches: Iterable[TagMatch]) -> None:
    for match in matches:
        (domain if match.kind == "domain" else similarity).add(match.tag)
