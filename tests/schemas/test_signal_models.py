from __future__ import annotations

import pytest
from pydantic import ValidationError

from biaswatch.errors import InvalidInputError
from biaswatch.schemas import (
    CandidateContext,
    CandidateRecord,
    MandateRequirements,
    SourceSignal,
)


def test_source_signal_canonicalises_tags():
    signal = SourceSignal(
        id="cv-1",
        type="cv",
        domain_tags=["Private Equity", "private-equity", "London"],
        similarity_tags="Goldman Sachs",
    )

    assert signal.domain_tags == ["london", "private-equity"]
    assert signal.similarity_tags == ["goldman-sachs"]


def test_source_signal_rejects_overlapping_tags():
    with pytest.raises(ValidationError):
        SourceSignal(id="cv-1", type="cv", domain_tags=["harvard"], similarity_tags=["Harvard"])


def test_source_signal_rejects_unknown_type_and_blank_id():
    with pytest.raises(ValidationError):
        SourceSignal(id="x-1", type="linkedin")
    with pytest.raises(ValidationError):
        SourceSignal(id="", type="cv")


def test_candidate_context_requires_candidate_id():
    with pytest.raises(InvalidInputError) as excinfo:
        CandidateContext(mandate_id="M-1", name="Anonymous")
    assert excinfo.value.field == "candidate_id"

    with pytest.raises(InvalidInputError):
        CandidateContext(candidate_id="  ", mandate_id="M-1")


def test_candidate_context_strips_identity():
    context = CandidateContext(candidate_id=" C-1 ", mandate_id="M-1")

    assert context.candidate_id == "C-1"
    assert context.signals == []


def test_mandate_requirements_normalise_tags_and_weights():
    mandate = MandateRequirements(
        mandate_id="M-1",
        required_tags=["Infrastructure Credit", "London"],
        tag_weights={"Infrastructure Credit": 2, "London": -1},
    )

    assert mandate.required_tags == ["infrastructure-credit", "london"]
    assert mandate.weight_for("infrastructure-credit") == 2.0
    assert mandate.weight_for("london") == 0.0
    assert mandate.weight_for("fundraising") == 1.0


def test_candidate_record_coerces_ids_and_nulls():
    record = CandidateRecord(candidate_id=17, skills=None, networks=None, unknown_column="x")

    assert record.candidate_id == "17"
    assert record.skills == []
    assert record.networks == []
