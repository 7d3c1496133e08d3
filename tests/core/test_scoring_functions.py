from __future__ import annotations

import itertools

import pytest

from biaswatch.core import (
    ScoringConfig,
    bias_risk,
    candidate_reliability_score,
    expertise_score,
    overall_score,
    similarity_score,
    source_reliability_score,
)
from biaswatch.schemas import SourceSignal


def signal(signal_id: str, signal_type: str = "cv", **kwargs) -> SourceSignal:
    return SourceSignal(id=signal_id, type=signal_type, **kwargs)


def test_expertise_counts_share_of_required_tags():
    signals = [signal("cv-1", domain_tags=["private-equity", "london"])]

    score = expertise_score(signals, ["private-equity", "london", "fundraising"])

    assert score == pytest.approx(200.0 / 3.0)


def test_expertise_credits_weaker_source_types_less():
    market_only = [signal("market-1", "market", domain_tags=["private-equity"])]
    on_cv = [signal("cv-1", domain_tags=["private-equity"])]

    assert expertise_score(market_only, ["private-equity"]) == pytest.approx(40.0)
    assert expertise_score(on_cv, ["private-equity"]) == pytest.approx(100.0)


def test_expertise_honours_tag_weights():
    signals = [signal("cv-1", domain_tags=["private-equity"])]

    score = expertise_score(signals, {"private-equity": 3.0, "fundraising": 1.0})

    assert score == pytest.approx(75.0)


def test_expertise_without_required_tags_is_zero():
    signals = [signal("cv-1", domain_tags=["private-equity"])]

    assert expertise_score(signals, []) == 0.0


def test_similarity_saturates_per_signal():
    saturated = [signal("cv-1", similarity_tags=["goldman-sachs", "harvard", "insead"])]
    mixed = saturated + [signal("notes-1", "notes")]

    assert similarity_score(saturated) == pytest.approx(100.0)
    assert similarity_score(mixed) == pytest.approx(100.0 / 1.8)
    assert similarity_score([]) == 0.0


def test_similarity_ignores_domain_tags():
    signals = [signal("cv-1", domain_tags=["private-equity", "london", "fundraising"])]

    assert similarity_score(signals) == 0.0


def test_source_reliability_smooths_short_histories():
    assert source_reliability_score([]) == 50.0
    assert source_reliability_score([True, True, False]) == pytest.approx(60.0)
    assert source_reliability_score([True, True, True, True, False]) == pytest.approx(80.0)


def test_candidate_reliability_defaults_to_neutral():
    assert candidate_reliability_score([]) == 50.0
    assert candidate_reliability_score([signal("cv-1")]) == 50.0


def test_candidate_reliability_weights_by_signal_type():
    signals = [
        signal("cv-1", reliability_history=[True] * 5),
        signal("market-1", "market", reliability_history=[False] * 5),
    ]

    assert candidate_reliability_score(signals) == pytest.approx(100.0 / 1.4)


def test_overall_score_uses_default_weights():
    assert overall_score(90, 20, 70) == pytest.approx(74.5)
    assert overall_score(40, 85, 70) == pytest.approx(54.25)
    assert overall_score(60, 60, 70) == pytest.approx(62.5)


def test_overall_score_applies_similarity_dominance_cap():
    config = ScoringConfig(similarity_dominance_cap=10.0)

    assert overall_score(40, 85, 70, config) == pytest.approx(49.0)


def test_overall_score_normalises_by_total_weight():
    config = ScoringConfig(expertise_weight=2.0, similarity_weight=0.0, reliability_weight=2.0)

    assert overall_score(100, 0, 100, config) == pytest.approx(100.0)


def test_all_scores_stay_in_range():
    values = [0.0, 12.5, 50.0, 99.9, 100.0]
    for expertise, similarity, reliability in itertools.product(values, repeat=3):
        score = overall_score(expertise, similarity, reliability)
        assert 0.0 <= score <= 100.0


def test_overall_score_increases_with_expertise():
    lower = overall_score(40, 50, 60)
    higher = overall_score(41, 50, 60)

    assert higher > lower


@pytest.mark.parametrize(
    ("expertise", "similarity", "expected"),
    [
        (40, 85, "high"),
        (10, 40, "moderate"),
        (50, 60, "moderate"),
        (50, 54, "low"),
        (90, 20, "low"),
    ],
)
def test_bias_risk_levels(expertise, similarity, expected):
    assert bias_risk(expertise, similarity) == expected


def test_scoring_config_validation():
    with pytest.raises(ValueError):
        ScoringConfig(expertise_weight=-0.1)
    with pytest.raises(ValueError):
        ScoringConfig(signal_type_weights={"cv": 1.0, "linkedin": 0.5})
    with pytest.raises(ValueError):
        ScoringConfig(reliability_min_observations=-1)


def test_scoring_config_from_settings_merges_type_weights():
    config = ScoringConfig.from_settings(
        {"similarity_weight": 0.1, "signal_type_weights": {"market": 0.2}}
    )

    assert config.similarity_weight == 0.1
    assert config.signal_type_weights == {"cv": 1.0, "notes": 0.8, "voice": 0.6, "market": 0.2}

    with pytest.raises(ValueError):
        ScoringConfig.from_settings({"unknown_weight": 1.0})


def test_source_reliability_without_smoothing_handles_empty_history():
    config = ScoringConfig.from_settings({"reliability_min_observations": 0})

    assert source_reliability_score([], config) == pytest.approx(50.0)
    assert source_reliability_score([True, False], config) == pytest.approx(50.0)
    assert source_reliability_score([True, True, True, False], config) == pytest.approx(75.0)


def test_adding_a_required_tag_never_lowers_expertise():
    required = {"private-equity": 2.0, "infrastructure": 1.0, "europe": 0.5, "fundraising": 1.0}
    for signal_type in ("cv", "notes", "voice", "market"):
        tags: list[str] = []
        previous = expertise_score([signal("s", signal_type)], required)
        for tag in [*required, "renewables"]:
            tags.append(tag)
            current = expertise_score([signal("s", signal_type, domain_tags=list(tags))], required)
            assert current >= previous
            previous = current


SIGNAL_SETS = [
    [],
    [signal("cv-1")],
    [signal("cv-1", domain_tags=["private-equity", "infrastructure"])],
    [
        signal("cv-1", domain_tags=["private-equity"], similarity_tags=["harvard"]),
        signal("notes-1", "notes", similarity_tags=["kkr", "insead", "wharton", "bain"]),
    ],
    [
        signal("voice-1", "voice", domain_tags=["europe"], reliability_history=[False] * 9),
        signal("market-1", "market", similarity_tags=["kkr"], reliability_history=[True] * 12),
    ],
]


@pytest.mark.parametrize("signals", SIGNAL_SETS)
def test_evidence_scores_stay_in_range(signals):
    required = ["private-equity", "infrastructure", "europe"]
    for min_observations in (0, 1, 5, 20):
        config = ScoringConfig(reliability_min_observations=min_observations)
        assert 0.0 <= expertise_score(signals, required, config) <= 100.0
        assert 0.0 <= similarity_score(signals, config) <= 100.0
        assert 0.0 <= candidate_reliability_score(signals, config) <= 100.0
        for item in signals:
            assert 0.0 <= source_reliability_score(item.reliability_history, config) <= 100.0
