"""Dependency injection container for the scoring system."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    ExpertiseEvaluator,
    ReliabilityEvaluator,
    ScoringConfig,
    ScoringCore,
    SimilarityEvaluator,
    TagVocabulary,
)
from .integration import DEFAULT_TIMEOUT_SECONDS
from .pipeline import ScoringPipeline, WeeklySummaryPipeline


class ScoringContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    timeout_seconds = providers.Object(DEFAULT_TIMEOUT_SECONDS)

    scoring_config = providers.Singleton(ScoringConfig)
    vocabulary = providers.Singleton(TagVocabulary)

    expertise_evaluator = providers.Singleton(ExpertiseEvaluator, config=scoring_config)
    similarity_evaluator = providers.Singleton(SimilarityEvaluator, config=scoring_config)
    reliability_evaluator = providers.Singleton(ReliabilityEvaluator, config=scoring_config)

    evaluators = providers.List(
        expertise_evaluator,
        similarity_evaluator,
        reliability_evaluator,
    )

    scoring_core = providers.Singleton(
        ScoringCore,
        evaluators=evaluators,
        config=scoring_config,
    )

    pipeline = providers.Factory(
        ScoringPipeline,
        core=scoring_core,
        vocabulary=vocabulary,
        timeout_seconds=timeout_seconds,
    )

    weekly_pipeline = providers.Factory(WeeklySummaryPipeline, config=scoring_config)


def create_container(*, settings: dict | None = None) -> ScoringContainer:
    """Instantiate container with optional overrides."""

    container = ScoringContainer()

    if not settings:
        return container

    adapter_settings = settings.get("adapter", {}) if isinstance(settings, dict) else {}
    if "timeout_seconds" in adapter_settings:
        container.timeout_seconds.override(
            providers.Object(float(adapter_settings["timeout_seconds"]))
        )

    scoring_settings = settings.get("scoring", {}) if isinstance(settings, dict) else {}
    if scoring_settings:
        scoring_config = ScoringConfig.from_settings(scoring_settings)
        container.scoring_config.override(providers.Object(scoring_config))

    vocabulary_settings = settings.get("vocabulary", {}) if isinstance(settings, dict) else {}
    if vocabulary_settings:
        vocabulary = TagVocabulary.with_overrides(
            domain=vocabulary_settings.get("domain"),
            similarity=vocabulary_settings.get("similarity"),
            fuzzy_cutoff=vocabulary_settings.get("fuzzy_cutoff"),
        )
        container.vocabulary.override(providers.Object(vocabulary))

    return container
