"""Evaluator implementations for the scoring core."""

from .expertise import ExpertiseEvaluator, expertise_credits, expertise_score
from .reliability import (
    ReliabilityEvaluator,
    candidate_reliability_score,
    source_reliability_score,
)
from .similarity import SimilarityEvaluator, similarity_score

__all__ = [
    "ExpertiseEvaluator",
    "SimilarityEvaluator",
    "ReliabilityEvaluator",
    "expertise_credits",
    "expertise_score",
    "similarity_score",
    "source_reliability_score",
    "candidate_reliability_score",
]
