"""Async boundary between the data-access layer and the scoring core."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, TypeVar

import pendulum
import structlog
from pydantic import ValidationError

from .adapters import CandidateDataSource
from .core import ScoringCore
from .core.tags import TagVocabulary, build_candidate_context, build_mandate_requirements
from .errors import DataAccessError
from .schemas import CandidateContext, MandateRequirements, MandateScoringResult

DEFAULT_TIMEOUT_SECONDS = 10.0

_DATA_ERRORS = (TimeoutError, OSError, ValueError, ValidationError)

T = TypeVar("T")


@dataclass(slots=True)
class LoadedMandate:
    requirements: MandateRequirements
    candidates: list[CandidateContext]


class ScoringAdapter:
    """Fetches a mandate's rows, builds contexts and hands them to the core."""

    def __init__(
        self,
        *,
        source: CandidateDataSource,
        core: ScoringCore,
        vocabulary: TagVocabulary | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._source = source
        self._core = core
        self._vocabulary = vocabulary or TagVocabulary()
        self._timeout = timeout_seconds
        self._logger = structlog.get_logger(__name__)

    async def load(self, mandate_id: str) -> LoadedMandate:
        mandate = await self._fetch(self._source.fetch_mandate(mandate_id), mandate_id, "mandate")
        rows = await self._fetch(
            self._source.fetch_candidates(mandate_id), mandate_id, "candidates"
        )
        requirements = build_mandate_requirements(mandate, self._vocabulary)
        contexts = [
            build_candidate_context(row, requirements.mandate_id, self._vocabulary)
            for row in rows
        ]
        self._logger.info(
            "adapter.loaded",
            mandate_id=requirements.mandate_id,
            candidate_count=len(contexts),
            required_tags=requirements.required_tags,
        )
        return LoadedMandate(requirements=requirements, candidates=contexts)

    async def score(
        self,
        mandate_id: str,
        *,
        scored_at: datetime | None = None,
    ) -> MandateScoringResult:
        loaded = await self.load(mandate_id)
        return self._core.score_mandate(
            loaded.candidates,
            loaded.requirements,
            scored_at=scored_at or pendulum.now("UTC"),
        )

    async def _fetch(self, awaitable: Awaitable[T], mandate_id: str, stage: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except _DATA_ERRORS as exc:
            self._logger.error(
                "adapter.fetch_failed",
                mandate_id=mandate_id,
                stage=stage,
                error=str(exc) or type(exc).__name__,
            )
            raise DataAccessError(
                f"Failed to fetch {stage}: {exc or type(exc).__name__}",
                mandate_id=mandate_id,
                stage=stage,
            ) from exc
