"""Data-source adapters feeding the scoring core."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import CandidateEvidence, MandateRecord
from .files import FileDataSource


@runtime_checkable
class CandidateDataSource(Protocol):
    """Async data-access contract.

    Implementations return persisted rows for one mandate; they never score.
    """

    async def fetch_mandate(self, mandate_id: str) -> MandateRecord:
        """Return the mandate row for *mandate_id*."""

    async def fetch_candidates(self, mandate_id: str) -> list[CandidateEvidence]:
        """Return the candidate rows and evidence attached to *mandate_id*."""


__all__ = ["CandidateDataSource", "FileDataSource"]
