"""File-backed data source used by the CLI."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from ..schemas import CandidateEvidence, MandateRecord


class FileDataSource:
    """Reads a mandate JSON document and a candidates JSONL file.

    Each JSONL line is one :class:`CandidateEvidence` object. Blank lines are
    skipped; a malformed line fails the whole load with ``ValueError``.
    """

    def __init__(self, *, mandate_path: Path, candidates_path: Path) -> None:
        self._mandate_path = Path(mandate_path)
        self._candidates_path = Path(candidates_path)

    async def fetch_mandate(self, mandate_id: str) -> MandateRecord:
        mandate = await asyncio.to_thread(self._read_mandate)
        if mandate_id and mandate.mandate_id != mandate_id:
            raise ValueError(
                f"{self._mandate_path} holds mandate {mandate.mandate_id!r}, not {mandate_id!r}"
            )
        return mandate

    async def fetch_candidates(self, mandate_id: str) -> list[CandidateEvidence]:
        return await asyncio.to_thread(self._read_candidates)

    def read_mandate_id(self) -> str:
        """Mandate id declared in the mandate file."""
        return self._read_mandate().mandate_id

    def _read_mandate(self) -> MandateRecord:
        with self._mandate_path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid mandate JSON: {exc}") from exc
        return MandateRecord.model_validate(data)

    def _read_candidates(self) -> list[CandidateEvidence]:
        rows: list[CandidateEvidence] = []
        with self._candidates_path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"line {idx}: invalid JSON ({exc})") from exc
                rows.append(CandidateEvidence.model_validate(record))
        return rows
