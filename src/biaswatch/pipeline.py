"""Scoring and weekly-summary pipeline assembly and execution."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Iterable

import pendulum
import structlog
from pydantic import ValidationError

from .adapters import FileDataSource
from .core import DEFAULT_CONFIG, ScoringConfig, ScoringCore, build_weekly_bias_summary
from .core.tags import TagVocabulary
from .errors import DataAccessError
from .integration import DEFAULT_TIMEOUT_SECONDS, ScoringAdapter
from .schemas import MandateScoringResult, WeeklyBiasSummary, WeekWindow
from . import __version__


class ResultLoadError(ValueError):
    """Raised when saved mandate results cannot be read back."""

    def __init__(self, errors: list[str], partial: list[MandateScoringResult]):
        super().__init__("Result loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Result loading failed: {self.errors}"


class ResultLoader:
    """Load mandate results written by :class:`ScoringPipeline`."""

    def load(self, paths: Iterable[Path]) -> list[MandateScoringResult]:
        results: list[MandateScoringResult] = []
        errors: list[str] = []
        for path in paths:
            try:
                with Path(path).open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
            except (OSError, json.JSONDecodeError) as exc:
                errors.append(f"{path}: {exc}")
                continue
            payload = data.get("result", data) if isinstance(data, dict) else data
            try:
                results.append(MandateScoringResult.model_validate(payload))
            except ValidationError as exc:
                errors.append(f"{path}: {exc}")
        if errors:
            raise ResultLoadError(errors, results)
        return results


class OutputWriter:
    """Persist pipeline outputs."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


class ScoringPipeline:
    """Score one mandate from files and persist the result."""

    def __init__(
        self,
        *,
        core: ScoringCore,
        vocabulary: TagVocabulary | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        writer: OutputWriter | None = None,
    ) -> None:
        self._core = core
        self._vocabulary = vocabulary or TagVocabulary()
        self._timeout = timeout_seconds
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        mandate_path: Path,
        candidates_path: Path,
        output_path: Path,
        scored_at: datetime | str | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> MandateScoringResult:
        source = FileDataSource(mandate_path=mandate_path, candidates_path=candidates_path)
        adapter = ScoringAdapter(
            source=source,
            core=self._core,
            vocabulary=self._vocabulary,
            timeout_seconds=self._timeout,
        )
        try:
            mandate_id = source.read_mandate_id()
        except (OSError, ValueError) as exc:
            raise DataAccessError(
                f"Failed to read mandate file: {exc}",
                mandate_id=str(mandate_path),
                stage="mandate",
            ) from exc
        moment = _as_datetime(scored_at) if scored_at else pendulum.now("UTC")
        with structlog.contextvars.bound_contextvars(mandate_id=mandate_id):
            result = asyncio.run(adapter.score(mandate_id, scored_at=moment))

        if audit_logger:
            for summary in result.candidates:
                audit_logger.append(
                    {
                        "mandate_id": result.mandate_id,
                        "candidate_id": summary.candidate_id,
                        "scored_at": result.scored_at.isoformat(),
                        "overall_score": summary.overall_score,
                        "expertise_score": summary.expertise_score,
                        "similarity_score": summary.similarity_score,
                        "reliability_score": summary.reliability_score,
                        "expertise_rank": summary.expertise_rank,
                        "similarity_rank": summary.similarity_rank,
                        "bias_risk": summary.bias_risk,
                    }
                )

        metadata = {
            "mandate_id": result.mandate_id,
            "candidate_count": len(result.candidates),
            "scoring_config": self._core.config.to_dict(),
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(
            output_path,
            {"metadata": metadata, "result": result.model_dump(mode="json")},
        )
        self._logger.info(
            "pipeline.scoring_written",
            mandate_id=result.mandate_id,
            output=str(output_path),
            bias_risk=result.bias_risk,
        )
        return result


class WeeklySummaryPipeline:
    """Aggregate saved mandate results into a weekly bias summary."""

    def __init__(
        self,
        *,
        config: ScoringConfig | None = None,
        loader: ResultLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._loader = loader or ResultLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        result_paths: Iterable[Path],
        week_of: datetime | str,
        output_path: Path,
    ) -> WeeklyBiasSummary:
        load_errors: list[str] = []
        try:
            results = self._loader.load(result_paths)
        except ResultLoadError as exc:
            results = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("results.partial_load", errors=exc.errors)

        window = WeekWindow.containing(week_of)
        summary = build_weekly_bias_summary(results, window, self._config)

        metadata = {
            "week_id": window.week_id,
            "window_start": window.start.isoformat(),
            "window_end": window.end.isoformat(),
            "result_count": len(results),
            "errors": load_errors,
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(
            output_path,
            {"metadata": metadata, "summary": summary.model_dump(mode="json")},
        )
        self._logger.info(
            "pipeline.weekly_written",
            week_id=summary.week_id,
            high_risk_decisions=summary.high_risk_decisions,
            affected_mandates=summary.affected_mandates,
        )
        return summary


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, str):
        return pendulum.parse(value)
    return value
