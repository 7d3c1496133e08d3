"""Typer CLI entrypoint for the scoring pipelines."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .errors import DataAccessError, InvalidInputError
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import load_config

app = typer.Typer(help="Bias-aware candidate scoring CLI.")


def _load_settings(config: Path | None) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    try:
        return load_config(loaded).to_settings()
    except (ValueError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_hint="config") from exc


@app.command()
def score(
    mandate: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Mandate JSON path."),
    candidates: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."
    ),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    scored_at: Optional[str] = typer.Option(None, help="ISO timestamp to stamp on the result."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    json_logs: bool = typer.Option(True, "--json-logs/--console-logs", help="Render logs as JSON lines."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Score one mandate's candidates."""
    settings = _load_settings(config)
    configure_logging(log_level, json_output=json_logs)

    try:
        container = create_container(settings=settings)
        pipeline = container.pipeline()
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_hint="config") from exc
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        result = pipeline.run(
            mandate_path=mandate,
            candidates_path=candidates,
            output_path=output,
            scored_at=scored_at,
            audit_logger=audit_logger,
        )
    except (DataAccessError, InvalidInputError) as exc:
        typer.echo(f"Scoring failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Scored {len(result.candidates)} candidates for {result.mandate_id} "
        f"(bias risk: {result.bias_risk}). Results saved to {output}."
    )


@app.command()
def weekly(
    results: List[Path] = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, help="Saved mandate result JSON paths."
    ),
    week_of: str = typer.Option(..., help="Any ISO date inside the target week."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Build the weekly bias summary from saved mandate results."""
    configure_logging(log_level)

    container = create_container()
    pipeline = container.weekly_pipeline()
    summary = pipeline.run(result_paths=results, week_of=week_of, output_path=output)
    typer.echo(
        f"{summary.week_id}: {summary.high_risk_decisions} high-risk decisions across "
        f"{summary.affected_mandates} mandates. Summary saved to {output}."
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
