from __future__ import annotations

import json
from pathlib import Path

from biaswatch.container import create_container
from biaswatch.pipeline import AuditLogger, ResultLoader, ResultLoadError


def test_pipeline_writes_result_and_audit_log(
    tmp_path: Path, mandate_path: Path, candidates_path: Path
) -> None:
    output_path = tmp_path / "out" / "result.json"
    audit_path = tmp_path / "audit.jsonl"

    container = create_container()
    pipeline = container.pipeline()
    result = pipeline.run(
        mandate_path=mandate_path,
        candidates_path=candidates_path,
        output_path=output_path,
        scored_at="2025-03-12T09:30:00Z",
        audit_logger=AuditLogger(audit_path),
    )

    assert [c.candidate_id for c in result.candidates] == ["C-1", "C-2"]

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["metadata"]["mandate_id"] == "M-7"
    assert rendered["metadata"]["candidate_count"] == 2
    assert rendered["metadata"]["scoring_config"]["expertise_weight"] == 0.6
    assert rendered["metadata"]["app_version"]
    assert rendered["result"]["mandate_id"] == "M-7"
    assert rendered["result"]["bias_risk"] == "high"
    assert rendered["result"]["candidates"][1]["bias_risk"] == "high"

    audit_lines = audit_path.read_text(encoding="utf-8").strip().splitlines()
    records = [json.loads(line) for line in audit_lines]
    assert [r["candidate_id"] for r in records] == ["C-1", "C-2"]
    assert records[0]["expertise_rank"] == 1
    assert records[1]["similarity_rank"] == 1


def test_weekly_pipeline_aggregates_saved_results(
    tmp_path: Path, mandate_path: Path, candidates_path: Path
) -> None:
    container = create_container()
    result_path = tmp_path / "result.json"
    container.pipeline().run(
        mandate_path=mandate_path,
        candidates_path=candidates_path,
        output_path=result_path,
        scored_at="2025-03-12T09:30:00Z",
    )
    broken_path = tmp_path / "broken.json"
    broken_path.write_text("{not json", encoding="utf-8")
    weekly_path = tmp_path / "weekly.json"

    summary = container.weekly_pipeline().run(
        result_paths=[result_path, broken_path],
        week_of="2025-03-10",
        output_path=weekly_path,
    )

    assert summary.week_id == "2025-W11"
    assert summary.high_risk_decisions == 1
    assert summary.affected_mandates == 1
    assert summary.mandate_breakdown[0].mandate_id == "M-7"

    rendered = json.loads(weekly_path.read_text(encoding="utf-8"))
    assert rendered["summary"]["week_id"] == "2025-W11"
    assert len(rendered["metadata"]["errors"]) == 1
    assert rendered["metadata"]["result_count"] == 1


def test_result_loader_reports_partial_results(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"

    try:
        ResultLoader().load([missing])
    except ResultLoadError as exc:
        assert exc.partial == []
        assert str(missing) in exc.errors[0]
    else:  # pragma: no cover
        raise AssertionError("expected ResultLoadError")
