from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from talentmatch.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


def talent(talent_id: str, **kwargs: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": talent_id,
        "name": talent_id,
        "skills": [
            {"name": "React", "level": "expert", "years": 6},
            {"name": "TypeScript", "level": "senior", "years": 4},
        ],
        "experience": [
            {"company": "Acme", "role": "Engineer", "industry": "saas", "years": 5}
        ],
        "availability": [
            {"start_date": "2025-03-01T00:00:00Z", "end_date": "2025-06-01T00:00:00Z", "capacity": 75}
        ],
        "hourly_rate": 80,
        "timezone": "UTC",
        "rating": 4.8,
        "review_count": 30,
        "past_projects": [{"title": "Shop", "outcome": "completed", "rating": 5}] * 3,
        "is_available": True,
    }
    record.update(kwargs)
    return record


@pytest.fixture
def fixtures_path(tmp_path: Path) -> Path:
    path = tmp_path / "fixtures.json"
    write_json(
        path,
        {
            "requirements": [
                {
                    "id": "REQ-001",
                    "title": "Storefront rebuild",
                    "required_skills": [
                        {"name": "React", "level": "senior", "priority": "required"},
                        {"name": "TypeScript", "level": "mid", "priority": "preferred"},
                    ],
                    "budget": {"min": 50, "max": 100},
                    "duration": {"value": 8, "unit": "weeks"},
                    "start_date": "2025-03-03T00:00:00Z",
                    "remote_preference": "remote",
                    "timezone": "UTC",
                    "urgency": "medium",
                    "project_type": "development",
                    "team_size": 3,
                }
            ],
            "talents": [
                talent("T-strong"),
                talent("T-weak", skills=[{"name": "React", "level": "senior"}], hourly_rate=140),
                talent("T-pricey", hourly_rate=150),
            ],
            "bookings": [
                {
                    "talent_id": "T-strong",
                    "start": "2025-03-10T00:00:00Z",
                    "end": "2025-03-20T00:00:00Z",
                }
            ],
        },
    )
    return path


def invoke_run(runner: CliRunner, fixtures: Path, output: Path, *extra: str):
    return runner.invoke(
        app,
        [
            "run",
            "--fixtures",
            str(fixtures),
            "--requirement-id",
            "REQ-001",
            "--output",
            str(output),
            "--min-score",
            "0",
            *extra,
        ],
    )


def test_cli_run_writes_ranked_matches(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    output_path = tmp_path / "out" / "results.json"
    audit_path = tmp_path / "audit.jsonl"

    result = invoke_run(runner, fixtures_path, output_path, "--audit-log", str(audit_path))

    assert result.exit_code == 0, result.output
    assert "Generated 2 matches for REQ-001" in result.stdout

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    run = rendered["run"]
    assert rendered["metadata"]["match_count"] == 2
    assert [match["talent_id"] for match in run["matches"]] == ["T-strong", "T-weak"]
    assert run["prefilter"]["excluded"] == {"T-pricey": "rate_above_budget"}
    assert "availability_refresh" in run["stages"]
    assert run["matches"][0]["availability_details"]["conflicting_bookings"] == 1
    assert len(audit_path.read_text(encoding="utf-8").splitlines()) == 2


def test_cli_run_without_live_availability(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    output_path = tmp_path / "results.json"

    result = invoke_run(runner, fixtures_path, output_path, "--no-live-availability", "--max-matches", "1")

    assert result.exit_code == 0, result.output
    run = json.loads(output_path.read_text(encoding="utf-8"))["run"]
    assert "availability_refresh" not in run["stages"]
    assert run["max_matches"] == 1
    assert len(run["matches"]) == 1
    assert run["matches"][0]["availability_details"]["conflicting_bookings"] == 0


def test_cli_run_applies_yaml_config(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("prefilter:\n  rate_ceiling_ratio: 1.0\n", encoding="utf-8")
    output_path = tmp_path / "results.json"

    result = invoke_run(runner, fixtures_path, output_path, "--config", str(config_path))

    assert result.exit_code == 0, result.output
    run = json.loads(output_path.read_text(encoding="utf-8"))["run"]
    assert run["prefilter"]["summary"] == {"rate_above_budget": 2}
    assert [match["talent_id"] for match in run["matches"]] == ["T-strong"]


def test_cli_run_rejects_invalid_config(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("core:\n  pool_limit: 0\n", encoding="utf-8")

    result = invoke_run(runner, fixtures_path, tmp_path / "results.json", "--config", str(config_path))

    assert result.exit_code == 2
    assert "Invalid config" in result.output
    assert not (tmp_path / "results.json").exists()


def test_cli_run_reports_unknown_requirement(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    output_path = tmp_path / "results.json"

    result = runner.invoke(
        app,
        [
            "run",
            "--fixtures",
            str(fixtures_path),
            "--requirement-id",
            "REQ-404",
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 1
    assert "Requirement not found: REQ-404" in result.output
    assert not output_path.exists()


def test_cli_weights_prints_derived_weights(fixtures_path: Path, runner: CliRunner) -> None:
    result = runner.invoke(
        app,
        ["weights", "--fixtures", str(fixtures_path), "--requirement-id", "REQ-001"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["requirement_id"] == "REQ-001"
    assert sum(payload["weights"].values()) == pytest.approx(1.0, abs=1e-3)
    assert payload["recommended_min_score"] == pytest.approx(0.6)
    assert payload["recommended_max_results"] == 20
    assert payload["explanations"]


def test_cli_weights_unknown_requirement(fixtures_path: Path, runner: CliRunner) -> None:
    result = runner.invoke(
        app,
        ["weights", "--fixtures", str(fixtures_path), "--requirement-id", "REQ-404"],
    )

    assert result.exit_code == 1
    assert "Requirement not found: REQ-404" in result.output


def test_cli_stats_summarizes_previous_run(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    output_path = tmp_path / "results.json"
    assert invoke_run(runner, fixtures_path, output_path).exit_code == 0

    result = runner.invoke(app, ["stats", "--results", str(output_path)])

    assert result.exit_code == 0, result.output
    statistics = json.loads(result.stdout)
    assert statistics["requirement_id"] == "REQ-001"
    assert statistics["total_matches"] == 2
    assert statistics["status_breakdown"] == {"pending": 2}
    assert statistics["response_rate"] == 0.0
    assert statistics["top_skill_matches"][0] == "React"


def test_cli_stats_rejects_malformed_results(tmp_path: Path, runner: CliRunner) -> None:
    path = tmp_path / "broken.json"
    write_json(path, {"metadata": {}})

    result = runner.invoke(app, ["stats", "--results", str(path)])

    assert result.exit_code == 2
    assert "Invalid results file" in result.output


def test_cli_run_rejects_non_mapping_config(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- core\n- weights\n", encoding="utf-8")

    result = invoke_run(runner, fixtures_path, tmp_path / "results.json", "--config", str(config_path))

    assert result.exit_code == 2
    assert "Invalid config" in result.output


def test_cli_run_rejects_unknown_log_format(tmp_path: Path, fixtures_path: Path, runner: CliRunner) -> None:
    result = invoke_run(runner, fixtures_path, tmp_path / "results.json", "--log-format", "xml")

    assert result.exit_code == 2
    assert "Unknown log format" in result.output
    assert not (tmp_path / "results.json").exists()


def test_cli_run_rejects_non_object_fixtures(tmp_path: Path, runner: CliRunner) -> None:
    fixtures = tmp_path / "fixtures.json"
    write_json(fixtures, [1, 2, 3])

    result = invoke_run(runner, fixtures, tmp_path / "results.json")

    assert result.exit_code == 2
    assert not (tmp_path / "results.json").exists()
