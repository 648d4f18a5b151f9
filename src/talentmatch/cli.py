"""Typer CLI entrypoint for the matching pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import structlog
import typer
from dependency_injector import providers
from pydantic import ValidationError

from .adapters import RecordError
from .config import ConfigFileError, ConfigManager
from .container import MatchingContainer, create_container
from .logging import configure_logging
from .pipeline import AuditLogger, MatchingError, OutputWriter, build_statistics, run_payload
from .repositories import FixtureLoadError, FixtureLoader, Fixtures
from .schemas import GeneratedMatch, MatchGenerationOptions, load_config

app = typer.Typer(help="Talent matching and ranking CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    try:
        return load_config(ConfigManager().load_path(config)).to_settings()
    except (ConfigFileError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid config: {exc}", param_hint="--config") from exc


def _load_fixtures(path: Path) -> Fixtures:
    try:
        return FixtureLoader().load(path)
    except FixtureLoadError as exc:
        structlog.get_logger(__name__).warning("fixtures.partial_load", errors=exc.errors)
        return exc.partial
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--fixtures") from exc


def _build_container(settings: dict[str, Any], fixtures: Fixtures) -> MatchingContainer:
    container = create_container(settings=settings)
    container.requirement_repository.override(providers.Object(fixtures.requirements))
    container.talent_repository.override(providers.Object(fixtures.talents))
    container.booking_repository.override(providers.Object(fixtures.bookings))
    return container


@app.command()
def run(
    fixtures: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Fixture JSON path."),
    requirement_id: str = typer.Option(..., help="Requirement to generate matches for."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    max_matches: Optional[int] = typer.Option(None, min=1, help="Cap on returned matches."),
    min_score: Optional[float] = typer.Option(None, min=0.0, max=1.0, help="Minimum total score."),
    live_availability: bool = typer.Option(
        True,
        "--live-availability/--no-live-availability",
        help="Re-fetch availability and bookings before ranking.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    log_format: str = typer.Option("json", help="Log output format: json or console."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Generate ranked matches for a requirement."""
    settings = _load_settings(config)
    try:
        configure_logging(log_level, fmt=log_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc

    container = _build_container(settings, _load_fixtures(fixtures))
    orchestrator = container.orchestrator()
    audit_logger = AuditLogger(audit_log) if audit_log else None
    options = MatchGenerationOptions(
        max_matches=max_matches,
        min_score=min_score,
        enable_real_time_availability=live_availability,
    )

    try:
        report = orchestrator.run(requirement_id, options, audit_logger=audit_logger)
    except MatchingError as exc:
        typer.echo(f"Matching failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    OutputWriter().write(output, run_payload(report))
    typer.echo(
        f"Generated {len(report.matches)} matches for {requirement_id}. Results saved to {output}."
    )


@app.command()
def weights(
    fixtures: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Fixture JSON path."),
    requirement_id: str = typer.Option(..., help="Requirement to derive weights for."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
) -> None:
    """Show derived weights and the context behind them."""
    settings = _load_settings(config)
    container = _build_container(settings, _load_fixtures(fixtures))

    raw = container.requirement_repository().fetch(requirement_id)
    if raw is None:
        typer.echo(f"Requirement not found: {requirement_id}", err=True)
        raise typer.Exit(code=1)
    try:
        requirement = container.record_adapter().to_requirement(raw)
    except RecordError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    policy = container.weight_policy()
    payload = {
        "requirement_id": requirement_id,
        "weights": policy.derive_weights(requirement).as_dict(),
        "explanations": policy.explain(requirement),
        "recommended_min_score": policy.recommended_min_score(requirement),
        "recommended_max_results": policy.recommended_max_results(requirement),
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def stats(
    results: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Output JSON of a previous run."),
) -> None:
    """Summarize matches stored in a previous run's output."""
    try:
        data = json.loads(results.read_text(encoding="utf-8"))
        run_data = data["run"]
        matches = [GeneratedMatch.model_validate(item) for item in run_data["matches"]]
    except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid results file: {exc}", param_hint="--results") from exc

    statistics = build_statistics(run_data["requirement_id"], matches)
    typer.echo(json.dumps(statistics.model_dump(mode="json"), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
