"""Typer CLI entrypoint for the promotion scoring engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .config import PolicyStore
from .container import create_container
from .core import resolve_as_of
from .errors import ComparisonHarnessError, PolicyMisconfigured
from .logging import configure_logging
from .pipeline import AuditLogger
from .schemas.config import load_config

app = typer.Typer(help="Promotion eligibility scoring and ranking CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_name="config") from exc


def _validate_as_of(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        resolve_as_of(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return value


def _policy_error(exc: PolicyMisconfigured) -> typer.Exit:
    typer.echo(str(exc), err=True)
    return typer.Exit(code=2)


@app.command()
def score(
    roster: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Roster JSON or JSONL path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        callback=_validate_as_of,
        help="Reference date (ISO or YYYY-MM) for service computations.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    policy: Optional[str] = typer.Option(None, help="Policy version to score under."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    audit_report: Optional[Path] = typer.Option(None, dir_okay=False, help="Plain-text audit report output."),
    workers: Optional[int] = typer.Option(None, min=1, help="Thread pool size for scoring."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Score and rank a roster."""
    settings = _load_settings(config)
    if policy:
        settings["policy_version"] = policy

    configure_logging(log_level)

    try:
        container = create_container(settings=settings)
        pipeline = container.pipeline()
    except PolicyMisconfigured as exc:
        raise _policy_error(exc) from exc
    except KeyError as exc:
        raise typer.BadParameter(str(exc), param_name="policy") from exc

    audit_logger = AuditLogger(audit_log) if audit_log else None
    try:
        ranked = pipeline.run(
            roster_path=roster,
            output_path=output,
            as_of=as_of,
            audit_logger=audit_logger,
            audit_report_path=audit_report,
            max_workers=workers,
        )
    except PolicyMisconfigured as exc:
        raise _policy_error(exc) from exc

    typer.echo(
        f"Scored {ranked.total} personnel ({ranked.compliant_count} compliant, "
        f"{len(ranked.rejected)} rejected). Results saved to {output}."
    )


@app.command()
def compare(
    sample_size: int = typer.Option(100, min=1, help="Number of synthetic personnel to generate."),
    seed: Optional[int] = typer.Option(None, help="Random seed for a reproducible roster."),
    baseline: Optional[str] = typer.Option(None, help="Baseline method: legacy, original, none, or a policy version."),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Report output path (.json or .md)."),
    as_of: Optional[str] = typer.Option(None, callback=_validate_as_of, help="Reference date for the synthetic roster."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Compare the current policy against a baseline on a synthetic roster."""
    settings = _load_settings(config)
    harness_settings = settings.setdefault("harness", {})
    if seed is not None:
        harness_settings["seed"] = seed
    if baseline is not None:
        harness_settings["baseline"] = baseline

    configure_logging(log_level)

    try:
        container = create_container(settings=settings)
        harness = container.comparison_harness()
    except PolicyMisconfigured as exc:
        raise _policy_error(exc) from exc
    except KeyError as exc:
        raise typer.BadParameter(str(exc), param_name="baseline") from exc

    try:
        report = harness.run(sample_size, as_of=as_of)
    except PolicyMisconfigured as exc:
        raise _policy_error(exc) from exc
    except ComparisonHarnessError as exc:
        typer.echo(f"Comparison failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if output is None:
        typer.echo(report.to_markdown())
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".json":
        output.write_text(json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    else:
        output.write_text(report.to_markdown(), encoding="utf-8")
    typer.echo(f"Compared {report.sample_size} synthetic personnel ({report.changed_count} changed). Report saved to {output}.")


@app.command("policy")
def show_policy(
    version: Optional[str] = typer.Option(None, "--version", help="Policy version to display."),
    policy_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Directory of YAML policy files."),
    list_versions: bool = typer.Option(False, "--list", help="List available policy versions."),
) -> None:
    """Print a policy version as YAML."""
    store = PolicyStore(policy_dir)
    if list_versions:
        for name in store.available():
            typer.echo(name)
        return
    try:
        selected = store.load(version) if version else create_container().policy()
        selected.ensure_valid()
    except KeyError as exc:
        raise typer.BadParameter(str(exc), param_name="version") from exc
    except PolicyMisconfigured as exc:
        raise _policy_error(exc) from exc
    typer.echo(yaml.safe_dump(selected.model_dump(mode="json"), sort_keys=False, allow_unicode=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
