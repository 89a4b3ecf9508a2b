"""Typer CLI entrypoint for the triage pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .errors import PipelineError
from .logging import configure_logging
from .pipeline import AuditLogger, JobLoader, OutputWriter, ResumeLoader
from .schemas.config import load_config

app = typer.Typer(help="Resume triage CLI: score, rank and shortlist resumes for a job.")


@app.callback()
def main_callback() -> None:
    """Resume triage commands."""


@app.command()
def run(
    job: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Job request JSON/YAML path."),
    resumes: List[Path] = typer.Option(
        ...,
        exists=True,
        readable=True,
        help="Resume file or directory of resumes. Repeat for several.",
    ),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    shortlist: Optional[int] = typer.Option(None, min=1, help="Override the job's shortlist size."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    oracle_endpoint: Optional[str] = typer.Option(None, help="Analysis oracle API endpoint."),
    oracle_api_key: Optional[str] = typer.Option(None, envvar="RESUMERANK_ORACLE_API_KEY", help="Analysis oracle API key."),
) -> None:
    """Run the triage pipeline."""
    raw: dict[str, Any] = {}
    if config:
        with config.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    try:
        app_config = load_config(raw)
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid config: {exc}", param_name="config") from exc
    settings = app_config.to_settings()

    if oracle_endpoint or oracle_api_key:
        oracle = settings.setdefault("oracle", {})
        if oracle_endpoint:
            oracle["endpoint"] = oracle_endpoint
        if oracle_api_key:
            oracle["api_key"] = oracle_api_key

    configure_logging(log_level)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        job_request = JobLoader().load(job, num_to_shortlist=shortlist)
        documents = ResumeLoader().load(resumes)
        result = pipeline.run(job_request, documents, audit_logger=audit_logger)
    except PipelineError as exc:
        typer.echo(f"Triage failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    OutputWriter().write(output, result.to_dict(job=job_request))
    typer.echo(
        f"Processed {len(result.candidates)} resumes, shortlisted {len(result.shortlisted)}. "
        f"Results saved to {output}."
    )
    for warning in result.warnings:
        typer.echo(f"warning: {warning.kind} (document {warning.source_index}): {warning.detail}", err=True)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
