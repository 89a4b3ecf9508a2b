from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

import pytest
from dependency_injector import providers
from typer.testing import CliRunner

import resumerank.cli as cli
from resumerank.cli import app
from resumerank.container import create_container
from resumerank.errors import OracleError

SCORES = {"alice.txt": 88, "bob.txt": 41, "carol.md": 67}


class FileNameOracle:
    """Scores resumes by the first line of their text content."""

    def __init__(self, fail: bool = False) -> None:
        self._fail = fail

    def analyze(self, request: dict[str, Any]) -> dict[str, Any]:
        if self._fail:
            raise OracleError("oracle unavailable")
        name = base64.b64decode(request["content"]).decode("utf-8").splitlines()[0]
        return {
            "matchScore": SCORES[name],
            "name": name.split(".")[0].title(),
            "candidateEmail": f"{name.split('.')[0]}@example.com",
            "topSkills": ["Python"],
            "highlights": f"{name} highlights",
            "weakPoints": "Needs more testing experience",
            "suggestions": "none",
            "interviewQuestions": ["Q1"],
            "modelAnswers": ["A1"],
        }


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def install_oracle(monkeypatch: pytest.MonkeyPatch, oracle: FileNameOracle) -> None:
    def fake_create_container(*, settings: dict | None = None):
        container = create_container(settings=settings)
        container.analysis_client.override(providers.Object(oracle))
        return container

    monkeypatch.setattr(cli, "create_container", fake_create_container)


def write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    resumes = tmp_path / "resumes"
    resumes.mkdir()
    for name in SCORES:
        (resumes / name).write_text(f"{name}\nExperience...", encoding="utf-8")
    job_path = tmp_path / "job.json"
    job_path.write_text(
        json.dumps(
            {
                "job_title": "Platform Engineer",
                "job_description": "Python, AWS, Terraform",
                "expected_salary": "120k",
                "num_to_shortlist": 1,
            }
        ),
        encoding="utf-8",
    )
    return job_path, resumes


def test_cli_runs_pipeline_and_writes_output(
    tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    install_oracle(monkeypatch, FileNameOracle())
    job_path, resumes = write_inputs(tmp_path)
    output_path = tmp_path / "out" / "results.json"
    audit_path = tmp_path / "audit.jsonl"

    result = runner.invoke(
        app,
        [
            "run",
            "--job",
            str(job_path),
            "--resumes",
            str(resumes),
            "--output",
            str(output_path),
            "--shortlist",
            "2",
            "--audit-log",
            str(audit_path),
        ],
    )

    assert result.exit_code == 0, result.output
    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["metadata"]["numToShortlist"] == 2
    assert rendered["metadata"]["jobTitle"] == "Platform Engineer"
    assert [item["name"] for item in rendered["results"]] == ["Alice", "Carol", "Bob"]
    assert [item["shortlisted"] for item in rendered["results"]] == [True, True, False]
    assert rendered["results"][0]["salarySuggestion"].endswith("120k")
    assert rendered["notifications"] == [{"sourceIndex": 1, "status": "sent", "reason": None}]

    audit_lines = audit_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(audit_lines) == 3
    assert json.loads(audit_lines[0])["filename"] == "alice.txt"


def test_cli_reports_structural_failure(
    tmp_path: Path, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    install_oracle(monkeypatch, FileNameOracle(fail=True))
    job_path, resumes = write_inputs(tmp_path)
    output_path = tmp_path / "results.json"

    result = runner.invoke(
        app,
        ["run", "--job", str(job_path), "--resumes", str(resumes), "--output", str(output_path)],
    )

    assert result.exit_code == 1
    assert "Triage failed" in result.output
    assert not output_path.exists()


@pytest.mark.parametrize(
    "config_text",
    [
        "pipeline:\n  max_in_flight: 0\n",
        "triage:\n  rejection_reason_template: \"Sorry: {reason}\"\n",
    ],
)
def test_cli_rejects_invalid_config(tmp_path: Path, runner: CliRunner, config_text: str) -> None:
    job_path, resumes = write_inputs(tmp_path)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(config_text, encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "run",
            "--job",
            str(job_path),
            "--resumes",
            str(resumes),
            "--output",
            str(tmp_path / "results.json"),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code != 0
