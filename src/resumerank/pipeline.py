"""Triage pipeline assembly and execution."""

from __future__ import annotations

import asyncio
import functools
import json
import mimetypes
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Sequence, TypeVar

import pendulum
import structlog
import yaml
from pydantic import ValidationError

from . import __version__
from .core import ResumeScorer, TriagePolicy, rank_candidates
from .errors import EstimationFailure, PipelineWarning, PreconditionError
from .schemas import JobRequest, ResumeDocument, ScoredCandidate, TriagedCandidate
from .services import (
    CompensationAdvisor,
    NotificationDispatcher,
    NotifyOutcome,
    SalaryOutcome,
)

T = TypeVar("T")

# mimetypes does not know every format resumes arrive in.
_EXTRA_MEDIA_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
_FALLBACK_MEDIA_TYPE = "application/octet-stream"
_DATA_URI_SUFFIX = ".datauri"


class JobLoader:
    """Load job requests from JSON or YAML documents."""

    def load(self, path: Path, *, num_to_shortlist: int | None = None) -> JobRequest:
        with path.open("r", encoding="utf-8") as handle:
            try:
                if path.suffix.lower() in {".yaml", ".yml"}:
                    data = yaml.safe_load(handle)
                else:
                    data = json.load(handle)
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                raise PreconditionError(f"Invalid job file {path.name}: {exc}") from exc
        if not isinstance(data, dict):
            raise PreconditionError(f"Job file {path.name} must contain an object")
        if num_to_shortlist is not None:
            data.pop("numToShortlist", None)
            data["num_to_shortlist"] = num_to_shortlist
        try:
            return JobRequest.model_validate(data)
        except ValidationError as exc:
            raise PreconditionError(f"Invalid job request: {exc}") from exc


class ResumeLoader:
    """Read resume files into documents, in a stable order."""

    def load(self, paths: Iterable[Path]) -> list[ResumeDocument]:
        documents: list[ResumeDocument] = []
        for path in paths:
            if path.is_dir():
                files = sorted(
                    item
                    for item in path.iterdir()
                    if item.is_file() and not item.name.startswith(".")
                )
            else:
                files = [path]
            documents.extend(self.read(file) for file in files)
        return documents

    def read(self, file: Path) -> ResumeDocument:
        if file.suffix.lower() == _DATA_URI_SUFFIX:
            # The payload carries its own media type; the stem names the resume.
            try:
                return ResumeDocument.from_data_uri(
                    file.read_text(encoding="utf-8"), filename=file.stem
                )
            except (PreconditionError, UnicodeDecodeError) as exc:
                raise PreconditionError(f"Invalid data URI resume {file.name}: {exc}") from exc
        return ResumeDocument(
            content=file.read_bytes(),
            media_type=self.guess_media_type(file),
            filename=file.name,
        )

    @staticmethod
    def guess_media_type(path: Path) -> str:
        suffix = path.suffix.lower()
        if suffix in _EXTRA_MEDIA_TYPES:
            return _EXTRA_MEDIA_TYPES[suffix]
        media_type, _ = mimetypes.guess_type(path.name)
        return media_type or _FALLBACK_MEDIA_TYPE


class OutputWriter:
    """Persist triage outcomes."""

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


@dataclass
class PipelineConfig:
    """Concurrency limits for a pipeline run."""

    max_in_flight: int = 4
    dispatch_timeout_seconds: float | None = 30.0


@dataclass(slots=True)
class PipelineResult:
    """Everything a run produced, in rank order."""

    candidates: list[TriagedCandidate]
    warnings: list[PipelineWarning] = field(default_factory=list)
    notifications: list[NotifyOutcome] = field(default_factory=list)
    salary_outcomes: list[SalaryOutcome] = field(default_factory=list)
    started_at: pendulum.DateTime | None = None
    finished_at: pendulum.DateTime | None = None

    @property
    def shortlisted(self) -> list[TriagedCandidate]:
        return [candidate for candidate in self.candidates if candidate.shortlisted]

    @property
    def rejected(self) -> list[TriagedCandidate]:
        return [candidate for candidate in self.candidates if not candidate.shortlisted]

    def to_dict(self, *, job: JobRequest | None = None) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "candidateCount": len(self.candidates),
            "shortlisted": len(self.shortlisted),
            "startedAt": self.started_at.to_iso8601_string() if self.started_at else None,
            "finishedAt": self.finished_at.to_iso8601_string() if self.finished_at else None,
            "appVersion": __version__,
        }
        if job is not None:
            metadata["jobTitle"] = job.job_title
            metadata["numToShortlist"] = job.num_to_shortlist
        return {
            "metadata": metadata,
            "results": [candidate.to_record() for candidate in self.candidates],
            "warnings": [warning.to_dict() for warning in self.warnings],
            "notifications": [outcome.to_dict() for outcome in self.notifications],
            "salaryOutcomes": [outcome.to_dict() for outcome in self.salary_outcomes],
        }


def _in_executor(executor: Executor, func: Callable[..., T], /, *args: Any, **kwargs: Any) -> Awaitable[T]:
    loop = asyncio.get_running_loop()
    return loop.run_in_executor(executor, functools.partial(func, *args, **kwargs))


async def _gather_all(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await every task; on the first failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class TriagePipeline:
    """Score, rank and triage a batch of resumes for one job."""

    def __init__(
        self,
        *,
        scorer: ResumeScorer,
        dispatcher: NotificationDispatcher,
        advisor: CompensationAdvisor,
        policy: TriagePolicy | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self._scorer = scorer
        self._dispatcher = dispatcher
        self._advisor = advisor
        self._policy = policy or TriagePolicy()
        self._config = config or PipelineConfig()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        job: JobRequest,
        docs: Sequence[ResumeDocument],
        *,
        audit_logger: AuditLogger | None = None,
    ) -> PipelineResult:
        return asyncio.run(self.arun(job, docs, audit_logger=audit_logger))

    async def arun(
        self,
        job: JobRequest,
        docs: Sequence[ResumeDocument],
        *,
        audit_logger: AuditLogger | None = None,
    ) -> PipelineResult:
        docs = list(docs)
        self._check_inputs(job, docs)
        started_at = pendulum.now()
        self._logger.info("pipeline.started", documents=len(docs), shortlist_size=job.num_to_shortlist)

        # Per-run pools: a timed-out call keeps its worker, but the run never waits for it.
        scoring_pool = ThreadPoolExecutor(
            max_workers=self._config.max_in_flight, thread_name_prefix="resumerank-score"
        )
        dispatch_pool = ThreadPoolExecutor(
            max_workers=max(1, len(docs)), thread_name_prefix="resumerank-dispatch"
        )
        try:
            scored = await self._score_all(job, docs, scoring_pool)
            ranked, warnings = rank_candidates(scored)
            triaged = self._policy.triage(ranked, job.num_to_shortlist)

            semaphore = asyncio.Semaphore(self._config.max_in_flight)
            dispatched = await _gather_all(
                self._dispatch(job, candidate, docs[candidate.source_index], semaphore, dispatch_pool)
                for candidate in triaged
            )
        finally:
            for pool in (scoring_pool, dispatch_pool):
                pool.shutdown(wait=False, cancel_futures=True)

        result = PipelineResult(candidates=[], warnings=warnings, started_at=started_at)
        for candidate, outcome, warning in dispatched:
            result.candidates.append(candidate)
            if isinstance(outcome, NotifyOutcome):
                result.notifications.append(outcome)
            else:
                result.salary_outcomes.append(outcome)
            if warning is not None:
                result.warnings.append(warning)
        result.finished_at = pendulum.now()

        if audit_logger:
            for candidate in result.candidates:
                audit_logger.append(
                    {
                        "timestamp": result.finished_at.to_iso8601_string(),
                        "source_index": candidate.source_index,
                        "filename": docs[candidate.source_index].filename,
                        "rank": candidate.rank,
                        "match_score": candidate.match_score,
                        "shortlisted": candidate.shortlisted,
                        "salary_suggestion": candidate.salary_suggestion,
                        "rejection_reason": candidate.rejection_reason,
                    }
                )

        self._logger.info(
            "pipeline.completed",
            documents=len(docs),
            shortlisted=len(result.shortlisted),
            warnings=len(result.warnings),
        )
        return result

    @staticmethod
    def _check_inputs(job: JobRequest, docs: list[ResumeDocument]) -> None:
        job.ensure_valid()
        for index, doc in enumerate(docs):
            doc.ensure_valid(index)

    async def _score_all(
        self,
        job: JobRequest,
        docs: list[ResumeDocument],
        executor: Executor,
    ) -> list[ScoredCandidate]:
        semaphore = asyncio.Semaphore(self._config.max_in_flight)

        async def score_one(index: int, doc: ResumeDocument) -> ScoredCandidate:
            async with semaphore:
                return await _in_executor(executor, self._scorer.score, job, doc, source_index=index)

        try:
            return await _gather_all(score_one(index, doc) for index, doc in enumerate(docs))
        except Exception as exc:
            self._logger.error("pipeline.scoring_failed", error=str(exc))
            raise

    async def _dispatch(
        self,
        job: JobRequest,
        candidate: TriagedCandidate,
        doc: ResumeDocument,
        semaphore: asyncio.Semaphore,
        executor: Executor,
    ) -> tuple[TriagedCandidate, NotifyOutcome | SalaryOutcome, PipelineWarning | None]:
        index = candidate.source_index
        timeout = self._config.dispatch_timeout_seconds

        if not candidate.shortlisted:
            try:
                async with semaphore:
                    outcome = await asyncio.wait_for(
                        _in_executor(executor, self._dispatcher.notify, candidate, job=job),
                        timeout,
                    )
            except asyncio.TimeoutError:
                self._logger.warning("notify.timeout", source_index=index, timeout=timeout)
                outcome = NotifyOutcome.failed(index, f"timed out after {timeout}s")
            except Exception as exc:  # noqa: BLE001
                self._logger.warning("notify.failed", source_index=index, error=str(exc))
                outcome = NotifyOutcome.failed(index, str(exc) or type(exc).__name__)
            warning = None
            if outcome.status == "failed":
                warning = PipelineWarning(
                    kind="notify_failure", source_index=index, detail=outcome.reason or ""
                )
            return candidate, outcome, warning

        try:
            async with semaphore:
                suggestion = await asyncio.wait_for(
                    _in_executor(executor, self._advisor.suggest_salary, job, candidate, doc),
                    timeout,
                )
        except asyncio.TimeoutError:
            reason = f"timed out after {timeout}s"
        except EstimationFailure as exc:
            reason = str(exc)
        except Exception as exc:  # noqa: BLE001
            reason = f"salary estimation failed ({exc})"
        else:
            updated = candidate.model_copy(update={"salary_suggestion": suggestion})
            return updated, SalaryOutcome(index, "suggested", suggestion=suggestion), None

        self._logger.warning("estimate.failed", source_index=index, error=reason)
        return (
            candidate,
            SalaryOutcome(index, "failed", reason=reason),
            PipelineWarning(kind="estimation_failure", source_index=index, detail=reason),
        )
