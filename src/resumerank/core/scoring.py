"""Resume scoring through the external analysis oracle."""

from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from ..errors import OracleError
from ..schemas import JobRequest, OracleAnalysis, ResumeDocument, ScoredCandidate

if TYPE_CHECKING:
    from . import AnalysisClient


def build_analysis_request(job: JobRequest, doc: ResumeDocument) -> dict[str, Any]:
    """Construct the payload expected by the analysis oracle."""
    return {
        "jobDescriptionText": job.job_description,
        "mediaType": doc.media_type,
        "content": base64.b64encode(doc.content).decode("ascii"),
    }


class ResumeScorer:
    """Score a single resume and normalize the oracle's answer."""

    def __init__(self, client: "AnalysisClient") -> None:
        self._client = client
        self._logger = structlog.get_logger(__name__)

    def score(
        self,
        job: JobRequest,
        doc: ResumeDocument,
        *,
        source_index: int,
    ) -> ScoredCandidate:
        doc.ensure_valid(source_index)
        request = build_analysis_request(job, doc)

        try:
            raw = self._client.analyze(request)
        except OracleError as exc:
            if exc.source_index is None:
                exc.source_index = source_index
            raise
        except Exception as exc:  # noqa: BLE001
            raise OracleError(
                f"analysis oracle unreachable ({exc})", source_index=source_index
            ) from exc

        analysis = self._parse(raw, source_index)
        candidate = ScoredCandidate.from_analysis(analysis, source_index=source_index)
        self._logger.info(
            "scoring.completed",
            source_index=source_index,
            filename=doc.filename,
            match_score=candidate.match_score,
        )
        return candidate

    @staticmethod
    def _parse(raw: Any, source_index: int) -> OracleAnalysis:
        if isinstance(raw, (bytes, str)):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise OracleError(
                    f"oracle returned invalid JSON ({exc})", source_index=source_index
                ) from exc
        if not isinstance(raw, dict):
            raise OracleError(
                f"oracle returned {type(raw).__name__}, expected an object",
                source_index=source_index,
            )
        try:
            return OracleAnalysis.model_validate(raw)
        except ValidationError as exc:
            raise OracleError(
                f"oracle response does not match schema: {exc.errors(include_url=False)}",
                source_index=source_index,
            ) from exc
