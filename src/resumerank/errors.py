"""Error taxonomy for pipeline runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

WarningKind = Literal["malformed_score", "notify_failure", "estimation_failure"]


class PipelineError(Exception):
    """Base class for triage pipeline errors."""


class PreconditionError(PipelineError, ValueError):
    """Raised when a job request or resume document is unusable.

    Always raised before any external call is made for the offending input.
    """

    def __init__(self, message: str, *, source_index: int | None = None):
        super().__init__(message)
        self.source_index = source_index

    def __str__(self) -> str:
        message = super().__str__()
        if self.source_index is None:
            return message
        return f"document {self.source_index}: {message}"


class OracleError(PipelineError):
    """Raised when the analysis oracle is unreachable or returns an invalid payload."""

    def __init__(
        self,
        message: str,
        *,
        source_index: int | None = None,
        step: str = "score",
    ):
        super().__init__(message)
        self.source_index = source_index
        self.step = step

    def __str__(self) -> str:
        message = super().__str__()
        if self.source_index is None:
            return f"{self.step}: {message}"
        return f"{self.step} (document {self.source_index}): {message}"


class NotifyFailure(PipelineError):
    """Raised by rejection channels that cannot deliver a message."""


class EstimationFailure(PipelineError):
    """Raised when no salary suggestion could be obtained for a candidate."""


@dataclass(slots=True)
class PipelineWarning:
    """Non-fatal, per-candidate problem recorded on the run result."""

    kind: WarningKind
    source_index: int
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "sourceIndex": self.source_index,
            "detail": self.detail,
        }


__all__ = [
    "EstimationFailure",
    "NotifyFailure",
    "OracleError",
    "PipelineError",
    "PipelineWarning",
    "PreconditionError",
    "WarningKind",
]
