"""Per-candidate side-effect services run after triage."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .compensation import (
    CompensationAdvisor,
    ExpectedSalaryEstimator,
    SalaryOutcome,
)
from .notification import (
    LoggingNotifier,
    NotificationConfig,
    NotificationDispatcher,
    NotifyOutcome,
    RejectionMessage,
    SMTPNotifier,
)


@runtime_checkable
class RejectionNotifier(Protocol):
    """Outbound channel for rejection notices."""

    def send(self, message: RejectionMessage) -> bool:
        """Deliver the message; return False when the channel reports failure."""


@runtime_checkable
class SalaryEstimator(Protocol):
    """External capability suggesting a salary for a shortlisted candidate."""

    def estimate(self, request: dict[str, Any]) -> str:
        """Return a free-text salary suggestion."""


__all__ = [
    "CompensationAdvisor",
    "ExpectedSalaryEstimator",
    "LoggingNotifier",
    "NotificationConfig",
    "NotificationDispatcher",
    "NotifyOutcome",
    "RejectionMessage",
    "RejectionNotifier",
    "SMTPNotifier",
    "SalaryEstimator",
    "SalaryOutcome",
]
