"""Rejection notices for candidates that were not shortlisted."""

from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import TYPE_CHECKING, Any, Literal

import structlog

from ..errors import NotifyFailure
from ..schemas import JobRequest, TriagedCandidate
from ..templates import NOTIFICATION_FIELDS, check_template

if TYPE_CHECKING:
    from . import RejectionNotifier

NotifyStatus = Literal["sent", "skipped", "failed"]

DEFAULT_SUBJECT = "Update on your application{for_title}"
DEFAULT_BODY = (
    "Dear {name},\n\n"
    "Thank you for your interest{for_title} and for the time you spent applying. "
    "After careful review we will not be moving forward with your application.\n\n"
    "{rejection_reason}\n\n"
    "We wish you the best in your search.\n"
)


@dataclass(slots=True)
class RejectionMessage:
    """Outbound rejection notice."""

    to: str
    subject: str
    body: str


@dataclass(slots=True)
class NotifyOutcome:
    """Result of one rejection dispatch."""

    source_index: int
    status: NotifyStatus
    reason: str | None = None

    @classmethod
    def sent(cls, source_index: int) -> "NotifyOutcome":
        return cls(source_index=source_index, status="sent")

    @classmethod
    def skipped(cls, source_index: int, reason: str = "no-address") -> "NotifyOutcome":
        return cls(source_index=source_index, status="skipped", reason=reason)

    @classmethod
    def failed(cls, source_index: int, reason: str) -> "NotifyOutcome":
        return cls(source_index=source_index, status="failed", reason=reason)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceIndex": self.source_index,
            "status": self.status,
            "reason": self.reason,
        }


@dataclass
class NotificationConfig:
    """Templates used to render rejection notices."""

    subject_template: str = DEFAULT_SUBJECT
    body_template: str = DEFAULT_BODY

    def __post_init__(self) -> None:
        check_template(self.subject_template, NOTIFICATION_FIELDS, label="notification subject")
        check_template(self.body_template, NOTIFICATION_FIELDS, label="notification body")


class NotificationDispatcher:
    """Send rejection notices; failures become outcomes, never exceptions."""

    def __init__(
        self,
        notifier: "RejectionNotifier",
        *,
        config: NotificationConfig | None = None,
    ) -> None:
        self._notifier = notifier
        self._config = config or NotificationConfig()
        self._logger = structlog.get_logger(__name__)

    def build_message(self, candidate: TriagedCandidate, *, job: JobRequest) -> RejectionMessage:
        if not candidate.candidate_email:
            raise NotifyFailure("candidate has no email address")
        for_title = f" for {job.job_title}" if job.job_title else ""
        values = {
            "for_title": for_title,
            "name": candidate.name or "Candidate",
            "rejection_reason": candidate.rejection_reason or "",
            "job_title": job.job_title or "",
        }
        return RejectionMessage(
            to=candidate.candidate_email,
            subject=self._config.subject_template.format(**values),
            body=self._config.body_template.format(**values),
        )

    def notify(self, candidate: TriagedCandidate, *, job: JobRequest) -> NotifyOutcome:
        index = candidate.source_index
        if candidate.shortlisted:
            raise ValueError(f"candidate {index} is shortlisted; rejection notices are not sent")
        if not candidate.candidate_email:
            self._logger.info("notify.skipped", source_index=index, reason="no-address")
            return NotifyOutcome.skipped(index)

        message = self.build_message(candidate, job=job)
        try:
            delivered = self._notifier.send(message)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("notify.failed", source_index=index, error=str(exc))
            return NotifyOutcome.failed(index, str(exc) or type(exc).__name__)
        if not delivered:
            self._logger.warning(
                "notify.failed", source_index=index, error="channel reported failure"
            )
            return NotifyOutcome.failed(index, "channel reported failure")

        self._logger.info("notify.sent", source_index=index)
        return NotifyOutcome.sent(index)


class LoggingNotifier:
    """Channel that only records the notice in the structured log."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def send(self, message: RejectionMessage) -> bool:
        self._logger.info(
            "notify.logged",
            to=message.to,
            subject=message.subject,
            body=message.body,
        )
        return True


class SMTPNotifier:
    """Deliver rejection notices through an SMTP relay."""

    def __init__(
        self,
        *,
        host: str,
        sender: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, message: RejectionMessage) -> bool:
        email = EmailMessage()
        email["From"] = self._sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.body)

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
                if self._use_tls:
                    client.starttls()
                if self._username:
                    client.login(self._username, self._password or "")
                refused = client.send_message(email)
        except (OSError, smtplib.SMTPException) as exc:
            raise NotifyFailure(f"SMTP delivery to {message.to} failed ({exc})") from exc
        return not refused
