"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..templates import NOTIFICATION_FIELDS, REJECTION_REASON_FIELDS, check_template


class PipelineSection(BaseModel):
    max_in_flight: int = Field(default=4, ge=1)
    dispatch_timeout_seconds: float | None = Field(default=30.0, gt=0)

    model_config = ConfigDict(extra="forbid")


class TriageSection(BaseModel):
    rejection_reason_template: str | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("rejection_reason_template")
    @classmethod
    def check_reason_template(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return check_template(value, REJECTION_REASON_FIELDS, label="rejection reason")


class NotificationSection(BaseModel):
    subject_template: str | None = None
    body_template: str | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("subject_template", "body_template")
    @classmethod
    def check_message_template(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return check_template(value, NOTIFICATION_FIELDS, label="notification")


class EndpointSection(BaseModel):
    endpoint: str | None = None
    api_key: str | None = None
    timeout: float = Field(default=30.0, gt=0)

    model_config = ConfigDict(extra="forbid")


class SMTPSection(BaseModel):
    host: str
    port: int = 587
    sender: str
    username: str | None = None
    password: str | None = None
    use_tls: bool = True
    timeout: float = Field(default=10.0, gt=0)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    pipeline: PipelineSection = Field(default_factory=PipelineSection)
    triage: TriageSection = Field(default_factory=TriageSection)
    notification: NotificationSection = Field(default_factory=NotificationSection)
    oracle: EndpointSection | None = None
    estimator: EndpointSection | None = None
    smtp: SMTPSection | None = None

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {
            "pipeline": self.pipeline.model_dump(),
        }
        triage = self.triage.model_dump(exclude_none=True)
        if triage:
            settings["triage"] = triage
        notification = self.notification.model_dump(exclude_none=True)
        if notification:
            settings["notification"] = notification
        for name in ("oracle", "estimator", "smtp"):
            section = getattr(self, name)
            if section is not None:
                settings[name] = section.model_dump(exclude_none=True)
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
