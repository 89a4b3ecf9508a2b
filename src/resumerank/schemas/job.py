"""Pipeline inputs: the job request and the submitted resume documents."""

from __future__ import annotations

import base64
import binascii
import re

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..errors import PreconditionError

_DATA_URI_RE = re.compile(r"^data:(?P<media_type>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<data>.*)$", re.DOTALL)


class JobRequest(BaseModel):
    """Immutable input describing one triage run."""

    job_description: str
    expected_salary: str = ""
    num_to_shortlist: int
    job_title: str | None = None

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    def ensure_valid(self) -> None:
        """Raise PreconditionError when the request cannot start a run."""
        if not self.job_description.strip():
            raise PreconditionError("job description is empty")
        if self.num_to_shortlist < 1:
            raise PreconditionError(
                f"shortlist size must be a positive integer, got {self.num_to_shortlist}"
            )


class ResumeDocument(BaseModel):
    """Opaque resume content identified by its position in the batch."""

    content: bytes = b""
    media_type: str = ""
    filename: str | None = None

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @classmethod
    def from_data_uri(cls, uri: str, *, filename: str | None = None) -> "ResumeDocument":
        """Build a document from a ``data:<media type>;base64,<payload>`` URI."""
        match = _DATA_URI_RE.match(uri.strip())
        if match is None:
            raise PreconditionError("resume is not a data URI")
        params = [item.strip().lower() for item in match.group("params").split(";") if item]
        if "base64" not in params:
            raise PreconditionError("resume data URI must be base64 encoded")
        try:
            content = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise PreconditionError(f"resume data URI payload is not valid base64 ({exc})") from exc
        return cls(content=content, media_type=match.group("media_type"), filename=filename)

    def ensure_valid(self, source_index: int) -> None:
        if not self.content:
            raise PreconditionError("resume content is empty", source_index=source_index)
        if not self.media_type.strip():
            raise PreconditionError("resume media type is not set", source_index=source_index)


__all__ = ["JobRequest", "ResumeDocument"]
