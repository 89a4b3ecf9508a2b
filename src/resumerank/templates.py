"""Validation of user-supplied message templates."""

from __future__ import annotations

from typing import Mapping

from .errors import PreconditionError

REJECTION_REASON_FIELDS: Mapping[str, object] = {
    "score": "0",
    "rank": 1,
    "weak_points": "",
}

NOTIFICATION_FIELDS: Mapping[str, object] = {
    "for_title": "",
    "name": "",
    "rejection_reason": "",
    "job_title": "",
}


def check_template(template: str, fields: Mapping[str, object], *, label: str) -> str:
    """Render ``template`` with placeholder values; raise PreconditionError if it cannot."""
    try:
        template.format(**fields)
    except (KeyError, IndexError, AttributeError, ValueError) as exc:
        allowed = ", ".join("{" + name + "}" for name in fields)
        raise PreconditionError(
            f"{label} template {template!r} is invalid ({type(exc).__name__}: {exc}); "
            f"allowed placeholders: {allowed}"
        ) from exc
    return template


__all__ = ["NOTIFICATION_FIELDS", "REJECTION_REASON_FIELDS", "check_template"]
