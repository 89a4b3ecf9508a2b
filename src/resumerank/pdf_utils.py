"""Utilities for turning resume documents into plain text."""

from __future__ import annotations

import re
import tempfile
from pathlib import Path
from typing import Iterable, Sequence

import pymupdf4llm

from .schemas import ResumeDocument

PDF_MEDIA_TYPE = "application/pdf"


def extract_markdown(
    pdf_path: str | Path,
    *,
    exclude_patterns: Sequence[str] | None = None,
) -> str:
    """Return markdown text extracted from a PDF, removing boilerplate lines.

    Parameters
    ----------
    pdf_path:
        Path to the source PDF file.
    exclude_patterns:
        Optional list of string patterns to remove entirely from the output lines.
        Each pattern will be matched as a substring (case-sensitive) and any line
        containing it will be dropped, including a trailing page counter such
        as ``3 / 12``.
    """

    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(pdf_path)

    markdown = pymupdf4llm.to_markdown(str(pdf_path))
    patterns = _build_patterns(exclude_patterns or ())
    if not patterns:
        return markdown

    cleaned_lines: list[str] = []
    for line in markdown.splitlines():
        if line.strip() and any(pattern.search(line) for pattern in patterns):
            continue
        cleaned_lines.append(line)
    return "\n".join(cleaned_lines)


def resume_text(
    doc: ResumeDocument,
    *,
    exclude_patterns: Sequence[str] | None = None,
) -> str:
    """Best-effort plain text for a resume; empty for unsupported media types."""
    media_type = doc.media_type.split(";", 1)[0].strip().lower()
    if media_type.startswith("text/") or media_type in {"application/json", "application/markdown"}:
        return doc.content.decode("utf-8", errors="replace")
    if media_type != PDF_MEDIA_TYPE:
        return ""

    with tempfile.TemporaryDirectory() as tmpdir:
        pdf_path = Path(tmpdir) / (Path(doc.filename).name if doc.filename else "resume.pdf")
        pdf_path.write_bytes(doc.content)
        return extract_markdown(pdf_path, exclude_patterns=exclude_patterns)


def _build_patterns(excludes: Iterable[str]) -> list[re.Pattern[str]]:
    patterns: list[re.Pattern[str]] = []
    for text in excludes:
        escaped = re.escape(text)
        # Allow optional whitespace and page counter suffix like " 1 / 63".
        pattern = re.compile(rf"{escaped}(?:\s+\d+\s*/\s*\d+)?")
        patterns.append(pattern)
    return patterns


__all__ = ["PDF_MEDIA_TYPE", "extract_markdown", "resume_text"]
