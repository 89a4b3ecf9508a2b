"""Resume triage pipeline: score, rank and triage resumes against a job."""

__version__ = "0.1.0"

__all__ = ["__version__"]
