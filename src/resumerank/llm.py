"""HTTP clients for the analysis oracle and the salary estimator."""

from __future__ import annotations

import json
from typing import Any
from urllib import error, request

import structlog

from .errors import EstimationFailure, OracleError

ANALYSIS_PROMPT = """You are an AI resume analyzer. Analyze the resume provided and compare it to the job description.

Provide the following:

- Match Score (0-100): How well does the resume match the job description?
- Name: The candidate's full name, if stated.
- Candidate Email: The candidate's email address, if stated.
- Top Skills: A list of the candidate's top skills.
- Highlights: A summary of the candidate's strengths.
- Weak Points: A list of weaknesses or concerns.
- Suggestions: Suggestions to improve the resume.
- Interview Questions: Tailored interview questions for the candidate.
- Model Answers: Model answers for the interview questions, in the same order.
"""

ANALYSIS_OUTPUT_SCHEMA: dict[str, str] = {
    "matchScore": "number 0-100",
    "name": "string | null",
    "candidateEmail": "string | null",
    "topSkills": "string[]",
    "highlights": "string",
    "weakPoints": "string",
    "suggestions": "string",
    "interviewQuestions": "string[]",
    "modelAnswers": "string[]",
}

SALARY_PROMPT = (
    "Suggest an appropriate salary for this candidate given the job description, "
    "the expected salary for the role, the resume, the candidate's top skills and highlights. "
    "Answer with a single short sentence."
)


class _JSONEndpoint:
    """Minimal JSON-over-HTTP POST helper."""

    def __init__(self, endpoint: str | None, api_key: str | None = None, *, timeout: float = 30.0):
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._logger = structlog.get_logger(__name__)

    @property
    def endpoint(self) -> str | None:
        return self._endpoint

    def _post(self, payload: dict[str, Any]) -> Any:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = request.Request(self._endpoint, data=data, headers=headers, method="POST")
        with request.urlopen(req, timeout=self._timeout) as resp:
            body = resp.read().decode("utf-8")
        return json.loads(body) if body else {}


class HTTPAnalysisClient(_JSONEndpoint):
    """Analysis oracle reached over HTTP."""

    def analyze(self, payload: dict[str, Any]) -> dict[str, Any] | str:
        if not self._endpoint:
            raise OracleError("analysis oracle endpoint is not configured")
        body = {
            "prompt": ANALYSIS_PROMPT,
            "input": payload,
            "outputSchema": ANALYSIS_OUTPUT_SCHEMA,
        }
        try:
            response = self._post(body)
        except ValueError as exc:
            raise OracleError(f"analysis oracle returned an unreadable response ({exc})") from exc
        except (error.URLError, TimeoutError) as exc:
            self._logger.warning("oracle.request_failed", error=str(exc))
            raise OracleError(f"analysis oracle unreachable ({exc})") from exc

        # Some gateways wrap the structured object in an "output" envelope.
        if isinstance(response, dict) and isinstance(response.get("output"), (dict, str)):
            return response["output"]
        return response


class HTTPSalaryEstimator(_JSONEndpoint):
    """Salary estimator reached over HTTP."""

    def estimate(self, payload: dict[str, Any]) -> str:
        if not self._endpoint:
            raise EstimationFailure("salary estimator endpoint is not configured")
        try:
            response = self._post({"prompt": SALARY_PROMPT, "input": payload})
        except (ValueError, error.URLError, TimeoutError) as exc:
            self._logger.warning("estimator.request_failed", error=str(exc))
            raise EstimationFailure(f"salary estimator request failed ({exc})") from exc

        if isinstance(response, str):
            return response
        if isinstance(response, dict):
            suggestion = response.get("suggestion") or response.get("output")
            if isinstance(suggestion, str):
                return suggestion
        raise EstimationFailure("salary estimator returned no suggestion")
