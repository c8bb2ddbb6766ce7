"""Exception taxonomy shared by the API client, job polling and sync layers."""

from __future__ import annotations

from typing import Any


class VocaSyncError(Exception):
    """Base class for all VocaSync errors."""


class ConfigError(VocaSyncError):
    """Raised when the project configuration or credentials are invalid."""


class ContentError(VocaSyncError):
    """Raised when the content collection cannot be loaded or filtered."""


class TransportError(VocaSyncError):
    """Network or protocol failure while talking to the remote API.

    Attributes:
        status_code: HTTP status code when a response was received.
        body: Raw response body (possibly truncated) when available.
    """

    def __init__(
        self, message: str, status_code: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(VocaSyncError):
    """Remote payload does not conform to the expected shape.

    Attributes:
        payload: The offending payload, kept for diagnostics.
    """

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload

    def __str__(self) -> str:
        base = super().__str__()
        if self.payload is None:
            return base
        snippet = repr(self.payload)
        if len(snippet) > 200:
            snippet = snippet[:200] + "..."
        return f"{base} (payload: {snippet})"


class JobFailedError(VocaSyncError):
    """Terminal remote failure of the synthesis or alignment sub-job.

    Attributes:
        subjob: ``"synthesis"`` or ``"alignment"``.
        reason: Error message reported by the remote system.
    """

    def __init__(self, subjob: str, reason: str) -> None:
        super().__init__(f"{subjob.capitalize()} failed: {reason}")
        self.subjob = subjob
        self.reason = reason


class PollingTimeoutError(VocaSyncError):
    """Attempt budget exhausted before the job reached a terminal state."""

    def __init__(self, job_id: str, attempts: int) -> None:
        super().__init__(
            f"Polling timeout - job {job_id} did not complete within {attempts} attempts"
        )
        self.job_id = job_id
        self.attempts = attempts


__all__ = [
    "ConfigError",
    "ContentError",
    "JobFailedError",
    "MalformedResponseError",
    "PollingTimeoutError",
    "TransportError",
    "VocaSyncError",
]
