"""Digest exception hierarchy.

Callers distinguish "repository not found" from generic upstream failure
by type, never by message matching. Only PerFileFetchError is handled
inside the pipeline; everything else aborts the analysis.
"""

from typing import Any


class DigestError(Exception):
    """Base exception for every failure surfaced by the digest pipeline."""

    def __init__(self, message: str = "", *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}


class ValidationError(DigestError):
    """Caller supplied an unusable owner, repo, URL or filter value."""


class NotFoundError(DigestError):
    """The repository does not exist or is not public."""


class UpstreamError(DigestError):
    """The remote service failed, timed out or answered with an unexpected shape."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.status_code = status_code
        self.retryable = retryable

    def __str__(self) -> str:
        code = f" status={self.status_code}" if self.status_code is not None else ""
        return f"{self.message}{code}"


class PerFileFetchError(DigestError):
    """A single file's content could not be fetched or decoded."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message, context={"path": path})
        self.path = path
