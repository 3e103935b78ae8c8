"""ASGI middleware tying every backend log line to one request.

Binds a correlation id (taken from ``X-Correlation-ID`` or generated),
the endpoint, the method and, when the request names one, the
repository being analyzed or proxied. The correlation id is echoed on
the response so CLI and proxy callers can quote it.
"""

from __future__ import annotations

import re
import time
from typing import Any
from urllib.parse import parse_qs
from uuid import uuid4

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()

CORRELATION_HEADER = b"x-correlation-id"
_QUIET_PATHS = ("/health", "/metrics")
_PROXY_REPO_PATH = re.compile(r"/repos/([^/]+)/([^/]+)")


class CorrelationMiddleware:
    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        clear_contextvars()
        correlation_id = _header(scope, CORRELATION_HEADER) or str(uuid4())
        path = str(scope.get("path", "/"))
        bind_contextvars(
            correlation_id=correlation_id,
            trace_id=str(uuid4()),
            context_endpoint=path,
            context_method=str(scope.get("method", "UNKNOWN")),
        )
        repository = _repository_from(scope)
        if repository:
            bind_contextvars(repository=repository)

        http_status = 500
        start = time.perf_counter()

        async def send_with_correlation(message: dict[str, Any]) -> None:
            nonlocal http_status
            if message.get("type") == "http.response.start":
                http_status = message.get("status", 500)
                headers = list(message.get("headers", []))
                headers.append((CORRELATION_HEADER, correlation_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_correlation)
        finally:
            log = logger.debug if path.startswith(_QUIET_PATHS) else logger.info
            log(
                "Request processed",
                processing_status="SUCCESS" if http_status < 400 else "ERROR",
                processing_duration_ms=round((time.perf_counter() - start) * 1000, 2),
                http_status=http_status,
            )


def _repository_from(scope: dict[str, Any]) -> str | None:
    """owner/repo from the analyze query string or a proxied /repos/{owner}/{repo} path."""
    query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
    owner, repo = query.get("owner", [""])[0], query.get("repo", [""])[0]
    if owner and repo:
        return f"{owner}/{repo}"
    match = _PROXY_REPO_PATH.search(str(scope.get("path", "")))
    if match:
        return f"{match.group(1)}/{match.group(2)}"
    return None


def _header(scope: dict[str, Any], name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None
