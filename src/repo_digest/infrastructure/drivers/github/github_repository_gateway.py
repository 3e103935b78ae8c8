import urllib.parse
from enum import StrEnum
from typing import Any

import httpx

from repo_digest.core.application.ports.repository_gateway_port import RepositoryGatewayPort
from repo_digest.core.domain.repository import (
    FileEntry,
    RateLimitSnapshot,
    RepositoryMetadata,
    RepositoryTree,
)
from repo_digest.core.exceptions import (
    DigestError,
    NotFoundError,
    PerFileFetchError,
    UpstreamError,
)
from repo_digest.infrastructure.common.retry.retry_policy import RetryPolicy
from repo_digest.infrastructure.drivers.github.clients.github_http_client import GitHubHttpClient
from repo_digest.infrastructure.drivers.github.mappers.github_response_mapper import (
    GitHubResponseMapper,
)
from repo_digest.infrastructure.observability.logger_factory_service import get_logger
from repo_digest.infrastructure.observability.metrics_service import UPSTREAM_CALLS_TOTAL

logger = get_logger(__name__)


class ContentSource(StrEnum):
    """How file content is addressed: by blob sha or by path."""

    BLOB = "blob"
    CONTENTS = "contents"


class GitHubRepositoryGateway(RepositoryGatewayPort):
    """RepositoryGatewayPort over the GitHub REST API.

    The transport is whatever base URL the http client is bound to, so the
    same gateway serves both direct calls and calls through the backend
    proxy.
    """

    def __init__(
        self,
        http_client: GitHubHttpClient,
        content_source: ContentSource = ContentSource.BLOB,
        retry_policy: RetryPolicy | None = None,
        mapper: GitHubResponseMapper | None = None,
    ):
        self.client = http_client
        self.content_source = content_source
        self.retry_policy = retry_policy or RetryPolicy()
        self.mapper = mapper or GitHubResponseMapper()

    async def get_repository(self, owner: str, repo: str) -> RepositoryMetadata:
        path = f"repos/{_quote(owner)}/{_quote(repo)}"
        try:
            payload = await self._get_json("get_repository", path)
        except UpstreamError as exc:
            if exc.status_code == 404:
                raise NotFoundError(
                    "Repository not found", context={"repository": f"{owner}/{repo}"}
                ) from exc
            raise
        return self._map("get_repository", self.mapper.to_repository_metadata, payload)

    async def get_tree(self, owner: str, repo: str, branch: str) -> RepositoryTree:
        path = f"repos/{_quote(owner)}/{_quote(repo)}/git/trees/{urllib.parse.quote(branch)}"
        try:
            payload = await self._get_json("get_tree", path, params={"recursive": "1"})
        except UpstreamError as exc:
            raise UpstreamError(
                f"Failed to get repository files: {exc.message}",
                status_code=exc.status_code,
                retryable=exc.retryable,
                context={"branch": branch},
            ) from exc
        return self._map("get_tree", self.mapper.to_tree, payload)

    async def get_file_content(self, owner: str, repo: str, entry: FileEntry) -> bytes:
        prefix = f"repos/{_quote(owner)}/{_quote(repo)}"
        if self.content_source == ContentSource.CONTENTS:
            path = f"{prefix}/contents/{urllib.parse.quote(entry.path)}"
        else:
            path = f"{prefix}/git/blobs/{entry.sha}"
        try:
            payload = await self._get_json("get_file_content", path)
            return self._map("get_file_content", self.mapper.to_content_bytes, payload)
        except DigestError as exc:
            raise PerFileFetchError(
                entry.path, f"Failed to get file content: {exc.message}"
            ) from exc

    async def get_rate_limit(self) -> RateLimitSnapshot:
        payload = await self._get_json("get_rate_limit", "rate_limit")
        return self._map("get_rate_limit", self.mapper.to_rate_limit, payload)

    async def aclose(self) -> None:
        await self.client.aclose()

    # ── Transport ────────────────────────────────────────────────

    async def _get_json(
        self, operation: str, path: str, params: dict[str, Any] | None = None
    ) -> Any:
        async def attempt() -> Any:
            response = await self._send(operation, path, params)
            if response.status_code >= 400:
                raise _status_error(operation, response)
            return response.json()

        try:
            payload = await self.retry_policy.run(attempt, operation=operation)
        except UpstreamError as exc:
            UPSTREAM_CALLS_TOTAL.labels(operation=operation, outcome="failure").inc()
            logger.error(
                "Upstream call failed",
                operation=operation,
                error_type=type(exc).__name__,
                error_code=exc.status_code,
                error_details=exc.message,
                error_retryable=exc.retryable,
            )
            raise
        except ValueError as exc:
            UPSTREAM_CALLS_TOTAL.labels(operation=operation, outcome="failure").inc()
            raise UpstreamError(f"Invalid JSON from {operation}: {exc}") from exc
        UPSTREAM_CALLS_TOTAL.labels(operation=operation, outcome="success").inc()
        return payload

    async def _send(
        self, operation: str, path: str, params: dict[str, Any] | None
    ) -> httpx.Response:
        try:
            return await self.client.get(path, params=params)
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"{operation} timed out", retryable=True) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{operation} failed: {exc}", retryable=True) from exc

    @staticmethod
    def _map(operation: str, mapper_fn: Any, payload: Any) -> Any:
        try:
            return mapper_fn(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise UpstreamError(
                f"Unexpected response shape from {operation}: {exc!r}"
            ) from exc


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


def _status_error(operation: str, response: httpx.Response) -> UpstreamError:
    status_code = response.status_code
    message = _error_message(response)
    if status_code in (403, 429) and response.headers.get("x-ratelimit-remaining") == "0":
        message = "GitHub API rate limit exceeded"
    return UpstreamError(
        f"{operation} returned {status_code}: {message}",
        status_code=status_code,
        retryable=status_code >= 500 or status_code == 429,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or "error"
