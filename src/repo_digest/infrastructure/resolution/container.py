"""Functional DI container: builds fully-wired gateways and use cases.

Every builder returns fresh objects so concurrent analyses never share
an http client or any other mutable state.
"""

import httpx

from repo_digest.core.application.usecases.analyze_repository_usecase import (
    AnalyzeRepositoryUseCase,
)
from repo_digest.infrastructure.common.retry.retry_policy import RetryPolicy
from repo_digest.infrastructure.configuration.main_settings import DigestMode, Settings
from repo_digest.infrastructure.drivers.github.backend_digest_client import BackendDigestClient
from repo_digest.infrastructure.drivers.github.clients.github_http_client import GitHubHttpClient
from repo_digest.infrastructure.drivers.github.github_repository_gateway import (
    ContentSource,
    GitHubRepositoryGateway,
)


def build_gateway(
    settings: Settings,
    mode: DigestMode,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GitHubRepositoryGateway:
    """Gateway for the given mode.

    DIRECT reads file content by path, like a browser calling GitHub;
    PROXY and BACKEND read it by blob sha.
    """
    if mode == DigestMode.PROXY:
        client = GitHubHttpClient.for_backend_proxy(settings, transport=transport)
    else:
        client = GitHubHttpClient.for_github(settings, transport=transport)
    content_source = ContentSource.CONTENTS if mode == DigestMode.DIRECT else ContentSource.BLOB
    return GitHubRepositoryGateway(
        client,
        content_source=content_source,
        retry_policy=RetryPolicy(max_attempts=settings.upstream_max_attempts),
    )


def build_analyze_usecase(
    settings: Settings, mode: DigestMode, gateway: GitHubRepositoryGateway
) -> AnalyzeRepositoryUseCase:
    return AnalyzeRepositoryUseCase(
        gateway,
        max_files=settings.max_files_for(mode),
        rate_limit_timeout=settings.rate_limit_timeout_seconds,
    )


def build_backend_client(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> BackendDigestClient:
    return BackendDigestClient.from_settings(settings, transport=transport)
