from typing import Any

import httpx

from repo_digest.infrastructure.configuration.main_settings import Settings
from repo_digest.infrastructure.observability.logger_factory_service import get_logger

logger = get_logger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"


class GitHubHttpClient:
    """Thin async wrapper over httpx bound to one base URL.

    The base URL is either the GitHub REST API or the backend's proxy
    prefix; both answer the same paths with the same JSON shapes.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        user_agent: str = "repo-digest",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._get_headers(user_agent),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def for_github(cls, settings: Settings, **kwargs: Any) -> "GitHubHttpClient":
        return cls(
            settings.github_api_base_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
            **kwargs,
        )

    @classmethod
    def for_backend_proxy(cls, settings: Settings, **kwargs: Any) -> "GitHubHttpClient":
        return cls(
            settings.backend_proxy_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
            **kwargs,
        )

    @staticmethod
    def _get_headers(user_agent: str) -> dict[str, str]:
        return {
            "Accept": GITHUB_MEDIA_TYPE,
            "User-Agent": user_agent,
        }

    async def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        return await self._client.get(f"/{path.lstrip('/')}", params=params)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubHttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
