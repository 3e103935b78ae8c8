from collections.abc import Sequence
from typing import Any

import httpx

from repo_digest.core.exceptions import NotFoundError, UpstreamError, ValidationError
from repo_digest.infrastructure.configuration.main_settings import Settings
from repo_digest.infrastructure.observability.logger_factory_service import get_logger

logger = get_logger(__name__)

ANALYZE_PATH = "/api/github/analyze"


class BackendDigestClient:
    """Asks the backend to assemble the digest and returns its JSON response."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "BackendDigestClient":
        # The backend performs several sequential upstream calls per request.
        return cls(settings.backend_base_url, timeout=settings.request_timeout_seconds * 4, **kwargs)

    async def analyze(
        self,
        owner: str,
        repo: str,
        exclude_patterns: Sequence[str] = (),
        max_file_size_kb: int = 50,
    ) -> dict[str, Any]:
        payload = {"excludePatterns": list(exclude_patterns), "maxFileSizeKB": max_file_size_kb}
        logger.info("Requesting digest from backend", repository=f"{owner}/{repo}")
        try:
            response = await self._client.post(
                ANALYZE_PATH, params={"owner": owner, "repo": repo}, json=payload
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Failed to connect to server at {self.base_url}: {exc}", retryable=True
            ) from exc

        if response.is_success:
            return response.json()
        raise _to_error(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendDigestClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _to_error(response: httpx.Response) -> Exception:
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("message") if isinstance(body, dict) else None
    message = message or "Failed to analyze repository"
    if response.status_code == 404:
        return NotFoundError(message)
    if response.status_code in (400, 422):
        return ValidationError(message, context={"detail": body})
    return UpstreamError(message, status_code=response.status_code)
