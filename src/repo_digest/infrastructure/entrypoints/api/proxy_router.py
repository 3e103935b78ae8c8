"""Read-only relay of the GitHub endpoints the digest pipeline needs.

A gateway bound to this prefix sees exactly what it would see talking to
api.github.com: same paths, same status codes, same JSON bodies.
"""

import urllib.parse
from collections.abc import AsyncIterator

import httpx
import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from repo_digest.infrastructure.configuration.main_settings import Settings
from repo_digest.infrastructure.drivers.github.clients.github_http_client import GitHubHttpClient
from repo_digest.infrastructure.entrypoints.api.digest_router import get_settings

logger = structlog.get_logger()
router = APIRouter(prefix="/api/github/proxy")

_RELAYED_HEADERS = ("x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset")


async def get_github_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[GitHubHttpClient]:
    async with GitHubHttpClient.for_github(settings) as client:
        yield client


async def _relay(client: GitHubHttpClient, path: str, request: Request) -> Response:
    params = dict(request.query_params)
    try:
        upstream = await client.get(path, params=params or None)
    except httpx.HTTPError as exc:
        logger.error(
            "Proxy upstream call failed",
            error_type=type(exc).__name__,
            error_details=str(exc),
            upstream_path=path,
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"message": "Failed to reach GitHub", "error": str(exc)},
        )
    headers = {name: upstream.headers[name] for name in _RELAYED_HEADERS if name in upstream.headers}
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
        headers=headers,
    )


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


@router.get("/repos/{owner}/{repo}")
async def proxy_repository(
    owner: str, repo: str, request: Request, client: GitHubHttpClient = Depends(get_github_client)
) -> Response:
    return await _relay(client, f"repos/{_quote(owner)}/{_quote(repo)}", request)


@router.get("/repos/{owner}/{repo}/git/trees/{branch:path}")
async def proxy_tree(
    owner: str,
    repo: str,
    branch: str,
    request: Request,
    client: GitHubHttpClient = Depends(get_github_client),
) -> Response:
    path = f"repos/{_quote(owner)}/{_quote(repo)}/git/trees/{urllib.parse.quote(branch)}"
    return await _relay(client, path, request)


@router.get("/repos/{owner}/{repo}/git/blobs/{sha}")
async def proxy_blob(
    owner: str,
    repo: str,
    sha: str,
    request: Request,
    client: GitHubHttpClient = Depends(get_github_client),
) -> Response:
    path = f"repos/{_quote(owner)}/{_quote(repo)}/git/blobs/{_quote(sha)}"
    return await _relay(client, path, request)


@router.get("/repos/{owner}/{repo}/contents/{file_path:path}")
async def proxy_contents(
    owner: str,
    repo: str,
    file_path: str,
    request: Request,
    client: GitHubHttpClient = Depends(get_github_client),
) -> Response:
    path = f"repos/{_quote(owner)}/{_quote(repo)}/contents/{urllib.parse.quote(file_path)}"
    return await _relay(client, path, request)


@router.get("/rate_limit")
async def proxy_rate_limit(
    request: Request, client: GitHubHttpClient = Depends(get_github_client)
) -> Response:
    return await _relay(client, "rate_limit", request)
