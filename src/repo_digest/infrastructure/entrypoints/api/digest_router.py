import time
from collections.abc import AsyncIterator
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request

from repo_digest.core.application.usecases.analyze_repository_usecase import (
    AnalyzeRepositoryUseCase,
)
from repo_digest.core.exceptions import DigestError
from repo_digest.infrastructure.configuration.main_settings import DigestMode, Settings
from repo_digest.infrastructure.entrypoints.api.dtos.analyze_request_dto import AnalyzeRequestDTO
from repo_digest.infrastructure.entrypoints.api.mappers.digest_response_mapper import (
    DigestResponseMapper,
)
from repo_digest.infrastructure.observability.metrics_service import (
    ANALYSES_TOTAL,
    ANALYSIS_DURATION_SECONDS,
    FILE_FETCH_FAILURES_TOTAL,
)
from repo_digest.infrastructure.resolution.container import build_analyze_usecase, build_gateway

logger = structlog.get_logger()
router = APIRouter(prefix="/api/github")

_MODE = DigestMode.BACKEND


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_usecase(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[AnalyzeRepositoryUseCase]:
    """Fresh gateway per request; its http client is closed once the response is built."""
    gateway = build_gateway(settings, _MODE)
    try:
        yield build_analyze_usecase(settings, _MODE, gateway)
    finally:
        await gateway.aclose()


@router.post("/analyze")
async def analyze_repository(
    payload: AnalyzeRequestDTO | None = None,
    owner: str = Query(default=""),
    repo: str = Query(default=""),
    usecase: AnalyzeRepositoryUseCase = Depends(get_usecase),
) -> dict[str, Any]:
    request_body = payload or AnalyzeRequestDTO()
    start = time.perf_counter()
    outcome = "success"
    try:
        digest = await usecase.analyze(
            owner,
            repo,
            exclude_patterns=request_body.exclude_patterns,
            max_file_size_kb=request_body.max_file_size_kb,
        )
    except DigestError as exc:
        outcome = type(exc).__name__
        raise
    except Exception:
        outcome = "failure"
        raise
    finally:
        ANALYSES_TOTAL.labels(mode=_MODE.value, outcome=outcome).inc()
        ANALYSIS_DURATION_SECONDS.labels(mode=_MODE.value).observe(time.perf_counter() - start)

    failures = sum(1 for result in digest.files if not result.ok)
    if failures:
        FILE_FETCH_FAILURES_TOTAL.inc(failures)
    return DigestResponseMapper.to_response(digest)
