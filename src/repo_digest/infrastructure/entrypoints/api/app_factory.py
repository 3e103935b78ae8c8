from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from repo_digest.core.exceptions import (
    DigestError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from repo_digest.infrastructure.configuration.main_settings import Settings
from repo_digest.infrastructure.entrypoints.api.dtos.analyze_request_dto import ErrorResponseDTO
from repo_digest.infrastructure.entrypoints.api.digest_router import router as digest_router
from repo_digest.infrastructure.entrypoints.api.health_router import router as health_router
from repo_digest.infrastructure.entrypoints.api.proxy_router import router as proxy_router
from repo_digest.infrastructure.observability.logger_factory_service import (
    configure_logging,
    get_logger,
)
from repo_digest.infrastructure.observability.logging import CorrelationMiddleware
from repo_digest.infrastructure.observability.tracing_setup import configure_tracing

logger = get_logger(__name__)

_STATUS_BY_ERROR: dict[type[DigestError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
}


def _status_for(exc: DigestError) -> int:
    for error_type, http_status in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return http_status
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(settings: Settings) -> FastAPI:
    configure_logging(settings.log_level)
    if settings.tracing_enabled:
        configure_tracing(service_name="repo-digest", environment=settings.env)
    logger.info(
        "Boot diagnostics",
        app_name=settings.app_name,
        env=settings.env,
        github_api_base_url=settings.github_api_base_url,
        backend_max_files=settings.backend_max_files,
    )

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error("Request validation failed", url=str(request.url), errors=exc.errors())
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"message": "Invalid request body", "detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(DigestError)
    async def digest_exception_handler(request: Request, exc: DigestError):
        http_status = _status_for(exc)
        log = logger.warning if http_status < 500 else logger.error
        log(
            "Error analyzing repository",
            error_type=type(exc).__name__,
            error_details=str(exc),
            error_retryable=getattr(exc, "retryable", False),
        )
        message = exc.message
        if isinstance(exc, UpstreamError):
            message = "Failed to analyze repository"
        return JSONResponse(
            status_code=http_status,
            content=ErrorResponseDTO(message=message, error=str(exc)).model_dump(),
        )

    app.add_middleware(CorrelationMiddleware)
    app.include_router(health_router)
    app.include_router(digest_router)
    app.include_router(proxy_router)
    app.mount("/metrics", make_asgi_app())

    return app
