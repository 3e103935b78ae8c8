"""ASGI entry point. ``uvicorn repo_digest.main:app`` or ``repo-digest-server``."""

import uvicorn

from repo_digest.infrastructure.configuration.main_settings import Settings
from repo_digest.infrastructure.entrypoints.api.app_factory import create_app

settings = Settings()
app = create_app(settings)


def dev():
    """Serve the backend (analyze, proxy, health, metrics), reloading on change when env is local."""
    uvicorn.run(
        "repo_digest.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.env == "local",
        log_level=settings.log_level.lower(),
    )
