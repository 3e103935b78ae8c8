from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DigestMode(StrEnum):
    """Where the digest is assembled and which transport reaches GitHub.

    DIRECT: in-process, straight to the GitHub API.
    PROXY: in-process, through the backend's proxy routes.
    BACKEND: assembled by the backend's analyze route.
    """

    DIRECT = "direct"
    PROXY = "proxy"
    BACKEND = "backend"


class Settings(BaseSettings):
    app_name: str = "Repo Digest"
    env: str = "local"
    log_level: str = "INFO"
    tracing_enabled: bool = Field(default=False, description="Export OpenTelemetry spans to stderr")

    # Server
    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=8000, ge=1, le=65535)

    # GitHub
    github_api_base_url: str = Field(default="https://api.github.com")
    user_agent: str = Field(default="repo-digest")
    request_timeout_seconds: float = Field(default=15.0, gt=0, le=120)
    upstream_max_attempts: int = Field(
        default=1, ge=1, le=5, description="Attempts for retryable upstream failures (1 = fail fast)"
    )
    rate_limit_timeout_seconds: float = Field(
        default=2.0, gt=0, le=120, description="Budget for the best-effort rate-limit read"
    )

    # Backend
    backend_base_url: str = Field(default="http://localhost:8000")
    proxy_prefix: str = Field(default="/api/github/proxy")

    # Digest
    backend_max_files: int = Field(default=5, ge=1, description="Content-fetch cap for the backend")
    direct_max_files: int = Field(default=3, ge=1, description="Content-fetch cap for direct calls")
    default_max_file_size_kb: int = Field(default=50, ge=0)

    model_config = SettingsConfigDict(env_prefix="REPO_DIGEST_", env_file=".env", extra="ignore")

    def max_files_for(self, mode: DigestMode) -> int:
        if mode == DigestMode.DIRECT:
            return self.direct_max_files
        return self.backend_max_files

    @property
    def backend_proxy_url(self) -> str:
        return f"{self.backend_base_url.rstrip('/')}{self.proxy_prefix}"
