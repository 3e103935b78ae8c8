import pytest
from pydantic import ValidationError as SettingsValidationError

from repo_digest.infrastructure.configuration.main_settings import DigestMode, Settings
from repo_digest.infrastructure.drivers.github.github_repository_gateway import ContentSource
from repo_digest.infrastructure.resolution.container import (
    build_analyze_usecase,
    build_backend_client,
    build_gateway,
)


def test_defaults_need_no_environment():
    settings = Settings(_env_file=None)

    assert settings.github_api_base_url == "https://api.github.com"
    assert settings.backend_max_files == 5
    assert settings.direct_max_files == 3
    assert settings.default_max_file_size_kb == 50
    assert settings.request_timeout_seconds == 15.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REPO_DIGEST_BACKEND_MAX_FILES", "8")
    monkeypatch.setenv("REPO_DIGEST_REQUEST_TIMEOUT_SECONDS", "30")

    settings = Settings(_env_file=None)

    assert settings.backend_max_files == 8
    assert settings.request_timeout_seconds == 30.0


@pytest.mark.parametrize("timeout", [0, -1, 121])
def test_timeout_bounds(timeout):
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None, request_timeout_seconds=timeout)


def test_max_files_per_mode(settings):
    assert settings.max_files_for(DigestMode.DIRECT) == 3
    assert settings.max_files_for(DigestMode.PROXY) == 5
    assert settings.max_files_for(DigestMode.BACKEND) == 5


def test_backend_proxy_url():
    settings = Settings(_env_file=None, backend_base_url="http://backend.test/")

    assert settings.backend_proxy_url == "http://backend.test/api/github/proxy"


@pytest.mark.parametrize(
    "mode, base_url, content_source",
    [
        (DigestMode.DIRECT, "https://api.github.com", ContentSource.CONTENTS),
        (DigestMode.PROXY, "http://backend.test/api/github/proxy", ContentSource.BLOB),
        (DigestMode.BACKEND, "https://api.github.com", ContentSource.BLOB),
    ],
)
def test_build_gateway_per_mode(settings, mode, base_url, content_source):
    gateway = build_gateway(settings, mode)

    assert gateway.client.base_url == base_url
    assert gateway.content_source == content_source
    assert gateway.retry_policy.max_attempts == settings.upstream_max_attempts


def test_build_analyze_usecase_uses_mode_cap(settings):
    gateway = build_gateway(settings, DigestMode.DIRECT)

    assert build_analyze_usecase(settings, DigestMode.DIRECT, gateway).max_files == 3
    assert build_analyze_usecase(settings, DigestMode.BACKEND, gateway).max_files == 5
    assert build_analyze_usecase(settings, DigestMode.BACKEND, gateway).rate_limit_timeout == 2.0


def test_build_backend_client(settings):
    client = build_backend_client(settings)

    assert client.base_url == "http://backend.test"
