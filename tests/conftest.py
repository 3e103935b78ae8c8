import pytest

from repo_digest.core.domain.repository import (
    FileEntry,
    RateLimitSnapshot,
    RepositoryMetadata,
    RepositoryTree,
)
from repo_digest.infrastructure.configuration.main_settings import Settings

GITHUB_API = "https://api.github.com"


@pytest.fixture
def settings():
    return Settings(
        app_name="RepoDigestTest",
        env="test",
        log_level="WARNING",
        github_api_base_url=GITHUB_API,
        backend_base_url="http://backend.test",
        request_timeout_seconds=5,
        upstream_max_attempts=1,
        backend_max_files=5,
        direct_max_files=3,
    )


@pytest.fixture
def metadata():
    return RepositoryMetadata(
        name="hello",
        description="A test repository",
        stars=42,
        forks=7,
        default_branch="main",
        html_url="https://github.com/octo/hello",
        language="JavaScript",
        owner_avatar_url="https://avatars.example.com/octo.png",
    )


@pytest.fixture
def sample_tree():
    # README 1KB, big.bin 200KB, src/index.js 2KB
    return RepositoryTree(
        entries=(
            FileEntry(path="README.md", size=1024, sha="sha-readme"),
            FileEntry(path="big.bin", size=200 * 1024, sha="sha-big"),
            FileEntry(path="src/index.js", size=2048, sha="sha-index"),
        )
    )


@pytest.fixture
def rate_limit():
    return RateLimitSnapshot(limit=5000, remaining=4990, reset=1700000000)
