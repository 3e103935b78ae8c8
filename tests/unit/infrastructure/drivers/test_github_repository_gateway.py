import httpx
import pytest
import respx
from httpx import Response

from github_payloads import (
    github_blob_payload,
    github_rate_limit_payload,
    github_repo_payload,
    github_tree_payload,
)
from repo_digest.core.application.usecases.analyze_repository_usecase import (
    AnalyzeRepositoryUseCase,
)
from repo_digest.core.domain.repository import (
    FileContent,
    FileEntry,
    FileFetchFailure,
    RateLimitSnapshot,
)
from repo_digest.core.exceptions import NotFoundError, PerFileFetchError, UpstreamError
from repo_digest.infrastructure.common.retry.retry_policy import RetryPolicy
from repo_digest.infrastructure.drivers.github.clients.github_http_client import GitHubHttpClient
from repo_digest.infrastructure.drivers.github.github_repository_gateway import (
    ContentSource,
    GitHubRepositoryGateway,
)

API = "https://api.github.com"


@pytest.fixture
def gateway(settings):
    return GitHubRepositoryGateway(GitHubHttpClient.for_github(settings))


@pytest.mark.asyncio
@respx.mock
async def test_get_repository_maps_metadata(gateway):
    route = respx.get(f"{API}/repos/octo/hello").mock(
        return_value=Response(200, json=github_repo_payload())
    )

    metadata = await gateway.get_repository("octo", "hello")

    assert metadata.name == "hello"
    assert metadata.default_branch == "main"
    assert metadata.stars == 42
    assert metadata.forks == 7
    assert metadata.owner_avatar_url == "https://avatars.example.com/octo.png"
    request = route.calls.last.request
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert request.headers["User-Agent"] == "repo-digest"


@pytest.mark.asyncio
@respx.mock
async def test_get_repository_404_is_not_found(gateway):
    respx.get(f"{API}/repos/octo/missing").mock(
        return_value=Response(404, json={"message": "Not Found"})
    )

    with pytest.raises(NotFoundError, match="Repository not found"):
        await gateway.get_repository("octo", "missing")


@pytest.mark.asyncio
@respx.mock
async def test_get_repository_500_is_upstream_error(gateway):
    respx.get(f"{API}/repos/octo/hello").mock(
        return_value=Response(500, json={"message": "Server Error"})
    )

    with pytest.raises(UpstreamError) as exc:
        await gateway.get_repository("octo", "hello")

    assert not isinstance(exc.value, NotFoundError)
    assert exc.value.status_code == 500
    assert exc.value.retryable is True


@pytest.mark.asyncio
@respx.mock
async def test_rate_limited_response_is_named(gateway):
    respx.get(f"{API}/repos/octo/hello").mock(
        return_value=Response(
            403,
            json={"message": "API rate limit exceeded for 1.2.3.4."},
            headers={"x-ratelimit-remaining": "0"},
        )
    )

    with pytest.raises(UpstreamError, match="GitHub API rate limit exceeded"):
        await gateway.get_repository("octo", "hello")


@pytest.mark.asyncio
@respx.mock
async def test_timeout_is_upstream_error(gateway):
    respx.get(f"{API}/repos/octo/hello").mock(side_effect=httpx.ConnectTimeout("timed out"))

    with pytest.raises(UpstreamError, match="get_repository timed out"):
        await gateway.get_repository("octo", "hello")


@pytest.mark.asyncio
@respx.mock
async def test_tree_timeout_is_upstream_error(gateway):
    respx.get(f"{API}/repos/octo/hello/git/trees/main").mock(
        side_effect=httpx.ReadTimeout("timed out")
    )

    with pytest.raises(UpstreamError, match="Failed to get repository files: get_tree timed out"):
        await gateway.get_tree("octo", "hello", "main")


@pytest.mark.asyncio
@respx.mock
async def test_content_timeout_is_per_file_error(gateway):
    respx.get(f"{API}/repos/octo/hello/git/blobs/b1").mock(side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(PerFileFetchError, match="get_file_content timed out") as exc:
        await gateway.get_file_content("octo", "hello", FileEntry(path="a.js", size=1, sha="b1"))

    assert exc.value.path == "a.js"

@pytest.mark.asyncio
@respx.mock
async def test_unexpected_shape_is_upstream_error(gateway):
    respx.get(f"{API}/repos/octo/hello").mock(return_value=Response(200, json={"id": 1}))

    with pytest.raises(UpstreamError, match="Unexpected response shape"):
        await gateway.get_repository("octo", "hello")


@pytest.mark.asyncio
@respx.mock
async def test_get_tree_keeps_only_blobs(gateway):
    route = respx.get(f"{API}/repos/octo/hello/git/trees/main").mock(
        return_value=Response(
            200,
            json=github_tree_payload(
                [
                    ("src", "tree", 0, "t1"),
                    ("src/index.js", "blob", 2048, "b1"),
                    ("README.md", "blob", 1024, "b2"),
                    ("vendor/lib", "commit", 0, "c1"),
                ],
                truncated=True,
            ),
        )
    )

    tree = await gateway.get_tree("octo", "hello", "main")

    assert [entry.path for entry in tree.entries] == ["src/index.js", "README.md"]
    assert tree.entries[0] == FileEntry(path="src/index.js", size=2048, sha="b1")
    assert tree.truncated is True
    assert route.calls.last.request.url.params["recursive"] == "1"


@pytest.mark.asyncio
@respx.mock
async def test_get_tree_failure_is_wrapped(gateway):
    respx.get(f"{API}/repos/octo/hello/git/trees/main").mock(
        return_value=Response(409, json={"message": "Git Repository is empty."})
    )

    with pytest.raises(UpstreamError, match="Failed to get repository files") as exc:
        await gateway.get_tree("octo", "hello", "main")

    assert exc.value.status_code == 409


@pytest.mark.asyncio
@respx.mock
async def test_get_file_content_by_blob_sha(gateway):
    respx.get(f"{API}/repos/octo/hello/git/blobs/b1").mock(
        return_value=Response(200, json=github_blob_payload("console.log('hi');\n" * 10))
    )

    raw = await gateway.get_file_content(
        "octo", "hello", FileEntry(path="src/index.js", size=200, sha="b1")
    )

    assert raw == ("console.log('hi');\n" * 10).encode()


@pytest.mark.asyncio
@respx.mock
async def test_get_file_content_by_path(settings):
    gateway = GitHubRepositoryGateway(
        GitHubHttpClient.for_github(settings), content_source=ContentSource.CONTENTS
    )
    respx.get(f"{API}/repos/octo/hello/contents/docs/intro%20page.md").mock(
        return_value=Response(200, json=github_blob_payload("# Intro"))
    )

    raw = await gateway.get_file_content(
        "octo", "hello", FileEntry(path="docs/intro page.md", size=7, sha="x")
    )

    assert raw == b"# Intro"


@pytest.mark.asyncio
@respx.mock
async def test_get_file_content_failure_is_per_file_error(gateway):
    respx.get(f"{API}/repos/octo/hello/git/blobs/b1").mock(return_value=Response(500))

    with pytest.raises(PerFileFetchError) as exc:
        await gateway.get_file_content("octo", "hello", FileEntry(path="a.js", size=1, sha="b1"))

    assert exc.value.path == "a.js"
    assert exc.value.message.startswith("Failed to get file content:")


@pytest.mark.asyncio
@respx.mock
async def test_get_file_content_rejects_bad_base64(gateway):
    respx.get(f"{API}/repos/octo/hello/git/blobs/b1").mock(
        return_value=Response(200, json={"content": "not base64!!", "encoding": "base64"})
    )

    with pytest.raises(PerFileFetchError):
        await gateway.get_file_content("octo", "hello", FileEntry(path="a.js", size=1, sha="b1"))


@pytest.mark.asyncio
@respx.mock
async def test_get_rate_limit(gateway):
    respx.get(f"{API}/rate_limit").mock(
        return_value=Response(200, json=github_rate_limit_payload(60, 57, 1700000123))
    )

    assert await gateway.get_rate_limit() == RateLimitSnapshot(
        limit=60, remaining=57, reset=1700000123
    )


@pytest.mark.asyncio
@respx.mock
async def test_retryable_failures_are_retried(settings):
    gateway = GitHubRepositoryGateway(
        GitHubHttpClient.for_github(settings),
        retry_policy=RetryPolicy(max_attempts=3, initial_wait=0, max_wait=0),
    )
    route = respx.get(f"{API}/repos/octo/hello").mock(
        side_effect=[Response(502), Response(503), Response(200, json=github_repo_payload())]
    )

    metadata = await gateway.get_repository("octo", "hello")

    assert metadata.name == "hello"
    assert route.call_count == 3


@pytest.mark.asyncio
@respx.mock
async def test_client_errors_are_not_retried(settings):
    gateway = GitHubRepositoryGateway(
        GitHubHttpClient.for_github(settings),
        retry_policy=RetryPolicy(max_attempts=3, initial_wait=0, max_wait=0),
    )
    route = respx.get(f"{API}/repos/octo/missing").mock(return_value=Response(404))

    with pytest.raises(NotFoundError):
        await gateway.get_repository("octo", "missing")

    assert route.call_count == 1


def _mock_repository_with_two_files():
    respx.get(f"{API}/repos/octo/hello").mock(return_value=Response(200, json=github_repo_payload()))
    respx.get(f"{API}/repos/octo/hello/git/trees/main").mock(
        return_value=Response(
            200,
            json=github_tree_payload(
                [("README.md", "blob", 10, "sha-readme"), ("lib.js", "blob", 10, "sha-lib")]
            ),
        )
    )
    respx.get(f"{API}/rate_limit").mock(
        return_value=Response(200, json=github_rate_limit_payload(60, 58, 1700000000))
    )


@pytest.mark.asyncio
@respx.mock
async def test_content_timeout_is_recorded_inline_by_analyze(gateway):
    _mock_repository_with_two_files()
    respx.get(f"{API}/repos/octo/hello/git/blobs/sha-readme").mock(
        side_effect=httpx.ReadTimeout("timed out")
    )
    respx.get(f"{API}/repos/octo/hello/git/blobs/sha-lib").mock(
        return_value=Response(200, json=github_blob_payload("export {};"))
    )

    digest = await AnalyzeRepositoryUseCase(gateway, max_files=5).analyze("octo", "hello")

    readme, lib = digest.files
    assert isinstance(readme, FileFetchFailure)
    assert readme.path == "README.md"
    assert "timed out" in readme.error
    assert isinstance(lib, FileContent)
    assert lib.content == "export {};"
    assert digest.rate_limit == RateLimitSnapshot(limit=60, remaining=58, reset=1700000000)


@pytest.mark.asyncio
@respx.mock
async def test_tree_timeout_aborts_analyze(gateway):
    respx.get(f"{API}/repos/octo/hello").mock(return_value=Response(200, json=github_repo_payload()))
    respx.get(f"{API}/repos/octo/hello/git/trees/main").mock(
        side_effect=httpx.ReadTimeout("timed out")
    )

    with pytest.raises(UpstreamError, match="get_tree timed out"):
        await AnalyzeRepositoryUseCase(gateway, max_files=5).analyze("octo", "hello")
