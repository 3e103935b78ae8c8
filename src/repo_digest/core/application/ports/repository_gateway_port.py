from abc import ABC, abstractmethod

from repo_digest.core.domain.repository import (
    FileEntry,
    RateLimitSnapshot,
    RepositoryMetadata,
    RepositoryTree,
)


class RepositoryGatewayPort(ABC):
    """Read-only access to a remote repository host."""

    @abstractmethod
    async def get_repository(self, owner: str, repo: str) -> RepositoryMetadata:
        """Repository metadata. Raises NotFoundError on 404, UpstreamError otherwise."""
        pass

    @abstractmethod
    async def get_tree(self, owner: str, repo: str, branch: str) -> RepositoryTree:
        """Recursive blob listing of a branch, possibly truncated by the host."""
        pass

    @abstractmethod
    async def get_file_content(self, owner: str, repo: str, entry: FileEntry) -> bytes:
        """Raw decoded bytes of one file, addressed by path or sha. Raises PerFileFetchError."""
        pass

    @abstractmethod
    async def get_rate_limit(self) -> RateLimitSnapshot:
        pass
