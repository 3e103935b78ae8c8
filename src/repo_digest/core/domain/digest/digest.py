from dataclasses import dataclass

from repo_digest.core.domain.digest.filter_config import FilterConfig
from repo_digest.core.domain.digest.repository_reference import RepositoryReference
from repo_digest.core.domain.repository import (
    ContentResult,
    DirectoryNode,
    RateLimitSnapshot,
    RepositoryMetadata,
)


@dataclass(frozen=True, kw_only=True)
class FileStats:
    total_count: int
    total_size: int
    filters: FilterConfig
    truncated: bool = False


@dataclass(frozen=True, kw_only=True)
class Digest:
    """Result of one analysis call. Never mutated after it is returned."""

    text: str
    reference: RepositoryReference
    repository: RepositoryMetadata
    file_stats: FileStats
    directory_structure: DirectoryNode
    files: tuple[ContentResult, ...]
    rate_limit: RateLimitSnapshot
