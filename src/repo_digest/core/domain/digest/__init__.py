from repo_digest.core.domain.digest.digest import Digest, FileStats
from repo_digest.core.domain.digest.filter_config import (
    DEFAULT_MAX_FILE_SIZE_KB,
    FilterConfig,
    parse_exclude_patterns,
)
from repo_digest.core.domain.digest.repository_reference import RepositoryReference

__all__ = [
    "DEFAULT_MAX_FILE_SIZE_KB",
    "Digest",
    "FileStats",
    "FilterConfig",
    "RepositoryReference",
    "parse_exclude_patterns",
]
