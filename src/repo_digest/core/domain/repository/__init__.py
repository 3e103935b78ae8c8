from repo_digest.core.domain.repository.content_result import (
    ContentResult,
    FileContent,
    FileFetchFailure,
)
from repo_digest.core.domain.repository.file_entry import BLOB_TYPE, FileEntry, RepositoryTree
from repo_digest.core.domain.repository.rate_limit_snapshot import RateLimitSnapshot
from repo_digest.core.domain.repository.repository_metadata import RepositoryMetadata
from repo_digest.core.domain.repository.tree_node import (
    DirectoryNode,
    FileNode,
    TreeNode,
    render_tree,
)

__all__ = [
    "BLOB_TYPE",
    "ContentResult",
    "DirectoryNode",
    "FileContent",
    "FileEntry",
    "FileFetchFailure",
    "FileNode",
    "RateLimitSnapshot",
    "RepositoryMetadata",
    "RepositoryTree",
    "TreeNode",
    "render_tree",
]
