from typing import Any

from repo_digest.core.application.services.file_presentation import format_size
from repo_digest.core.domain.digest import Digest, FileStats, RepositoryReference
from repo_digest.core.domain.repository import (
    ContentResult,
    DirectoryNode,
    FileFetchFailure,
    FileNode,
    RateLimitSnapshot,
    RepositoryMetadata,
    TreeNode,
)


class DigestResponseMapper:
    """Digest -> camelCase JSON body shared by the backend and the CLI."""

    @classmethod
    def to_response(cls, digest: Digest) -> dict[str, Any]:
        return {
            "digest": digest.text,
            "structured": {
                "repository": cls.repository_to_dict(digest.reference, digest.repository),
                "fileStats": cls.file_stats_to_dict(digest.file_stats),
                "directoryStructure": cls.tree_to_dict(digest.directory_structure),
                "files": [cls.file_to_dict(result) for result in digest.files],
            },
            "rateLimit": cls.rate_limit_to_dict(digest.rate_limit),
        }

    @staticmethod
    def repository_to_dict(
        reference: RepositoryReference, repository: RepositoryMetadata
    ) -> dict[str, Any]:
        return {
            "name": repository.name,
            "fullName": reference.full_name,
            "description": repository.description or "No description provided",
            "url": repository.html_url,
            "stars": repository.stars,
            "forks": repository.forks,
            "defaultBranch": repository.default_branch,
            "language": repository.language,
            "avatar": repository.owner_avatar_url,
        }

    @staticmethod
    def file_stats_to_dict(stats: FileStats) -> dict[str, Any]:
        patterns = list(stats.filters.exclude_patterns)
        return {
            "totalCount": stats.total_count,
            "totalSize": format_size(stats.total_size),
            "maxFileSize": f"{stats.filters.max_file_size_kb}KB",
            "excludePatterns": patterns or ["none"],
            "truncated": stats.truncated,
        }

    @classmethod
    def tree_to_dict(cls, node: TreeNode) -> dict[str, Any]:
        if isinstance(node, DirectoryNode):
            return {
                "name": node.name,
                "type": node.type,
                "children": {name: cls.tree_to_dict(child) for name, child in node.children.items()},
            }
        return {
            "name": node.name,
            "type": node.type,
            "size": node.size,
            "path": node.path,
            "sha": node.sha,
        }

    @classmethod
    def tree_from_dict(cls, payload: dict[str, Any]) -> TreeNode:
        """Inverse of tree_to_dict, for callers that only have the JSON body."""
        if payload.get("type") == "file":
            return FileNode(
                name=payload["name"],
                size=int(payload["size"]),
                path=payload["path"],
                sha=payload["sha"],
            )
        children = payload.get("children") or {}
        return DirectoryNode(
            name=payload.get("name", ""),
            children={name: cls.tree_from_dict(child) for name, child in children.items()},
        )

    @staticmethod
    def file_to_dict(result: ContentResult) -> dict[str, Any]:
        if isinstance(result, FileFetchFailure):
            return {"path": result.path, "error": result.error, "size": result.size_label}
        return {
            "path": result.path,
            "content": result.content,
            "language": result.language,
            "size": result.size_label,
        }

    @staticmethod
    def rate_limit_to_dict(rate_limit: RateLimitSnapshot) -> dict[str, int]:
        return {
            "limit": rate_limit.limit,
            "remaining": rate_limit.remaining,
            "reset": rate_limit.reset,
        }
