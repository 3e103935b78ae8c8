import base64
import binascii
from typing import Any

from repo_digest.core.domain.repository import (
    BLOB_TYPE,
    FileEntry,
    RateLimitSnapshot,
    RepositoryMetadata,
    RepositoryTree,
)


class GitHubResponseMapper:
    """Maps GitHub REST JSON payloads into domain objects.

    Missing keys or wrong types surface as KeyError/TypeError/ValueError;
    the gateway turns those into UpstreamError.
    """

    @staticmethod
    def to_repository_metadata(payload: dict[str, Any]) -> RepositoryMetadata:
        owner = payload.get("owner") or {}
        return RepositoryMetadata(
            name=payload["name"],
            description=payload.get("description"),
            stars=int(payload.get("stargazers_count", 0)),
            forks=int(payload.get("forks_count", 0)),
            default_branch=payload["default_branch"],
            html_url=payload.get("html_url", ""),
            language=payload.get("language"),
            owner_avatar_url=owner.get("avatar_url"),
        )

    @staticmethod
    def to_tree(payload: dict[str, Any]) -> RepositoryTree:
        entries = tuple(
            FileEntry(path=item["path"], size=int(item.get("size", 0)), sha=item["sha"])
            for item in payload["tree"]
            if item.get("type") == BLOB_TYPE
        )
        return RepositoryTree(entries=entries, truncated=bool(payload.get("truncated", False)))

    @staticmethod
    def to_content_bytes(payload: dict[str, Any]) -> bytes:
        """Decode the base64 body of a blob or contents response."""
        encoding = payload.get("encoding", "base64")
        if encoding != "base64":
            raise ValueError(f"Unsupported content encoding '{encoding}'")
        content = payload["content"].replace("\n", "")
        try:
            return base64.b64decode(content, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 content: {exc}") from exc

    @staticmethod
    def to_rate_limit(payload: dict[str, Any]) -> RateLimitSnapshot:
        rate = payload["rate"]
        return RateLimitSnapshot(
            limit=int(rate["limit"]),
            remaining=int(rate["remaining"]),
            reset=int(rate["reset"]),
        )
