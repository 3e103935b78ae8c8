from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class RepositoryMetadata:
    name: str
    description: str | None
    stars: int
    forks: int
    default_branch: str
    html_url: str
    language: str | None = None
    owner_avatar_url: str | None = None
