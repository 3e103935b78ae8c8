import re
from dataclasses import dataclass

from repo_digest.core.exceptions import ValidationError

_GITHUB_URL = re.compile(r"github\.com/([^/?#]+)/([^/?#]+)")
_MIRROR_HOST = "gitingest.com"


@dataclass(frozen=True)
class RepositoryReference:
    owner: str
    repo: str

    def __post_init__(self):
        if not self.owner.strip() or not self.repo.strip():
            raise ValidationError("Owner and repo are required")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, url: str) -> "RepositoryReference":
        """Extract owner/repo from a github.com (or gitingest.com) repository URL."""
        candidate = (url or "").strip().replace(_MIRROR_HOST, "github.com")
        match = _GITHUB_URL.search(candidate)
        if not match:
            raise ValidationError(
                "Invalid GitHub repository URL. "
                "Format should be: https://github.com/username/repository",
                context={"url": url},
            )
        owner, repo = match.group(1), match.group(2)
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        return cls(owner=owner, repo=repo)
