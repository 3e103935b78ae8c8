import re
from collections.abc import Sequence

from repo_digest.core.domain.repository import FileEntry

HIGH_PRIORITY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"readme\.md"),
    re.compile(r"index\.(html|js|ts|jsx|tsx)$"),
    re.compile(r"package\.json$"),
    re.compile(r"main\.(js|ts|py|go|java)$"),
    re.compile(r"app\.(js|ts|py|go|java|jsx|tsx)$"),
)


def is_high_priority(path: str) -> bool:
    lowered = path.lower()
    return any(pattern.search(lowered) for pattern in HIGH_PRIORITY_PATTERNS)


class FilePrioritizer:
    """Orders files so likely entry points and documentation come first."""

    def prioritize(self, files: Sequence[FileEntry]) -> list[FileEntry]:
        # sorted() is stable, so equal keys keep their original relative order.
        return sorted(files, key=lambda entry: (not is_high_priority(entry.path), len(entry.path)))
