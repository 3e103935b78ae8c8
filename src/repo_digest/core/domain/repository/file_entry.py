from dataclasses import dataclass, field

BLOB_TYPE = "blob"


@dataclass(frozen=True)
class FileEntry:
    """A blob from a repository tree snapshot. Identity is the path."""

    path: str
    size: int
    sha: str
    type: str = BLOB_TYPE


@dataclass(frozen=True)
class RepositoryTree:
    """Recursive listing of a branch. Only blob entries are kept."""

    entries: tuple[FileEntry, ...] = field(default_factory=tuple)
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.entries)
