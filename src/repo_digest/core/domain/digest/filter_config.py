from collections.abc import Iterable
from dataclasses import dataclass, field

from repo_digest.core.exceptions import ValidationError

DEFAULT_MAX_FILE_SIZE_KB = 50


def parse_exclude_patterns(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated pattern string, trimming and dropping empty tokens."""
    if not raw:
        return ()
    return tuple(token.strip() for token in raw.split(",") if token.strip())


@dataclass(frozen=True)
class FilterConfig:
    """Per-request filter settings. Patterns keep the caller's order."""

    exclude_patterns: tuple[str, ...] = field(default_factory=tuple)
    max_file_size_kb: int = DEFAULT_MAX_FILE_SIZE_KB

    def __post_init__(self):
        if self.max_file_size_kb < 0:
            raise ValidationError(
                f"maxFileSizeKB must be zero or positive, got {self.max_file_size_kb}"
            )
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))

    @classmethod
    def build(cls, patterns: Iterable[str] | str | None, max_file_size_kb: int) -> "FilterConfig":
        if isinstance(patterns, str):
            return cls(parse_exclude_patterns(patterns), max_file_size_kb)
        return cls(tuple(patterns or ()), max_file_size_kb)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_kb * 1024
