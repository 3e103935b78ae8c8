"""Exclude-pattern and size filtering of tree entries.

Patterns are matched literally, not as globs:

* ``*.ext``  -- the path ends with ``.ext``
* ``dir/``   -- the path starts with ``dir/`` or contains ``/dir/``
* anything else -- the path equals the pattern or contains ``/pattern``

The leading slash in the containment checks anchors a pattern to a path
segment boundary, so ``test`` drops ``foo/test/bar.js`` but keeps
``foo/mytest``.
"""

from collections.abc import Iterable, Sequence

from repo_digest.core.domain.digest import FilterConfig
from repo_digest.core.domain.repository import FileEntry

EXTENSION_PREFIX = "*."
DIRECTORY_SUFFIX = "/"


def matches_pattern(path: str, pattern: str) -> bool:
    if pattern.startswith(EXTENSION_PREFIX):
        return path.endswith("." + pattern[len(EXTENSION_PREFIX):])
    if pattern.endswith(DIRECTORY_SUFFIX):
        return path.startswith(pattern) or ("/" + pattern) in path
    return path == pattern or ("/" + pattern) in path


def is_excluded(path: str, patterns: Sequence[str]) -> bool:
    return any(matches_pattern(path, pattern) for pattern in patterns)


def exceeds_size(entry: FileEntry, max_file_size_bytes: int) -> bool:
    # Strictly greater: a file of exactly the limit is kept.
    return entry.size > max_file_size_bytes


class PatternMatcher:
    def __init__(self, config: FilterConfig):
        self.config = config

    def is_excluded(self, path: str) -> bool:
        return is_excluded(path, self.config.exclude_patterns)

    def accepts(self, entry: FileEntry) -> bool:
        """True when the entry passes both the size and the pattern filter."""
        if exceeds_size(entry, self.config.max_file_size_bytes):
            return False
        return not self.is_excluded(entry.path)

    def filter(self, entries: Iterable[FileEntry]) -> list[FileEntry]:
        return [entry for entry in entries if self.accepts(entry)]
