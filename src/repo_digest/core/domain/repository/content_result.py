"""Outcome of fetching one prioritized file: decoded text or an inline error."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class FileContent:
    path: str
    content: str
    language: str
    size_label: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, kw_only=True)
class FileFetchFailure:
    path: str
    error: str
    size_label: str

    @property
    def ok(self) -> bool:
        return False


ContentResult = FileContent | FileFetchFailure
