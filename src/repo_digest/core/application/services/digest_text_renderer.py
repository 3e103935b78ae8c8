from collections.abc import Sequence

from repo_digest.core.domain.digest import FileStats, RepositoryReference
from repo_digest.core.domain.repository import ContentResult, FileFetchFailure, RepositoryMetadata

TRUNCATION_NOTICE = "Tree truncated by GitHub; this listing is partial."
EMPTY_SELECTION_NOTICE = "No files match the current filters."


class DigestTextRenderer:
    """Renders the flat, markdown-like text digest."""

    def render(
        self,
        reference: RepositoryReference,
        repository: RepositoryMetadata,
        stats: FileStats,
        files: Sequence[ContentResult],
    ) -> str:
        sections = [
            f"# Repository Analysis for {reference.full_name}\n\n",
            self._overview(repository),
            self._structure(stats),
            self._files(stats, files),
        ]
        return "".join(sections)

    @staticmethod
    def _overview(repository: RepositoryMetadata) -> str:
        return (
            "## Repository Overview\n"
            f"- Name: {repository.name}\n"
            f"- Description: {repository.description or 'No description'}\n"
            f"- Stars: {repository.stars}\n"
            f"- Forks: {repository.forks}\n"
            f"- Default Branch: {repository.default_branch}\n\n"
        )

    @staticmethod
    def _structure(stats: FileStats) -> str:
        text = f"## File Structure\nTotal files: {stats.total_count} (after filtering)\n"
        if stats.truncated:
            text += f"{TRUNCATION_NOTICE}\n"
        return text + "\n"

    def _files(self, stats: FileStats, files: Sequence[ContentResult]) -> str:
        patterns = ", ".join(stats.filters.exclude_patterns) or "none"
        text = f"## Files (Max {stats.filters.max_file_size_kb}KB, excluding: {patterns})\n\n"
        if not files:
            return text + f"{EMPTY_SELECTION_NOTICE}\n\n"

        text += f"Showing content for first {len(files)} files:\n\n"
        return text + "".join(self._file_block(result) for result in files)

    @staticmethod
    def _file_block(result: ContentResult) -> str:
        if isinstance(result, FileFetchFailure):
            return f"### {result.path}\nError fetching content: {result.error}\n\n"
        return f"### {result.path}\n```\n{result.content}\n```\n\n"
