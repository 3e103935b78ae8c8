"""Digest pipeline: Metadata -> Tree -> Filter -> Structure -> Prioritize -> Content -> Rate limit -> Render."""

import asyncio
from collections.abc import Iterable

import structlog
from structlog.contextvars import bind_contextvars

from repo_digest.core.application.ports.repository_gateway_port import RepositoryGatewayPort
from repo_digest.core.application.services.digest_text_renderer import DigestTextRenderer
from repo_digest.core.application.services.directory_tree_builder import DirectoryTreeBuilder
from repo_digest.core.application.services.file_presentation import format_size, language_for
from repo_digest.core.application.services.file_prioritizer import FilePrioritizer
from repo_digest.core.application.services.pattern_matcher import PatternMatcher
from repo_digest.core.domain.digest import (
    DEFAULT_MAX_FILE_SIZE_KB,
    Digest,
    FileStats,
    FilterConfig,
    RepositoryReference,
)
from repo_digest.core.domain.repository import (
    ContentResult,
    DirectoryNode,
    FileContent,
    FileEntry,
    FileFetchFailure,
    RateLimitSnapshot,
    RepositoryMetadata,
    RepositoryTree,
)
from repo_digest.core.exceptions import DigestError, UpstreamError
from repo_digest.infrastructure.observability.tracing_setup import (
    annotate_current_span,
    trace_operation,
)

logger = structlog.get_logger()

RATE_LIMIT_TIMEOUT_SECONDS = 2.0


class AnalyzeRepositoryUseCase:
    """Builds a Digest for one public repository.

    ``max_files`` caps how many prioritized files get their content
    fetched. Direct-to-GitHub callers use a lower cap than the backend
    because unauthenticated rate limits are tight.

    The rate-limit read runs alongside the content fetches and gets at
    most ``rate_limit_timeout`` seconds before the 60/0/0 fallback is used.
    """

    def __init__(
        self,
        gateway: RepositoryGatewayPort,
        max_files: int,
        prioritizer: FilePrioritizer | None = None,
        tree_builder: DirectoryTreeBuilder | None = None,
        renderer: DigestTextRenderer | None = None,
        rate_limit_timeout: float = RATE_LIMIT_TIMEOUT_SECONDS,
    ) -> None:
        if max_files < 1:
            raise ValueError(f"max_files must be at least 1, got {max_files}")
        self._gateway = gateway
        self._max_files = max_files
        self._prioritizer = prioritizer or FilePrioritizer()
        self._tree_builder = tree_builder or DirectoryTreeBuilder()
        self._renderer = renderer or DigestTextRenderer()
        self._rate_limit_timeout = rate_limit_timeout

    @property
    def max_files(self) -> int:
        return self._max_files

    @property
    def rate_limit_timeout(self) -> float:
        return self._rate_limit_timeout

    @trace_operation("digest.analyze")
    async def analyze(
        self,
        owner: str,
        repo: str,
        exclude_patterns: Iterable[str] | str | None = None,
        max_file_size_kb: int = DEFAULT_MAX_FILE_SIZE_KB,
    ) -> Digest:
        reference = RepositoryReference(owner=owner or "", repo=repo or "")
        filters = FilterConfig.build(exclude_patterns, max_file_size_kb)
        bind_contextvars(repository=reference.full_name, event_type="digest.analyze")
        annotate_current_span(repository=reference.full_name, max_files=self._max_files)
        logger.info("Analysis started", max_files=self._max_files)
        try:
            metadata = await self._step_1_fetch_metadata(reference)
            tree = await self._step_2_fetch_tree(reference, metadata.default_branch)
        except DigestError:
            raise
        except Exception as exc:
            raise UpstreamError(
                f"Failed to analyze repository: {exc}", context={"repository": reference.full_name}
            ) from exc

        filtered = self._step_3_filter(tree, filters)
        structure = self._step_4_build_structure(filtered)
        selected = self._step_5_select(filtered)
        files, rate_limit = await asyncio.gather(
            self._step_6_fetch_contents(reference, selected),
            self._step_7_fetch_rate_limit(),
        )

        stats = FileStats(
            total_count=len(filtered),
            total_size=sum(entry.size for entry in filtered),
            filters=filters,
            truncated=tree.truncated,
        )
        digest = Digest(
            text=self._renderer.render(reference, metadata, stats, files),
            reference=reference,
            repository=metadata,
            file_stats=stats,
            directory_structure=structure,
            files=tuple(files),
            rate_limit=rate_limit,
        )
        annotate_current_span(filtered_count=len(filtered), fetched_count=len(files))
        logger.info(
            "Analysis completed",
            filtered_count=len(filtered),
            fetched_count=sum(1 for result in files if result.ok),
            failed_count=sum(1 for result in files if not result.ok),
        )
        return digest

    # ── Step Methods ─────────────────────────────────────────────

    async def _step_1_fetch_metadata(self, reference: RepositoryReference) -> RepositoryMetadata:
        metadata = await self._gateway.get_repository(reference.owner, reference.repo)
        logger.info("Repository metadata fetched", default_branch=metadata.default_branch)
        return metadata

    async def _step_2_fetch_tree(self, reference: RepositoryReference, branch: str) -> RepositoryTree:
        tree = await self._gateway.get_tree(reference.owner, reference.repo, branch)
        if tree.truncated:
            logger.warning("Repository tree is truncated; continuing with partial listing",
                           entry_count=len(tree))
        return tree

    @staticmethod
    def _step_3_filter(tree: RepositoryTree, filters: FilterConfig) -> list[FileEntry]:
        filtered = PatternMatcher(filters).filter(tree.entries)
        logger.info("Tree filtered", total=len(tree), kept=len(filtered))
        return filtered

    def _step_4_build_structure(self, filtered: list[FileEntry]) -> DirectoryNode:
        return self._tree_builder.build(filtered)

    def _step_5_select(self, filtered: list[FileEntry]) -> list[FileEntry]:
        return self._prioritizer.prioritize(filtered)[: self._max_files]

    async def _step_6_fetch_contents(
        self, reference: RepositoryReference, selected: list[FileEntry]
    ) -> list[ContentResult]:
        # gather() returns results in argument order, i.e. priority order.
        return list(await asyncio.gather(*(self._fetch_one(reference, entry) for entry in selected)))

    async def _fetch_one(self, reference: RepositoryReference, entry: FileEntry) -> ContentResult:
        size_label = format_size(entry.size)
        try:
            raw = await self._gateway.get_file_content(reference.owner, reference.repo, entry)
        except Exception as exc:
            logger.warning(
                "File content fetch failed",
                path=entry.path,
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            return FileFetchFailure(path=entry.path, error=str(exc), size_label=size_label)
        return FileContent(
            path=entry.path,
            content=raw.decode("utf-8", errors="replace"),
            language=language_for(entry.path),
            size_label=size_label,
        )

    async def _step_7_fetch_rate_limit(self) -> RateLimitSnapshot:
        try:
            return await asyncio.wait_for(self._gateway.get_rate_limit(), self._rate_limit_timeout)
        except Exception as exc:
            logger.warning(
                "Rate limit unavailable; using fallback",
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            return RateLimitSnapshot.unknown()
