"""CLI entrypoint: `repo-digest <github-url>`."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from repo_digest.core.domain.digest import RepositoryReference, parse_exclude_patterns
from repo_digest.core.domain.repository import DirectoryNode, render_tree
from repo_digest.core.exceptions import DigestError, NotFoundError
from repo_digest.infrastructure.configuration.main_settings import DigestMode, Settings
from repo_digest.infrastructure.entrypoints.api.mappers.digest_response_mapper import (
    DigestResponseMapper,
)
from repo_digest.infrastructure.observability.logger_factory_service import configure_logging
from repo_digest.infrastructure.resolution.container import (
    build_analyze_usecase,
    build_backend_client,
    build_gateway,
)


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-digest",
        description="Summarize a public GitHub repository: metadata, tree and key files.",
    )
    parser.add_argument("url", help="Repository URL, e.g. https://github.com/owner/repo")
    parser.add_argument(
        "--exclude",
        default="",
        help="Comma-separated exclude patterns, e.g. '*.md,tests/,LICENSE'.",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        default=settings.default_max_file_size_kb,
        help="Skip files larger than this many KB (default: %(default)s).",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in DigestMode],
        default=DigestMode.DIRECT.value,
        help="direct: call GitHub from here; proxy: call GitHub through the backend; "
        "backend: let the backend build the digest.",
    )
    parser.add_argument("--json", action="store_true", help="Print the full JSON response.")
    parser.add_argument("--tree", action="store_true", help="Print the filtered directory tree.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    return parser


async def _analyze_in_process(
    settings: Settings, mode: DigestMode, reference: RepositoryReference, patterns, max_size: int
) -> dict[str, Any]:
    gateway = build_gateway(settings, mode)
    try:
        usecase = build_analyze_usecase(settings, mode, gateway)
        digest = await usecase.analyze(reference.owner, reference.repo, patterns, max_size)
    finally:
        await gateway.aclose()
    return DigestResponseMapper.to_response(digest)


async def _analyze_via_backend(
    settings: Settings, reference: RepositoryReference, patterns, max_size: int
) -> dict[str, Any]:
    async with build_backend_client(settings) as client:
        return await client.analyze(reference.owner, reference.repo, patterns, max_size)


async def run(args: argparse.Namespace, settings: Settings) -> dict[str, Any]:
    reference = RepositoryReference.parse(args.url)
    patterns = parse_exclude_patterns(args.exclude)
    mode = DigestMode(args.mode)
    if mode == DigestMode.BACKEND:
        return await _analyze_via_backend(settings, reference, patterns, args.max_size)
    return await _analyze_in_process(settings, mode, reference, patterns, args.max_size)


def _print_result(response: dict[str, Any], args: argparse.Namespace) -> None:
    if args.json:
        print(json.dumps(response, indent=2))
    else:
        print(response["digest"])
    if args.tree:
        tree = DigestResponseMapper.tree_from_dict(response["structured"]["directoryStructure"])
        if isinstance(tree, DirectoryNode):
            print(render_tree(tree))
    rate = response.get("rateLimit") or {}
    print(
        f"GitHub API requests remaining: {rate.get('remaining', '?')}/{rate.get('limit', '?')}",
        file=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    settings = Settings()
    parser = _build_parser(settings)
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    try:
        response = asyncio.run(run(args, settings))
    except NotFoundError:
        parser.exit(
            1,
            "Repository not found. Check that the URL is correct and the repository is public.\n",
        )
    except DigestError as exc:
        parser.exit(1, f"repo-digest failed: {exc}\n")
    _print_result(response, args)


if __name__ == "__main__":
    main(sys.argv[1:])
