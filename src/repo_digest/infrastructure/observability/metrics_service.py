"""Prometheus metrics declarations.

All metrics are declared statically at module level.
Labels use ONLY static enumerations, never repository names or paths.
"""

from prometheus_client import Counter, Histogram

# ── Analysis-level metrics ─────────────────────────────────────────

ANALYSES_TOTAL = Counter(
    "repo_digest_analyses_total",
    "Total completed analyses",
    ["mode", "outcome"],
)

ANALYSIS_DURATION_SECONDS = Histogram(
    "repo_digest_analysis_duration_seconds",
    "End-to-end analysis duration in seconds",
    ["mode"],
)

# ── Upstream metrics ───────────────────────────────────────────────

UPSTREAM_CALLS_TOTAL = Counter(
    "repo_digest_upstream_calls_total",
    "Total calls made to the repository host",
    ["operation", "outcome"],
)

FILE_FETCH_FAILURES_TOTAL = Counter(
    "repo_digest_file_fetch_failures_total",
    "File contents that could not be fetched and were recorded inline",
)
