"""structlog processor giving every digest log line the same nested shape.

Flat keyword arguments passed to the logger are grouped into blocks:

    request     context_endpoint, context_method, repository
    upstream    operation, upstream_path, attempt, max_attempts, http_status
    analysis    max_files, total, kept, filtered_count, fetched_count, failed_count, path
    error       error_type, error_code, error_details, error_retryable
    processing  processing_status, processing_duration_ms

correlation_id, context_component and the OTel trace ids stay at the root.
A block appears once any of its keys is present; upstream, error and
processing also require their first key. Anything left over lands in ``extra``.
"""

from __future__ import annotations

import os
from typing import Any

from opentelemetry import trace

SERVICE_NAME_DEFAULT = "repo-digest"

# Read by the renderers at the top level.
_PASSTHROUGH_KEYS = ("exc_info", "exception", "stack")

# block name -> (trigger key, {source key: field name})
_BLOCKS: dict[str, tuple[str | None, dict[str, str]]] = {
    "request": (
        None,
        {
            "context_endpoint": "endpoint",
            "context_method": "method",
            "repository": "repository",
        },
    ),
    "upstream": (
        "operation",
        {
            "operation": "operation",
            "upstream_path": "path",
            "attempt": "attempt",
            "max_attempts": "max_attempts",
            "http_status": "http_status",
        },
    ),
    "analysis": (
        None,
        {
            "max_files": "max_files",
            "total": "tree_entries",
            "kept": "kept",
            "filtered_count": "filtered",
            "fetched_count": "fetched",
            "failed_count": "failed",
            "entry_count": "tree_entries",
            "path": "path",
        },
    ),
    "error": (
        "error_type",
        {
            "error_type": "type",
            "error_code": "code",
            "error_details": "details",
            "error_retryable": "retryable",
        },
    ),
    "processing": (
        "processing_status",
        {
            "processing_status": "status",
            "processing_duration_ms": "duration_ms",
        },
    ),
}


def _pop_block(event_dict: dict[str, Any], trigger: str | None, fields: dict[str, str]) -> dict[str, Any]:
    if trigger is not None and trigger not in event_dict:
        return {}
    block: dict[str, Any] = {}
    for source, target in fields.items():
        if source in event_dict:
            block[target] = event_dict.pop(source)
    return block


def _current_span_ids() -> tuple[str | None, str | None]:
    span = trace.get_current_span()
    if not span.is_recording():
        return None, None
    ctx = span.get_span_context()
    return format(ctx.trace_id, "032x"), format(ctx.span_id, "016x")


def service_schema_processor(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    otel_trace_id, span_id = _current_span_ids()
    result: dict[str, Any] = {
        "timestamp": event_dict.pop("timestamp", None),
        "level": event_dict.pop("level", "info"),
        "service": os.environ.get("SERVICE_NAME", SERVICE_NAME_DEFAULT),
        "environment": os.environ.get("APP_ENV", "local"),
        "component": event_dict.pop("context_component", None),
        "correlation_id": event_dict.pop("correlation_id", None),
        "trace_id": otel_trace_id or event_dict.pop("trace_id", None),
        "message": event_dict.pop("event", ""),
    }
    event_dict.pop("trace_id", None)
    if span_id is not None:
        result["span_id"] = span_id
    for key in _PASSTHROUGH_KEYS:
        if key in event_dict:
            result[key] = event_dict.pop(key)

    for name, (trigger, fields) in _BLOCKS.items():
        block = _pop_block(event_dict, trigger, fields)
        if block:
            result[name] = block

    if event_dict:
        result["extra"] = dict(event_dict)
    return result
