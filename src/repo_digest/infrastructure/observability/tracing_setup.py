"""OpenTelemetry spans for digest analyses.

Tracing is opt-in (``REPO_DIGEST_TRACING_ENABLED``). Without a configured
provider every helper here runs against OTel's no-op tracer.
"""

from __future__ import annotations

import functools
import inspect
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

from repo_digest.core.exceptions import DigestError

_CONFIGURED = False
_TRACER_NAME = "repo-digest"
_ATTRIBUTE_PREFIX = "digest."

P = ParamSpec("P")
R = TypeVar("R")


def configure_tracing(service_name: str = _TRACER_NAME, environment: str = "local") -> None:
    """Install a TracerProvider exporting to stderr. Only the first call has an effect."""
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    resource = Resource.create(
        {"service.name": service_name, "deployment.environment": environment}
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)


def get_tracer(name: str = _TRACER_NAME) -> trace.Tracer:
    return trace.get_tracer(name)


def annotate_current_span(**attributes: str | int | bool) -> None:
    span = trace.get_current_span()
    if not span.is_recording():
        return
    for key, value in attributes.items():
        span.set_attribute(f"{_ATTRIBUTE_PREFIX}{key}", value)


@contextmanager
def _digest_span(span_name: str, attributes: dict[str, str] | None) -> Iterator[trace.Span]:
    with get_tracer().start_as_current_span(span_name, attributes=attributes) as span:
        try:
            yield span
        except DigestError as exc:
            span.set_attribute(f"{_ATTRIBUTE_PREFIX}error_type", type(exc).__name__)
            span.set_status(Status(StatusCode.ERROR, exc.message))
            raise


def trace_operation(span_name: str, attributes: dict[str, str] | None = None) -> Callable:
    """Run the decorated function (sync or async) inside a span named ``span_name``.

    Usage:
        @trace_operation("digest.analyze")
        async def analyze(self, owner, repo): ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                with _digest_span(span_name, attributes):
                    return await func(*args, **kwargs)  # type: ignore[misc]

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with _digest_span(span_name, attributes):
                return func(*args, **kwargs)

        return sync_wrapper

    return decorator
