from unittest.mock import AsyncMock, MagicMock

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from repo_digest.core.application.ports.repository_gateway_port import RepositoryGatewayPort
from repo_digest.core.application.usecases.analyze_repository_usecase import (
    AnalyzeRepositoryUseCase,
)
from repo_digest.core.exceptions import NotFoundError
from repo_digest.infrastructure.observability.tracing_setup import (
    annotate_current_span,
    trace_operation,
)

_EXPORTER = InMemorySpanExporter()


@pytest.fixture(scope="module", autouse=True)
def tracer_provider():
    # The global provider can only be set once per process
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(_EXPORTER))
    trace.set_tracer_provider(provider)
    yield provider


@pytest.fixture(autouse=True)
def clear_spans():
    _EXPORTER.clear()
    yield


def test_sync_function_is_wrapped_in_span():
    @trace_operation("unit.sync", attributes={"kind": "test"})
    def work():
        annotate_current_span(items=3)
        return "done"

    assert work() == "done"

    (span,) = _EXPORTER.get_finished_spans()
    assert span.name == "unit.sync"
    assert span.attributes["kind"] == "test"
    assert span.attributes["digest.items"] == 3


def test_annotate_without_active_span_is_noop():
    annotate_current_span(repository="octo/hello")

    assert _EXPORTER.get_finished_spans() == ()


@pytest.mark.asyncio
async def test_analyze_emits_annotated_span(metadata, sample_tree, rate_limit):
    gateway = MagicMock(spec=RepositoryGatewayPort)
    gateway.get_repository = AsyncMock(return_value=metadata)
    gateway.get_tree = AsyncMock(return_value=sample_tree)
    gateway.get_file_content = AsyncMock(return_value=b"x")
    gateway.get_rate_limit = AsyncMock(return_value=rate_limit)

    await AnalyzeRepositoryUseCase(gateway, max_files=2).analyze("octo", "hello")

    spans = [span for span in _EXPORTER.get_finished_spans() if span.name == "digest.analyze"]
    assert len(spans) == 1
    attributes = spans[0].attributes
    assert attributes["digest.repository"] == "octo/hello"
    assert attributes["digest.max_files"] == 2
    assert attributes["digest.filtered_count"] == 2
    assert attributes["digest.fetched_count"] == 2


def test_digest_errors_mark_the_span():
    @trace_operation("unit.failing")
    def fail():
        raise NotFoundError("Repository not found")

    with pytest.raises(NotFoundError):
        fail()

    (span,) = _EXPORTER.get_finished_spans()
    assert span.status.status_code == StatusCode.ERROR
    assert span.attributes["digest.error_type"] == "NotFoundError"
