from repo_digest.infrastructure.observability.logging.correlation_middleware import (
    CorrelationMiddleware,
)
from repo_digest.infrastructure.observability.logging.service_schema_processor import (
    service_schema_processor,
)

__all__ = [
    "CorrelationMiddleware",
    "service_schema_processor",
]
