from repo_digest.core.exceptions.digest_exceptions import (
    DigestError,
    NotFoundError,
    PerFileFetchError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "DigestError",
    "NotFoundError",
    "PerFileFetchError",
    "UpstreamError",
    "ValidationError",
]
