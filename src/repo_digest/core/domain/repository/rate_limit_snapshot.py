from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitSnapshot:
    limit: int
    remaining: int
    reset: int

    @classmethod
    def unknown(cls) -> "RateLimitSnapshot":
        """Fallback used when the rate-limit endpoint cannot be reached."""
        return cls(limit=60, remaining=0, reset=0)
