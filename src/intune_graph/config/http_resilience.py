"""How the Graph client paces, retries and caches its requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

# Graph signals throttling with 429, and with 503 when a service is overloaded.
THROTTLING_STATUSES: frozenset[int] = frozenset({429, 503})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Backoff for transient Graph failures; ingestion only ever reads."""

    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    backoff_jitter: float = 1.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = frozenset({"GET"})
    status_forcelist: frozenset[int] = THROTTLING_STATUSES | {500, 502, 504}
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True

    @classmethod
    def sqlite(cls, path: str, *, ttl_seconds: float | None = None) -> CacheConfig:
        return cls(backend="sqlite", sqlite_path=path, default_ttl_seconds=ttl_seconds)


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = None
