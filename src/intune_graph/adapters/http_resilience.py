"""Paced, retrying and optionally caching async client for Graph reads."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from intune_graph.config.http_resilience import THROTTLING_STATUSES

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from httpx._types import TimeoutTypes

    from intune_graph.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
    )

log = getLogger(__name__)


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: dict[str, str]
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """GET-only wrapper: the rate limiter gates each call, retries live in the transport."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self.requests_sent = 0
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        options: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(retry=_build_retry(config.retry)),
        }
        if config.base_url is not None:
            options["base_url"] = config.base_url
        if config.default_headers:
            options["headers"] = dict(config.default_headers)

        storage = _build_cache_storage(config.cache)
        if storage is None:
            self._client = httpx.AsyncClient(**options)
        else:
            log.debug("HTTP cache enabled for %s", config.name)
            self._client = AsyncCacheClient(**options, storage=storage)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.get(url, params=params, headers=headers)
        else:
            async with self._limiter:
                response = await self._client.get(url, params=params, headers=headers)
        self.requests_sent += 1
        if response.status_code in THROTTLING_STATUSES:
            log.warning(
                "%s still throttled after retries (%s, Retry-After=%s) for %s",
                self.config.name,
                response.status_code,
                response.headers.get("Retry-After", "-"),
                response.request.url,
            )
        return response


def _build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.backoff_jitter,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def _build_cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None
    if config.backend == "memory":
        database_path = ":memory:"
    elif config.sqlite_path is None:
        raise ValueError("sqlite cache backend requires sqlite_path")
    else:
        database_path = config.sqlite_path
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
