"""HTTP client for the Microsoft Graph API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

import httpx

from intune_graph.adapters.http_resilience import ResilientClient
from intune_graph.config.errors import AuthenticationError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from intune_graph.config import IntuneConfig, ResilienceConfig

log = getLogger(__name__)

NEXT_LINK_FIELD = "@odata.nextLink"
ORGANIZATION_PATH = "/organization"

type GraphPayload = dict[str, Any]
type TokenProvider = Callable[[], str]


class GraphAPIError(RuntimeError):
    """Raised when Graph answers with an error or an unexpected payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code

    @property
    def not_found(self) -> bool:
        return self.status_code == httpx.codes.NOT_FOUND

    @property
    def unauthorized(self) -> bool:
        return self.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN)


@dataclass(frozen=True, slots=True)
class GraphPage:
    """One page of a Graph collection.

    ``next_cursor`` is the opaque ``@odata.nextLink`` URL, ``None`` on the last page.
    """

    records: tuple[GraphPayload, ...] = field(default_factory=tuple)
    next_cursor: str | None = None


class GraphClient:
    """Low-level client for Graph collection and object endpoints.

    Each public call runs its own event loop and connection pool; a collection
    is read page by page inside one such call.
    """

    def __init__(
        self,
        *,
        config: IntuneConfig,
        token_provider: TokenProvider | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._token_provider = token_provider or (lambda: config.access_token)
        self._client_factory = client_factory or ResilientClient

    def fetch_page(
        self,
        path: str,
        cursor: str | None = None,
        *,
        params: Mapping[str, str] | None = None,
    ) -> GraphPage:
        return asyncio.run(self._fetch_page_async(path, cursor, params=params))

    def fetch_all(self, path: str, *, params: Mapping[str, str] | None = None) -> list[GraphPayload]:
        """Every record of a collection, following next links until exhausted."""

        return asyncio.run(self._fetch_all_async(path, params=params))

    def fetch_object(
        self, path: str, *, params: Mapping[str, str] | None = None
    ) -> GraphPayload:
        return asyncio.run(self._fetch_object_async(path, params=params))

    def verify_authentication(self) -> None:
        """Read the tenant's organization with the configured token before any step runs.

        A 401 or 403 becomes ``AuthenticationError``; other Graph errors propagate.
        """

        try:
            self.fetch_object(ORGANIZATION_PATH, params={"$select": "id"})
        except GraphAPIError as exc:
            if exc.unauthorized:
                raise AuthenticationError(
                    f"Graph rejected the access token for tenant {self._config.tenant_id}: {exc}"
                ) from exc
            raise
        log.debug("Graph accepted the access token for tenant %s", self._config.tenant_id)

    async def _fetch_page_async(
        self,
        path: str,
        cursor: str | None,
        *,
        params: Mapping[str, str] | None,
    ) -> GraphPage:
        async with self._client_factory(self._resilience) as client:
            return await self._request_page(client, path, cursor, params=params)

    async def _fetch_all_async(
        self, path: str, *, params: Mapping[str, str] | None
    ) -> list[GraphPayload]:
        records: list[GraphPayload] = []
        cursor: str | None = None
        pages = 0
        async with self._client_factory(self._resilience) as client:
            while True:
                page = await self._request_page(client, path, cursor, params=params)
                records.extend(page.records)
                pages += 1
                if page.next_cursor is None:
                    break
                cursor = page.next_cursor
            log.debug(
                "Fetched %d records from %s in %d pages (%d requests)",
                len(records),
                path,
                pages,
                client.requests_sent,
            )
        return records

    async def _fetch_object_async(
        self, path: str, *, params: Mapping[str, str] | None
    ) -> GraphPayload:
        async with self._client_factory(self._resilience) as client:
            return await self._perform_request(client, path, params=params)

    async def _request_page(
        self,
        client: ResilientClient,
        path: str,
        cursor: str | None,
        *,
        params: Mapping[str, str] | None,
    ) -> GraphPage:
        # next links already carry the original query
        if cursor is not None:
            payload = await self._perform_request(client, cursor, params=None)
        else:
            payload = await self._perform_request(client, path, params=params)

        values = payload.get("value")
        if not isinstance(values, list):
            raise GraphAPIError(f"Graph response for {path} has no value list")
        records = tuple(
            cast("GraphPayload", value) for value in cast("list[object]", values)
            if isinstance(value, dict)
        )
        next_cursor = payload.get(NEXT_LINK_FIELD)
        return GraphPage(
            records=records,
            next_cursor=next_cursor if isinstance(next_cursor, str) and next_cursor else None,
        )

    async def _perform_request(
        self,
        client: ResilientClient,
        url: str,
        *,
        params: Mapping[str, str] | None,
    ) -> GraphPayload:
        response = await client.get(
            url,
            params=dict(params) if params else None,
            headers={"Authorization": f"Bearer {self._token_provider()}"},
        )
        if response.is_error:
            raise _error_from_response(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise GraphAPIError(
                f"Graph response for {url} is not JSON", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise GraphAPIError(
                f"Unexpected Graph response payload for {url}", status_code=response.status_code
            )
        return cast("GraphPayload", payload)


def _error_from_response(response: httpx.Response) -> GraphAPIError:
    code: str | None = None
    message = response.reason_phrase or "Graph request failed"
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = cast("dict[str, object]", payload).get("error")
        if isinstance(error, dict):
            error_fields = cast("dict[str, object]", error)
            raw_code = error_fields.get("code")
            raw_message = error_fields.get("message")
            code = raw_code if isinstance(raw_code, str) else None
            message = raw_message if isinstance(raw_message, str) else message
    log.error(
        "Graph API error %s (%s) for %s: %s", response.status_code, code, response.url, message
    )
    return GraphAPIError(message, status_code=response.status_code, code=code)
