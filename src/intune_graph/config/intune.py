"""Intune / Microsoft Graph configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import int_env_var, optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

GRAPH_BASE_URL = "https://graph.microsoft.com/beta"
GRAPH_TIMEOUT_SECONDS = 30.0
GRAPH_PAGE_SIZE = 100
# Graph rejects larger $top values on the Intune collections.
GRAPH_MAX_PAGE_SIZE = 999


@dataclass(frozen=True, slots=True)
class IntuneConfig:
    """Holds the tenant being ingested and how to reach Graph for it."""

    tenant_id: str
    access_token: str
    resilience: ResilienceConfig
    client_id: str | None = None
    page_size: int = GRAPH_PAGE_SIZE


def graph_resilience(*, cache: CacheConfig | None = None) -> ResilienceConfig:
    return ResilienceConfig(
        name="graph",
        base_url=GRAPH_BASE_URL,
        timeout_seconds=GRAPH_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        retry=RetryPolicy(total=5),
        cache=cache,
        default_headers={"Accept": "application/json"},
    )


def get_intune_config(*, resilience: ResilienceConfig | None = None) -> IntuneConfig:
    values = require_env_vars(("INTUNE_TENANT_ID", "GRAPH_ACCESS_TOKEN"))
    return IntuneConfig(
        tenant_id=values["INTUNE_TENANT_ID"],
        access_token=values["GRAPH_ACCESS_TOKEN"],
        client_id=optional_env_var("INTUNE_CLIENT_ID"),
        resilience=resilience or graph_resilience(),
        page_size=int_env_var(
            "INTUNE_GRAPH_PAGE_SIZE",
            default=GRAPH_PAGE_SIZE,
            minimum=1,
            maximum=GRAPH_MAX_PAGE_SIZE,
        ),
    )
