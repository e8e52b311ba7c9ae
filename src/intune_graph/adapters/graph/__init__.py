"""Microsoft Graph adapter for Intune records."""

from __future__ import annotations

from .client import GraphAPIError, GraphClient, GraphPage, TokenProvider
from .fetcher import GraphIntuneFetcher

__all__ = ["GraphAPIError", "GraphClient", "GraphIntuneFetcher", "GraphPage", "TokenProvider"]
