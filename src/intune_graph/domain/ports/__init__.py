"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import IntuneFetcher
from .persistence import DuplicateKeyError, GraphObjectStore

__all__ = [
    "DuplicateKeyError",
    "GraphObjectStore",
    "IntuneFetcher",
]
