"""Application orchestration entry points."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from intune_graph.adapters.graph import GraphClient, GraphIntuneFetcher
from intune_graph.adapters.memory import InMemoryGraphStore
from intune_graph.adapters.sqlalchemy import SqlAlchemyGraphStore
from intune_graph.config import (
    CacheConfig,
    get_database_config,
    get_intune_config,
    get_storage_config,
    graph_resilience,
)
from intune_graph.domain.model import EntityType
from intune_graph.domain.steps import INTUNE_STEPS, StepRunner

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from pathlib import Path

    from intune_graph.config import IntuneConfig, StorageConfig
    from intune_graph.domain.ports import GraphObjectStore, IntuneFetcher
    from intune_graph.domain.steps import RunResult, Step

log = getLogger(__name__)


def load_intune_config(
    *, http_cache: bool = False, storage: StorageConfig | None = None
) -> IntuneConfig:
    """Read Intune settings from the environment, optionally caching Graph responses on disk."""

    if not http_cache:
        return get_intune_config()
    storage_config = storage or get_storage_config()
    cache = CacheConfig.sqlite(str(storage_config.http_cache_path()))
    return get_intune_config(resilience=graph_resilience(cache=cache))


def verify_graph_access(config: IntuneConfig, *, client: GraphClient | None = None) -> None:
    """Fail with ``AuthenticationError`` before ingestion if Graph refuses the token."""

    (client or GraphClient(config=config)).verify_authentication()


def open_store(
    *, memory: bool = False, database_uri: str | None = None, tenant_id: str | None = None
) -> GraphObjectStore:
    """In-memory store, or the tenant's persisted one cleared of any previous run."""

    if memory:
        return InMemoryGraphStore()
    uri = database_uri or get_database_config(tenant_id=tenant_id).uri
    store = SqlAlchemyGraphStore.from_uri(uri)
    store.reset()
    return store


def ingest_intune(
    *,
    config: IntuneConfig | None = None,
    fetcher: IntuneFetcher | None = None,
    store: GraphObjectStore | None = None,
    steps: Sequence[Step] = INTUNE_STEPS,
    only: Collection[str] | None = None,
) -> RunResult:
    """Run the Intune ingestion steps against one store."""

    intune_config = config or get_intune_config()
    runner = StepRunner(steps)
    active_store = store or InMemoryGraphStore()
    active_fetcher = fetcher or GraphIntuneFetcher(config=intune_config)
    log.info(
        "Starting Intune ingestion: tenant=%s, steps=%s",
        intune_config.tenant_id,
        ", ".join(only) if only else "all",
    )

    result = runner.run(
        store=active_store,
        fetcher=active_fetcher,
        config=intune_config,
        only=only,
    )

    log.info(
        f"Finished Intune ingestion: steps={len(result.reports)}, failed={len(result.failed)}, "
        f"skipped={len(result.skipped)}, warnings={result.warning_count}"
    )
    return result


def export_graph(store: GraphObjectStore, path: Path) -> int:
    """Write every stored graph object to ``path`` as JSON; returns the object count."""

    entities = [
        entity.to_dict()
        for entity_type in EntityType
        for entity in store.iterate_entities(entity_type)
    ]
    relationships = [relationship.to_dict() for relationship in store.iterate_relationships()]
    mapped = [relationship.to_dict() for relationship in store.iterate_mapped_relationships()]
    payload = {
        "entities": entities,
        "relationships": [*relationships, *mapped],
    }
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    count = len(entities) + len(relationships) + len(mapped)
    log.info("Exported %d graph objects to %s", count, path)
    return count
