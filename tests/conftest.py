from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from intune_graph.adapters.memory import InMemoryGraphStore
from intune_graph.adapters.sqlalchemy import SqlAlchemyGraphStore
from intune_graph.domain.reconciliation import Reconciler, StepReport
from tests.helpers.intune import FakeIntuneFetcher, make_config

os.environ.setdefault("INTUNE_GRAPH_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator

    from intune_graph.config import IntuneConfig


@pytest.fixture
def intune_config() -> IntuneConfig:
    return make_config()


@pytest.fixture
def memory_store() -> InMemoryGraphStore:
    return InMemoryGraphStore()


@pytest.fixture
def sqlite_store() -> Iterator[SqlAlchemyGraphStore]:
    store = SqlAlchemyGraphStore.from_uri("sqlite+pysqlite:///:memory:")
    try:
        yield store
    finally:
        store.dispose()


@pytest.fixture
def report() -> StepReport:
    return StepReport("test-step")


@pytest.fixture
def reconciler(memory_store: InMemoryGraphStore, report: StepReport) -> Reconciler:
    return Reconciler(memory_store, report)


@pytest.fixture
def fake_fetcher() -> FakeIntuneFetcher:
    return FakeIntuneFetcher()
