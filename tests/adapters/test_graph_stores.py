from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from intune_graph.adapters.sqlalchemy import SqlAlchemyGraphStore
from intune_graph.domain.model import (
    Entity,
    EntityClass,
    EntityType,
    RelationshipClass,
    RelationshipDirection,
)
from intune_graph.domain.ports import DuplicateKeyError, GraphObjectStore
from intune_graph.domain.relationships import (
    build_relationship,
    build_user_device_mapped_relationship,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(params=["memory_store", "sqlite_store"])
def store(request: pytest.FixtureRequest) -> GraphObjectStore:
    return request.getfixturevalue(request.param)


def _device(key: str = "intune_device:d-1", **properties: object) -> Entity:
    return Entity(
        key=key,
        type=EntityType.USER_ENDPOINT,
        classes=(EntityClass.DEVICE, EntityClass.HOST),
        properties={"id": key, "name": "laptop", **properties},
        raw_data={"id": key, "deviceName": "laptop"},
    )


def _user(key: str = "azure_user:u-1") -> Entity:
    return Entity(
        key=key,
        type=EntityType.USER,
        classes=(EntityClass.USER,),
        properties={"email": "ada@example.com"},
    )


def test_store_satisfies_port(store: GraphObjectStore) -> None:
    assert isinstance(store, GraphObjectStore)


def test_entity_round_trips(store: GraphObjectStore) -> None:
    device = _device(enrolledOn=1_700_000_000_000, compliant=True)

    store.add_entity(device)
    found = store.find_entity(device.key)

    assert found is not None
    assert found.key == device.key
    assert found.type == EntityType.USER_ENDPOINT
    assert tuple(found.classes) == ("Device", "Host")
    assert dict(found.properties) == dict(device.properties)
    assert found.raw_data is not None
    assert dict(found.raw_data) == {"id": device.key, "deviceName": "laptop"}


def test_missing_entity_is_none(store: GraphObjectStore) -> None:
    assert store.find_entity("intune_device:absent") is None
    assert not store.has_key("intune_device:absent")


def test_keys_are_shared_across_object_kinds(store: GraphObjectStore) -> None:
    user = store.add_entity(_user())
    device = store.add_entity(_device())
    relationship = build_relationship(RelationshipClass.HAS, user, device)
    store.add_relationship(relationship)

    with pytest.raises(DuplicateKeyError):
        store.add_entity(_device())
    with pytest.raises(DuplicateKeyError):
        store.add_relationship(relationship)
    with pytest.raises(DuplicateKeyError) as excinfo:
        store.add_entity(
            Entity(key=relationship.key, type=EntityType.USER, classes=(EntityClass.USER,))
        )

    assert excinfo.value.key == relationship.key
    assert store.has_key(relationship.key)


def test_iteration_filters_by_type_in_insertion_order(store: GraphObjectStore) -> None:
    store.add_entity(_device("intune_device:d-2"))
    store.add_entity(_user())
    store.add_entity(_device("intune_device:d-1"))

    keys = [entity.key for entity in store.iterate_entities(EntityType.USER_ENDPOINT)]

    assert keys == ["intune_device:d-2", "intune_device:d-1"]
    assert list(store.iterate_entities(EntityType.HOST_AGENT)) == []


def test_relationships_round_trip(store: GraphObjectStore) -> None:
    user = store.add_entity(_user())
    device = store.add_entity(_device())
    store.add_relationship(
        build_relationship(RelationshipClass.HAS, user, device, {"primary": True})
    )
    mapped = build_user_device_mapped_relationship(device, user_id="u-2", email="Grace@Example.com")
    assert mapped is not None
    store.add_mapped_relationship(mapped)

    (relationship,) = store.iterate_relationships()
    (stored_mapped,) = store.iterate_mapped_relationships()

    assert relationship.relationship_class is RelationshipClass.HAS
    assert (relationship.source_key, relationship.target_key) == (user.key, device.key)
    assert dict(relationship.properties) == {"primary": True}
    assert stored_mapped.key == mapped.key
    assert stored_mapped.direction is RelationshipDirection.REVERSE
    assert tuple(stored_mapped.target_filter_keys) == ("_type", "email")
    assert stored_mapped.target_properties["email"] == "grace@example.com"
    assert stored_mapped.skip_target_creation is True


def test_adding_while_iterating_is_allowed(store: GraphObjectStore) -> None:
    store.add_entity(_device("intune_device:d-1"))

    for device in store.iterate_entities(EntityType.USER_ENDPOINT):
        store.add_entity(_device(device.key + "-copy"))

    assert store.has_key("intune_device:d-1-copy")


def test_sqlite_reset_clears_previous_run(tmp_path: Path) -> None:
    uri = f"sqlite+pysqlite:///{tmp_path / 'graph.db'}"
    first = SqlAlchemyGraphStore.from_uri(uri)
    first.add_entity(_user())
    first.dispose()

    second = SqlAlchemyGraphStore.from_uri(uri)
    try:
        assert second.has_key("azure_user:u-1")
        second.reset()
        assert not second.has_key("azure_user:u-1")
        assert list(second.iterate_entities(EntityType.USER)) == []
    finally:
        second.dispose()
