"""
actionseal test configuration — shared fixtures.
"""
import pytest

from actionseal.config import generate_key
from actionseal.registry import ActionRegistry
from actionseal.runtime import ActionRuntime

DELETE_ITEM_ID = "6a88810ecce4a4e8b59d53b8327d7e98bbf251d7"
DELETE_ITEM2_ID = "90b5db271335765a4b0eab01f044b381b5ebd5cd"


class FakeDb:
    """Records deletions in call order."""

    def __init__(self):
        self.deleted = []

    async def delete(self, record_id):
        self.deleted.append(record_id)


@pytest.fixture
def registry():
    """Fresh registry per test, never the process-wide one."""
    return ActionRegistry(id_salt="")


@pytest.fixture
def key():
    return generate_key()


@pytest.fixture
def db():
    return FakeDb()


@pytest.fixture
def runtime(registry, key, db):
    """Runtime with the two delete actions registered."""

    async def delete_item(id1, id2):
        await db.delete(id1)
        await db.delete(id2)

    async def delete_item2(id1, id2):
        await db.delete(id1)
        await db.delete(id2)

    registry.register(DELETE_ITEM_ID, delete_item)
    registry.register(DELETE_ITEM2_ID, delete_item2)
    return ActionRuntime(registry, key)
