"""Shared fixtures."""

import pytest

from shopledger.audit import AuditLogger
from shopledger.models import AppState, InventoryItem
from shopledger.services.storage import InMemoryKeyValueStore, PersistentStore


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv, audit_logger):
    return PersistentStore(kv, audit_logger=audit_logger)


@pytest.fixture
def dress():
    return InventoryItem(
        id="item-dress",
        name="Dress",
        sku="DRS-001",
        buying_price=1000,
        selling_price=1500,
        stock=10,
        category="Clothing",
    )


@pytest.fixture
def stocked_state(dress):
    return AppState(inventory=[dress])
