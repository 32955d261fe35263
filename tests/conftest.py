"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for tests: no file sink, fast retries
os.environ.setdefault("COUCHDB_URL", "http://localhost:5984")
os.environ.setdefault("HISTORY_DB_NAME", "history")
os.environ.setdefault("SETTINGS_DB_NAME", "settings")
os.environ.setdefault("RECONCILE_RETRY_BASE_DELAY", "0")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("ENVIRONMENT", "test")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from history_indexer.utils.exceptions import StoreError
from tests.factories import (
    ALICE,
    BOB,
    CAROL,
    CONTRACT,
    FakeDocumentStore,
    make_transaction,
)


@pytest.fixture
def store():
    """In-memory document store."""
    return FakeDocumentStore()


@pytest.fixture
def failing_store(store):
    """Store whose next call of a method raises StoreError."""
    def fail(method: str, message: str = "connection refused") -> FakeDocumentStore:
        store.failures[method] = StoreError(message)
        return store
    return fail


@pytest.fixture
def transactions():
    """Three transactions: two transfers and one contract creation."""
    return [
        make_transaction(1, sender=ALICE, recipient=BOB),
        make_transaction(2, sender=BOB, recipient=CAROL),
        make_transaction(3, sender=ALICE, recipient=None, contract=CONTRACT),
    ]
