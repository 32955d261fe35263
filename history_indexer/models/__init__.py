"""
Document models.

Exports all record types for easy imports.
"""

from history_indexer.models.account import Account
from history_indexer.models.base import StoreDocument
from history_indexer.models.index_role import IndexRole
from history_indexer.models.indexer_settings import IndexerSettings
from history_indexer.models.results import (
    AccountSyncResult,
    BulkWriteResult,
    EpochSummary,
    PartialRejection,
    ReconciliationReport,
    RejectedDocument,
)
from history_indexer.models.transaction import Transaction

__all__ = [
    "Account",
    "AccountSyncResult",
    "BulkWriteResult",
    "EpochSummary",
    "IndexRole",
    "IndexerSettings",
    "PartialRejection",
    "ReconciliationReport",
    "RejectedDocument",
    "StoreDocument",
    "Transaction",
]
