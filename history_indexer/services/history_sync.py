"""
History Sync Service.

One write epoch: persist transactions, fold them into account aggregates,
then refresh the account views for every touched address.
"""

import asyncio
import time

from loguru import logger

from history_indexer.models.results import EpochSummary
from history_indexer.models.transaction import Transaction
from history_indexer.repositories.account_repository import AccountRepository
from history_indexer.repositories.transaction_repository import (
    TransactionRepository,
)
from history_indexer.services.account_builder import build_accounts
from history_indexer.services.account_sync import AccountSyncService
from history_indexer.services.account_tx_index import AccountTransactionIndex
from history_indexer.store.client import DocumentStoreClient


class HistorySyncService:
    """
    Write path for ingested transactions.

    Usage:
        sync = HistorySyncService(client, "history")
        summary = await sync.write_epoch(transactions, wait_for_index=True)
    """

    def __init__(
        self,
        client: DocumentStoreClient,
        db_name: str,
        max_retries: int | None = None,
        retry_base_delay: float | None = None,
        view_name: str | None = None,
        default_limit: int | None = None,
    ) -> None:
        """
        Initialize service.

        Unset tuning values fall back to the loaded environment settings.

        Args:
            client: Document store client
            db_name: History database (transactions, accounts and views)
            max_retries: Account conflict retries per batch
            retry_base_delay: Conflict backoff base in seconds
            view_name: View name shared by the account design documents
            default_limit: Default result size for account queries
        """
        self.tx_repo = TransactionRepository(client, db_name)
        self.account_repo = AccountRepository(client, db_name)
        self.account_sync = AccountSyncService(
            self.account_repo,
            max_retries=max_retries,
            retry_base_delay=retry_base_delay,
        )
        self.index = AccountTransactionIndex(
            client, db_name, view_name=view_name, default_limit=default_limit
        )

    async def write_epoch(
        self,
        transactions: list[Transaction],
        wait_for_index: bool = False,
    ) -> EpochSummary:
        """
        Persist one batch of transactions and their accounts.

        Args:
            transactions: Transactions with unique hashes
            wait_for_index: Wait until the views of touched addresses
                were rebuilt before returning

        Returns:
            Epoch counts

        Raises:
            BulkWriteFailure: If a batch call failed
            ReconciliationFailure: If the account pre-fetch failed
            ConflictRetryExhausted: If account conflicts persisted
        """
        start = time.perf_counter()
        summary = EpochSummary(transactions_submitted=len(transactions))
        if not transactions:
            return summary

        tx_result = await self.tx_repo.save_transactions_bulk(transactions)
        summary.transactions_rejected = len(tx_result.rejected)

        accounts = build_accounts(transactions)
        account_result = await self.account_sync.save_accounts(accounts)
        summary.accounts_saved = len(account_result.saved)
        summary.accounts_rejected = len(account_result.rejected)

        refreshes = [self.index.refresh_all(address) for address in accounts]
        summary.refreshed_addresses = len(refreshes)
        if wait_for_index and refreshes:
            await asyncio.gather(*refreshes)

        summary.elapsed_seconds = time.perf_counter() - start
        logger.info(
            f"epoch written: {summary.transactions_submitted} transactions "
            f"({summary.transactions_rejected} already stored), "
            f"{summary.accounts_saved} accounts, "
            f"duration in sec: {summary.elapsed_seconds:.3f}"
        )
        return summary

    async def close(self) -> None:
        """Wait for view refreshes still in flight."""
        await self.index.wait_pending()
