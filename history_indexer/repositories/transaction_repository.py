"""
Transaction repository.

Data access layer for transaction documents in the history database.
"""

from loguru import logger

from history_indexer.config.constants import KIND_TRANSACTIONS
from history_indexer.models.results import BulkWriteResult
from history_indexer.models.transaction import Transaction
from history_indexer.repositories.base import BaseRepository
from history_indexer.services.bulk_writer import BulkWriter
from history_indexer.store.client import DocumentStoreClient
from history_indexer.utils.exceptions import NotFound
from history_indexer.utils.security import mask_tx_hash


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for transaction documents."""

    def __init__(self, client: DocumentStoreClient, db_name: str) -> None:
        """Initialize repository."""
        super().__init__(Transaction, client, db_name)
        self.writer = BulkWriter(client, db_name)

    async def save_transactions_bulk(
        self, transactions: list[Transaction]
    ) -> BulkWriteResult:
        """
        Write transactions in one batch.

        A transaction already stored comes back as a rejection, not an
        error; the stored copy stays the only copy.

        Args:
            transactions: Transactions with unique hashes

        Returns:
            Batch outcome

        Raises:
            BulkWriteFailure: If the batch call itself failed
        """
        result = await self.writer.write(
            KIND_TRANSACTIONS, [tx.to_document() for tx in transactions]
        )
        if result.rejected:
            logger.info(
                f"#{len(result.rejected)} rejected transactions, already exist."
            )
        return result

    async def get_by_hash(self, tx_hash: str) -> Transaction | None:
        """
        Get transaction by hash.

        Args:
            tx_hash: Transaction hash (with or without 0x prefix)

        Returns:
            Transaction or None
        """
        normalized = tx_hash.lower()
        if not normalized.startswith("0x"):
            normalized = f"0x{normalized}"

        try:
            return await self.get_by_id(normalized)
        except NotFound:
            logger.debug(f"transaction {mask_tx_hash(normalized)} not stored")
            return None
