"""
Account repository.

Data access layer for per-address account aggregates.
"""

from loguru import logger

from history_indexer.config.constants import KIND_ACCOUNTS
from history_indexer.models.account import Account, key_by_address
from history_indexer.models.results import BulkWriteResult, ReconciliationReport
from history_indexer.repositories.base import BaseRepository
from history_indexer.services.bulk_writer import BulkWriter
from history_indexer.services.revision_reconciler import RevisionReconciler
from history_indexer.store.client import DocumentStoreClient
from history_indexer.utils.exceptions import NotFound
from history_indexer.utils.security import mask_address


class AccountRepository(BaseRepository[Account]):
    """Repository for account aggregates."""

    def __init__(self, client: DocumentStoreClient, db_name: str) -> None:
        """Initialize repository."""
        super().__init__(Account, client, db_name)
        self.reconciler = RevisionReconciler(client, db_name)
        self.writer = BulkWriter(client, db_name)

    async def get_by_address(self, address: str) -> Account | None:
        """Get account aggregate, None if never seen."""
        try:
            return await self.get_by_id(address.lower())
        except NotFound:
            return None

    async def save_accounts_bulk(
        self, accounts: dict[str, Account]
    ) -> tuple[BulkWriteResult, ReconciliationReport]:
        """
        Reconcile a batch against the store and write it back.

        Single pass: accounts rejected as conflicts are reported in the
        result, not retried (AccountSyncService retries them).

        Args:
            accounts: Local aggregates keyed by address in any letter case

        Returns:
            Bulk write outcome and reconciliation report, keyed by the
            lowercase address

        Raises:
            ReconciliationFailure: If the revision pre-fetch failed
            BulkWriteFailure: If the batch call itself failed
        """
        accounts = key_by_address(accounts.values())
        report = await self.reconciler.reconcile(accounts)
        result = await self.writer.write(
            KIND_ACCOUNTS,
            [account.to_document() for account in accounts.values()],
        )

        for address, rev in result.revisions.items():
            accounts[address].rev = rev

        if result.rejected:
            logger.info(f"rejected accounts: {result.rejected_ids}")
        return result, report

    async def save_account(self, account: Account) -> Account:
        """
        Read-merge-write a single account.

        Args:
            account: Local aggregate holding newly observed hashes

        Returns:
            The merged account with its new revision

        Raises:
            DocumentConflict: If another writer updated it in between
        """
        try:
            existing = await self.get_raw(account.address)
            account.merge_stored(existing.get("transactions") or [])
            account.rev = existing.get("_rev")
        except NotFound:
            account.rev = None

        account.rev = await self.put(account)
        logger.debug(f"account # {mask_address(account.address)} saved")
        return account
