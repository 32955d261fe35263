"""
Revision Reconciler.

Prepares local account aggregates for write-back: fetches the stored
revisions of the whole batch in one request, merges transaction lists
(stored first, new second) and attaches the current revision token.
"""

from loguru import logger

from history_indexer.models.account import Account, key_by_address
from history_indexer.models.results import ReconciliationReport
from history_indexer.store.client import DocumentStoreClient
from history_indexer.utils.exceptions import ReconciliationFailure, StoreError


class RevisionReconciler:
    """Read-merge step of the account write path. Never writes."""

    def __init__(self, client: DocumentStoreClient, db_name: str) -> None:
        self.client = client
        self.db_name = db_name

    async def reconcile(
        self, accounts: dict[str, Account]
    ) -> ReconciliationReport:
        """
        Merge stored state into a batch of accounts, in place.

        Accounts without a stored document are left as creates (no
        revision). Hashes already present in the stored list are not
        appended again.

        Args:
            accounts: Local aggregates keyed by address, holding only
                newly observed transaction hashes

        Returns:
            Found/created addresses and the hashes new to the store

        Raises:
            ReconciliationFailure: If the multi-key fetch failed outright
        """
        report = ReconciliationReport()
        if not accounts:
            return report

        accounts = key_by_address(accounts.values())
        addresses = list(accounts)
        try:
            rows = await self.client.fetch_documents(self.db_name, addresses)
        except StoreError as e:
            logger.error(
                f"Revision fetch for {len(addresses)} accounts failed: {e}"
            )
            raise ReconciliationFailure(addresses, str(e)) from e

        fetched = {row.key: row for row in rows}
        for address, account in accounts.items():
            row = fetched.get(address)
            if row is None or not row.found:
                account.rev = None
                report.created.append(address)
                report.pending[address] = list(account.transactions)
                continue

            stored = row.doc.get("transactions") or []
            report.pending[address] = account.merge_stored(stored)
            account.rev = row.rev or row.doc.get("_rev")
            report.found.append(address)

        logger.debug(
            f"Reconciled {len(accounts)} accounts: "
            f"{len(report.found)} existing, {len(report.created)} new"
        )
        return report
