"""
Account Sync Service.

Writes account batches with a compare-and-swap retry loop: accounts the
store rejects as revision conflicts are re-fetched, re-merged and written
again, so a concurrent writer cannot silently drop this batch's
transactions.
"""

import asyncio

from loguru import logger

from history_indexer.config.settings import settings
from history_indexer.models.account import Account, key_by_address
from history_indexer.models.results import AccountSyncResult, RejectedDocument
from history_indexer.repositories.account_repository import AccountRepository
from history_indexer.utils.exceptions import ConflictRetryExhausted


class AccountSyncService:
    """Reconcile + bulk write of accounts with bounded conflict retries."""

    def __init__(
        self,
        account_repo: AccountRepository,
        max_retries: int | None = None,
        retry_base_delay: float | None = None,
    ) -> None:
        """
        Initialize service.

        Args:
            account_repo: Account repository
            max_retries: Retries after the first attempt
                (defaults to settings.reconcile_max_retries)
            retry_base_delay: Backoff base in seconds
                (defaults to settings.reconcile_retry_base_delay)
        """
        self.account_repo = account_repo
        self.max_retries = (
            settings.reconcile_max_retries if max_retries is None else max_retries
        )
        self.retry_base_delay = (
            settings.reconcile_retry_base_delay
            if retry_base_delay is None
            else retry_base_delay
        )

    async def save_accounts(
        self, accounts: dict[str, Account]
    ) -> AccountSyncResult:
        """
        Persist a batch of account aggregates.

        Args:
            accounts: Local aggregates keyed by address in any letter case,
                holding only the newly observed hashes

        Returns:
            Saved addresses and non-conflict rejections

        Raises:
            ReconciliationFailure: If a revision pre-fetch failed
            BulkWriteFailure: If a batch call itself failed
            ConflictRetryExhausted: If conflicts persist after all retries
        """
        result = AccountSyncResult()
        accounts = key_by_address(accounts.values())
        # New hashes per address not yet confirmed persisted
        unconfirmed = {
            address: list(account.transactions)
            for address, account in accounts.items()
        }
        batch = accounts

        for attempt in range(self.max_retries + 1):
            result.attempts = attempt + 1
            write_result, _ = await self.account_repo.save_accounts_bulk(batch)

            for address in write_result.accepted:
                accounts[address] = batch[address]
                unconfirmed.pop(address, None)
                result.saved.append(address)

            conflicted: list[str] = []
            for rejected in write_result.rejected:
                if rejected.is_conflict:
                    conflicted.append(rejected.id)
                else:
                    unconfirmed.pop(rejected.id, None)
                    result.rejected.append(rejected)

            if not conflicted:
                break

            if attempt == self.max_retries:
                logger.error(
                    f"{len(conflicted)} accounts still conflicted after "
                    f"{result.attempts} attempts"
                )
                raise ConflictRetryExhausted(conflicted, result.attempts)

            delay = self.retry_base_delay * (2 ** attempt)
            logger.warning(
                f"{len(conflicted)} accounts conflicted on attempt "
                f"{attempt + 1}/{self.max_retries + 1}. Retrying in {delay}s..."
            )
            await asyncio.sleep(delay)

            batch = {
                address: Account(
                    address=address, transactions=list(unconfirmed[address])
                )
                for address in conflicted
            }

        if result.attempts > 1:
            logger.success(
                f"account batch saved after {result.attempts} attempts"
            )
        self._log_rejected(result.rejected)
        return result

    @staticmethod
    def _log_rejected(rejected: list[RejectedDocument]) -> None:
        for doc in rejected:
            logger.warning(
                f"account {doc.id} rejected: {doc.error} ({doc.reason})"
            )
