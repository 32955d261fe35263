"""
Account Transaction Index.

Four views over the transaction documents, each keyed by account address:
as created/invoked contract, block-matched field, sender and recipient.

Views are built lazily by the store on first access after a write;
`refresh_all` queries every view for an address so the store indexes
fresh data ahead of real reads.
"""

import asyncio
from typing import Any

from loguru import logger

from history_indexer.config.settings import settings
from history_indexer.models.base import strip_metadata
from history_indexer.models.index_role import IndexRole
from history_indexer.store.client import DocumentStoreClient
from history_indexer.utils.exceptions import IndexQueryFailure, StoreError
from history_indexer.utils.security import mask_address


class AccountTransactionIndex:
    """Query and warm-up access to the account views."""

    def __init__(
        self,
        client: DocumentStoreClient,
        db_name: str,
        view_name: str | None = None,
        default_limit: int | None = None,
    ) -> None:
        """
        Initialize index.

        Args:
            client: Document store client
            db_name: Database holding the transactions and views
            view_name: View name shared by the four design documents
            default_limit: Default result size for queries
        """
        self.client = client
        self.db_name = db_name
        self.view_name = (
            settings.index_view_name if view_name is None else view_name
        )
        self.default_limit = (
            settings.default_query_limit if default_limit is None else default_limit
        )
        self._pending: set[asyncio.Task] = set()

    async def query_by_account(
        self,
        role: IndexRole,
        address: str,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Get up to `limit` transactions of `address` in one role.

        Order is whatever the view yields. Returned documents have `_id`
        and `_rev` stripped and must not be written back.

        Args:
            role: Role of the address in the transactions
            address: Account address
            limit: Max documents (defaults to default_limit)

        Returns:
            Transaction documents

        Raises:
            ValueError: If limit is not positive
            IndexQueryFailure: If the view query failed
        """
        role = IndexRole(role)
        limit = self.default_limit if limit is None else limit
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")

        key = address.lower()
        try:
            rows = await self.client.query_view(
                self.db_name,
                role.design_doc,
                self.view_name,
                keys=[key],
                include_docs=True,
                limit=limit,
            )
        except StoreError as e:
            logger.error(
                f"Query of {role.design_doc}/{self.view_name} for "
                f"{mask_address(key)} failed: {e}"
            )
            raise IndexQueryFailure(
                f"{role.design_doc}/{self.view_name}", key, str(e)
            ) from e

        result = [strip_metadata(row["doc"]) for row in rows if row.get("doc")]
        logger.debug(
            f"query_by_account {role.name} {mask_address(key)} "
            f"result count: {len(result)}"
        )
        return result[:limit]

    async def get_contract_transactions(
        self, address: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Transactions that created or invoked `address` as contract."""
        return await self.query_by_account(IndexRole.CONTRACT, address, limit)

    async def get_block_transactions(
        self, address: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Transactions matched to `address` by the block view."""
        return await self.query_by_account(IndexRole.BLOCK, address, limit)

    async def get_from_transactions(
        self, address: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Transactions sent by `address`."""
        return await self.query_by_account(IndexRole.FROM, address, limit)

    async def get_to_transactions(
        self, address: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Transactions received by `address`."""
        return await self.query_by_account(IndexRole.TO, address, limit)

    async def _refresh(self, address: str) -> dict[IndexRole, bool]:
        """Query every view once; failures are logged, not raised."""
        roles = list(IndexRole)
        outcomes = await asyncio.gather(
            *(self.query_by_account(role, address, limit=1) for role in roles),
            return_exceptions=True,
        )

        status = {}
        for role, outcome in zip(roles, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    f"refresh of {role.design_doc} view for "
                    f"{mask_address(address)} failed: {outcome}"
                )
                status[role] = False
            else:
                status[role] = True
        return status

    def refresh_all(self, address: str) -> "asyncio.Task[dict[IndexRole, bool]]":
        """
        Trigger materialization of all four views for an address.

        Returns immediately. Await the returned task to wait until every
        view has been rebuilt; it resolves to a per-role success map.
        Must be called from a running event loop.

        Args:
            address: Account address

        Returns:
            Task completing when all views answered
        """
        task = asyncio.get_running_loop().create_task(
            self._refresh(address.lower())
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def refresh_all_nowait(self, address: str) -> None:
        """Fire-and-forget warm-up of all four views for an address."""
        self.refresh_all(address)

    async def wait_pending(self) -> None:
        """Wait for every refresh still in flight (e.g. on shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
