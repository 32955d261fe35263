"""
Account model.

Per-address aggregate of transaction hashes. The transaction list only
grows: merges never drop a recorded hash.
"""

from collections.abc import Iterable

from pydantic import Field, field_validator

from history_indexer.models.base import StoreDocument


class Account(StoreDocument):
    """Account aggregate keyed by address."""

    id_attribute = "address"

    address: str
    transactions: list[str] = Field(default_factory=list)
    rev: str | None = None

    @field_validator("address")
    @classmethod
    def normalize_address(cls, v: str) -> str:
        """Addresses are keyed lowercase."""
        return v.lower()

    def add_transaction(self, tx_hash: str) -> bool:
        """
        Append a transaction hash if not recorded yet.

        Returns:
            True if the hash was appended
        """
        if tx_hash in self.transactions:
            return False
        self.transactions.append(tx_hash)
        return True

    def merge_stored(self, stored: list[str]) -> list[str]:
        """
        Place the stored list first, then local hashes it lacks.

        Args:
            stored: Transaction list of the stored revision

        Returns:
            Local hashes that were new relative to the store
        """
        known = set(stored)
        fresh = []
        for tx_hash in self.transactions:
            if tx_hash not in known:
                known.add(tx_hash)
                fresh.append(tx_hash)
        self.transactions = list(stored) + fresh
        return fresh


def key_by_address(accounts: Iterable[Account]) -> dict[str, Account]:
    """
    Key accounts by their stored id (the lowercase address).

    Accounts given under several spellings of one address are folded
    into the first one, keeping hash order.
    """
    keyed: dict[str, Account] = {}
    for account in accounts:
        existing = keyed.get(account.address)
        if existing is None:
            keyed[account.address] = account
            continue
        for tx_hash in account.transactions:
            existing.add_transaction(tx_hash)
    return keyed
