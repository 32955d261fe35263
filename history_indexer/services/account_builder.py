"""
Account aggregation.

Groups a batch of transactions into per-address account aggregates.
"""

from collections.abc import Iterable

from history_indexer.models.account import Account
from history_indexer.models.transaction import Transaction


def build_accounts(transactions: Iterable[Transaction]) -> dict[str, Account]:
    """
    Group transaction hashes by every address they touch.

    Sender, recipient and created contract each get the hash, in
    first-seen order, once per address.

    Args:
        transactions: Transactions of one write epoch

    Returns:
        Account aggregates keyed by address
    """
    accounts: dict[str, Account] = {}
    for tx in transactions:
        for address in tx.addresses:
            account = accounts.get(address)
            if account is None:
                account = accounts[address] = Account(address=address)
            account.add_transaction(tx.hash)
    return accounts
