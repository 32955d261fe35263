"""Unit tests for document models."""

import pytest
from hexbytes import HexBytes
from pydantic import ValidationError

from history_indexer.models.account import Account
from history_indexer.models.indexer_settings import IndexerSettings
from history_indexer.models.transaction import Transaction
from tests.factories import ALICE, BOB, CONTRACT, make_transaction, tx_hash


def rpc_records(status: int = 1, to: str | None = BOB):
    """Transaction, block and receipt as web3 returns them."""
    block = {
        "number": 17_000_000,
        "timestamp": 1_700_000_000,
        "hash": HexBytes("0x" + "ee" * 32),
    }
    transaction = {
        "hash": HexBytes(tx_hash(7)),
        "nonce": 3,
        "transactionIndex": 0,
        "from": "0xA1a1A1A1a1a1A1a1a1a1a1a1a1A1a1a1A1A1A1A1",
        "to": to,
        "value": 5,
        "gas": 90000,
        "gasPrice": 2 * 10**9,
        "input": HexBytes("0xa9059cbb"),
    }
    receipt = {
        "status": status,
        "gasUsed": 50000,
        "cumulativeGasUsed": 150000,
        "contractAddress": None if to else CONTRACT,
    }
    return transaction, block, receipt


class TestTransaction:
    """Tests for the Transaction record."""

    def test_from_records_joins_block_and_receipt(self):
        """Block and receipt fields land on the record."""
        tx = Transaction.from_records(*rpc_records())

        assert tx.block_number == 17_000_000
        assert tx.block_hash == "0x" + "ee" * 32
        assert tx.hash == tx_hash(7)
        assert tx.gas_used == 50000
        assert tx.cumulative_gas_used == 150000
        assert tx.input == "0xa9059cbb"
        assert tx.is_error == 0

    def test_addresses_are_lowercased(self):
        """Checksummed addresses are stored lowercase."""
        tx = Transaction.from_records(*rpc_records())

        assert tx.from_address == ALICE

    def test_failed_receipt_sets_error_flag(self):
        """Receipt status 0 maps to isError 1."""
        tx = Transaction.from_records(*rpc_records(status=0))

        assert tx.is_error == 1

    def test_contract_creation(self):
        """Contract creation has no recipient and a created contract."""
        tx = Transaction.from_records(*rpc_records(to=None))

        assert tx.to_address is None
        assert tx.is_contract_creation
        assert tx.contract_address == CONTRACT
        assert tx.addresses == [ALICE, CONTRACT]

    def test_to_document_uses_stored_names(self):
        """Stored document uses hash as _id and the upstream field names."""
        tx = make_transaction(1)

        doc = tx.to_document()

        assert doc["_id"] == tx.hash
        assert doc["from"] == ALICE
        assert doc["to"] == BOB
        assert doc["blockNumber"] == tx.block_number
        assert "_rev" not in doc

    def test_from_document_roundtrip(self):
        """A stored document validates back into an equal record."""
        tx = make_transaction(2)
        doc = tx.to_document()
        doc["_rev"] = "1-abc"

        assert Transaction.from_document(doc) == tx

    def test_invalid_hash_rejected(self):
        """Hashes must be 32-byte hex."""
        doc = make_transaction(1).to_document()

        with pytest.raises(ValidationError):
            Transaction.model_validate({**doc, "hash": "0x1234"})

    def test_invalid_address_rejected(self):
        """Sender must be a valid address."""
        with pytest.raises(ValidationError):
            make_transaction(1, sender="not-an-address")

    def test_record_is_immutable(self):
        """Transactions are never mutated after creation."""
        tx = make_transaction(1)

        with pytest.raises(ValidationError):
            tx.value = 0


class TestAccount:
    """Tests for the Account aggregate."""

    def test_merge_stored_places_stored_first(self):
        """Stored history comes first, new hashes after."""
        account = Account(address=ALICE, transactions=["0x3", "0x4"])

        fresh = account.merge_stored(["0x1", "0x2"])

        assert account.transactions == ["0x1", "0x2", "0x3", "0x4"]
        assert fresh == ["0x3", "0x4"]

    def test_merge_stored_skips_known_hashes(self):
        """Re-indexing an overlapping range does not duplicate hashes."""
        account = Account(address=ALICE, transactions=["0x2", "0x3"])

        fresh = account.merge_stored(["0x1", "0x2"])

        assert account.transactions == ["0x1", "0x2", "0x3"]
        assert fresh == ["0x3"]

    def test_add_transaction_once(self):
        """A hash is recorded once."""
        account = Account(address=ALICE)

        assert account.add_transaction("0x1") is True
        assert account.add_transaction("0x1") is False
        assert account.transactions == ["0x1"]

    def test_document_carries_revision_only_when_known(self):
        """New accounts are written without _rev."""
        account = Account(address=ALICE.upper().replace("0X", "0x"))

        assert account.address == ALICE
        assert "_rev" not in account.to_document()

        account.rev = "2-xyz"
        doc = account.to_document()
        assert doc["_id"] == ALICE
        assert doc["_rev"] == "2-xyz"

    def test_from_document_keeps_revision(self):
        """Fetched accounts carry the stored revision."""
        account = Account.from_document(
            {"_id": ALICE, "_rev": "3-a", "address": ALICE, "transactions": ["0x1"]}
        )

        assert account.rev == "3-a"
        assert account.transactions == ["0x1"]


class TestIndexerSettings:
    """Tests for the IndexerSettings record."""

    def test_payload_is_preserved(self):
        """Extra keys survive a document round trip."""
        settings = IndexerSettings(id="indexer-1", last_processed_block=42)

        doc = settings.to_document()
        restored = IndexerSettings.from_document({**doc, "_rev": "1-a"})

        assert doc["_id"] == "indexer-1"
        assert restored.payload == {"last_processed_block": 42}
        assert restored.rev == "1-a"
        assert "_id" not in restored.payload
