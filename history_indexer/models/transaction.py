"""
Transaction model.

Immutable snapshot of one on-chain transaction joined with its block and
receipt. The transaction hash is the document identifier.
"""

import re
from collections.abc import Mapping
from typing import Any

from eth_utils import to_normalized_address
from pydantic import ConfigDict, Field, field_validator
from web3 import Web3

from history_indexer.models.base import StoreDocument

_HASH_PATTERN = re.compile(r"^0x[0-9a-f]{64}$")


def _hex(value: Any) -> Any:
    """Hex-encode byte values (HexBytes from web3), lowercase strings."""
    if isinstance(value, bytes | bytearray):
        return Web3.to_hex(value)
    if isinstance(value, str):
        return value.lower()
    return value


def _error_flag(receipt: Mapping[str, Any]) -> int:
    """Receipt error flag: explicit isError, else derived from status."""
    if receipt.get("isError") is not None:
        return int(receipt["isError"])
    status = receipt.get("status")
    if status is None:
        return 0
    return 0 if int(status) == 1 else 1


class Transaction(StoreDocument):
    """
    On-chain transaction record.

    Created once by ingestion from three upstream records, written once,
    never mutated.
    """

    id_attribute = "hash"

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", frozen=True
    )

    # Block
    block_number: int = Field(alias="blockNumber", ge=0)
    timestamp: int = Field(alias="timeStamp", ge=0)
    block_hash: str = Field(alias="blockHash")
    confirmations: int | None = None

    # Transaction
    hash: str
    nonce: int = Field(ge=0)
    transaction_index: int = Field(alias="transactionIndex", ge=0)
    from_address: str = Field(alias="from")
    to_address: str | None = Field(default=None, alias="to")
    value: int = Field(ge=0)
    gas: int = Field(ge=0)
    gas_price: int | None = Field(default=None, alias="gasPrice")
    input: str = "0x"

    # Receipt
    is_error: int = Field(default=0, alias="isError")
    gas_used: int | None = Field(default=None, alias="gasUsed")
    cumulative_gas_used: int | None = Field(
        default=None, alias="cumulativeGasUsed"
    )
    contract_address: str | None = Field(
        default=None, alias="contractAddress"
    )

    @field_validator("hash", "block_hash", mode="before")
    @classmethod
    def validate_hash(cls, v: Any) -> str:
        """Hashes are stored as lowercase 0x-prefixed 32-byte hex."""
        v = _hex(v)
        if not isinstance(v, str) or not _HASH_PATTERN.match(v):
            raise ValueError(f"Invalid hash: {v}")
        return v

    @field_validator(
        "from_address", "to_address", "contract_address", mode="before"
    )
    @classmethod
    def validate_address(cls, v: Any) -> str | None:
        """Addresses are stored lowercase so view keys are stable."""
        if v is None or v == "":
            return None
        try:
            return to_normalized_address(v)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid address: {v}") from exc

    @field_validator("input", mode="before")
    @classmethod
    def validate_input(cls, v: Any) -> str:
        """Input payload is kept as hex."""
        return _hex(v) if v is not None else "0x"

    @classmethod
    def from_records(
        cls,
        transaction: Mapping[str, Any],
        block: Mapping[str, Any],
        receipt: Mapping[str, Any],
    ) -> "Transaction":
        """
        Build a record from RPC transaction, block and receipt data.

        Args:
            transaction: eth_getTransaction result
            block: eth_getBlock result for the containing block
            receipt: eth_getTransactionReceipt result

        Returns:
            Transaction record
        """
        return cls(
            block_number=block["number"],
            timestamp=block["timestamp"],
            block_hash=block["hash"],
            confirmations=block.get("confirmations"),
            hash=transaction["hash"],
            nonce=transaction["nonce"],
            transaction_index=transaction["transactionIndex"],
            from_address=transaction["from"],
            to_address=transaction.get("to"),
            value=transaction["value"],
            gas=transaction["gas"],
            gas_price=transaction.get("gasPrice"),
            input=transaction.get("input"),
            is_error=_error_flag(receipt),
            gas_used=receipt.get("gasUsed"),
            cumulative_gas_used=receipt.get("cumulativeGasUsed"),
            contract_address=receipt.get("contractAddress"),
        )

    @property
    def addresses(self) -> list[str]:
        """Every account this transaction touches, in role order."""
        result = []
        for address in (
            self.from_address, self.to_address, self.contract_address
        ):
            if address and address not in result:
                result.append(address)
        return result

    @property
    def is_contract_creation(self) -> bool:
        """Check if transaction created a contract."""
        return self.to_address is None
