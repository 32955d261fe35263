"""
Shortened identifiers for log output.

Batch logs name many accounts and transactions; only the ends of each
identifier are printed.
"""

# Characters kept at each end of a shortened identifier
_ADDRESS_HEAD, _ADDRESS_TAIL = 6, 4
_HASH_HEAD, _HASH_TAIL = 10, 6


def _shorten(value: str | None, head: int, tail: int) -> str:
    if not value or len(value) <= head + tail:
        return "***"
    return f"{value[:head]}...{value[-tail:]}"


def mask_address(address: str | None) -> str:
    """Account id in log form, e.g. ``0xa1a1...a1a1``."""
    return _shorten(address, _ADDRESS_HEAD, _ADDRESS_TAIL)


def mask_tx_hash(tx_hash: str | None) -> str:
    """Transaction id in log form: leading 10 and trailing 6 characters."""
    return _shorten(tx_hash, _HASH_HEAD, _HASH_TAIL)
