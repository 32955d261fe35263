"""
Store call timeouts.

Each store round trip gets a deadline so a stalled CouchDB request fails
its batch instead of stalling the write path.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from loguru import logger

from history_indexer.config.constants import STORE_TIMEOUT
from history_indexer.utils.exceptions import StoreTimeoutError

T = TypeVar("T")


async def with_timeout(
    call: Awaitable[T],
    timeout: float = STORE_TIMEOUT,
    operation_name: str = "store call",
) -> T:
    """
    Await one store request under a deadline.

    Cancellation of the caller still propagates into the request.

    Args:
        call: Pending store request
        timeout: Deadline in seconds
        operation_name: Request description used in the error message

    Returns:
        Whatever the request returned

    Raises:
        StoreTimeoutError: If the deadline passed first
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError as e:
        logger.error(f"store deadline of {timeout}s exceeded: {operation_name}")
        raise StoreTimeoutError(
            f"{operation_name}: no answer from the store within {timeout}s"
        ) from e
