"""
Store exception types.

Every failure is scoped to the batch or call that triggered it. Only
conflicts on account write-back are retried (see AccountSyncService);
everything else is surfaced to the caller, which owns retry policy.
"""

from collections.abc import Iterable

from history_indexer.config.constants import MAX_IDS_IN_ERROR


def format_ids(ids: Iterable[str], limit: int = MAX_IDS_IN_ERROR) -> str:
    """
    Render a short, comma separated list of identifiers for messages.

    Args:
        ids: Identifiers to render
        limit: Max identifiers shown before truncation

    Returns:
        Joined identifiers, with "(+N more)" when truncated
    """
    ids = list(ids)
    shown = ", ".join(ids[:limit])
    if len(ids) > limit:
        shown += f" (+{len(ids) - limit} more)"
    return shown


class StoreError(Exception):
    """Base exception for document store errors."""
    pass


class StoreTimeoutError(StoreError):
    """Raised when a store round trip exceeds its timeout."""
    pass


class NotFound(StoreError):
    """Raised when a requested document does not exist."""

    def __init__(self, doc_id: str, db_name: str | None = None) -> None:
        self.doc_id = doc_id
        self.db_name = db_name
        where = f" in {db_name}" if db_name else ""
        super().__init__(f"Document {doc_id} not found{where}")


class DocumentConflict(StoreError):
    """Raised when a write presents a stale or missing revision token."""

    def __init__(self, doc_id: str, db_name: str | None = None) -> None:
        self.doc_id = doc_id
        self.db_name = db_name
        where = f" in {db_name}" if db_name else ""
        super().__init__(f"Revision conflict for document {doc_id}{where}")


class BulkWriteFailure(StoreError):
    """
    Raised when a bulk write request did not complete.

    The caller must assume no document of the batch is guaranteed
    persisted.
    """

    def __init__(self, kind: str, ids: list[str], reason: str) -> None:
        self.kind = kind
        self.ids = ids
        self.reason = reason
        super().__init__(
            f"Bulk write of {len(ids)} {kind} failed: {reason} "
            f"[{format_ids(ids)}]"
        )


class ReconciliationFailure(StoreError):
    """Raised when the multi-key pre-fetch of an account batch fails."""

    def __init__(self, addresses: list[str], reason: str) -> None:
        self.addresses = addresses
        self.reason = reason
        super().__init__(
            f"Reconciliation of {len(addresses)} accounts failed: {reason} "
            f"[{format_ids(addresses)}]"
        )


class ConflictRetryExhausted(StoreError):
    """Raised when account conflicts persist after all retries."""

    def __init__(self, addresses: list[str], attempts: int) -> None:
        self.addresses = addresses
        self.attempts = attempts
        super().__init__(
            f"{len(addresses)} accounts still conflicted after {attempts} "
            f"attempts [{format_ids(addresses)}]"
        )


class IndexQueryFailure(StoreError):
    """
    Raised when an account view query fails.

    Distinct from an empty result: callers must not report this as
    "no transactions found".
    """

    def __init__(self, view: str, address: str, reason: str) -> None:
        self.view = view
        self.address = address
        self.reason = reason
        super().__init__(
            f"Query of view {view} for account {address} failed: {reason}"
        )


class SettingsWriteFailure(StoreError):
    """Raised when indexer settings could not be written."""

    def __init__(self, settings_id: str, reason: str) -> None:
        self.settings_id = settings_id
        self.reason = reason
        super().__init__(
            f"Error saving settings for indexer {settings_id}: {reason}"
        )
