"""
Write and reconciliation outcomes.

Plain result types returned by the bulk writer, the reconciler and the
sync services.
"""

from dataclasses import dataclass, field

from history_indexer.config.constants import STORE_ERROR_CONFLICT


@dataclass(frozen=True)
class RejectedDocument:
    """One document the store refused within a bulk write."""

    id: str
    error: str
    reason: str | None = None

    @property
    def is_conflict(self) -> bool:
        """Document exists with another revision (or already exists)."""
        return self.error == STORE_ERROR_CONFLICT


@dataclass(frozen=True)
class PartialRejection:
    """
    Subset of an otherwise successful batch refused by the store.

    Expected steady-state outcome (re-indexing, overlapping ranges), so it
    is logged rather than raised.
    """

    kind: str
    submitted: int
    rejected_ids: list[str]

    @property
    def count(self) -> int:
        return len(self.rejected_ids)


@dataclass
class BulkWriteResult:
    """Per-document outcome of one bulk write, in submission order."""

    kind: str
    submitted: int
    accepted: list[str] = field(default_factory=list)
    rejected: list[RejectedDocument] = field(default_factory=list)
    # New revision per accepted id
    revisions: dict[str, str] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def rejected_ids(self) -> list[str]:
        return [doc.id for doc in self.rejected]

    @property
    def conflicted_ids(self) -> list[str]:
        return [doc.id for doc in self.rejected if doc.is_conflict]

    @property
    def all_accepted(self) -> bool:
        return not self.rejected

    @property
    def partial_rejection(self) -> PartialRejection | None:
        """Rejection summary, None when every document was accepted."""
        if not self.rejected:
            return None
        return PartialRejection(
            kind=self.kind,
            submitted=self.submitted,
            rejected_ids=self.rejected_ids,
        )


@dataclass
class ReconciliationReport:
    """Which addresses of a batch were found in the store."""

    found: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    # Hashes per address that the stored revision did not have yet
    pending: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class AccountSyncResult:
    """Outcome of writing an account batch with conflict retries."""

    saved: list[str] = field(default_factory=list)
    rejected: list[RejectedDocument] = field(default_factory=list)
    attempts: int = 0

    @property
    def rejected_ids(self) -> list[str]:
        return [doc.id for doc in self.rejected]


@dataclass
class EpochSummary:
    """Counts for one transaction/account write epoch."""

    transactions_submitted: int = 0
    transactions_rejected: int = 0
    accounts_saved: int = 0
    accounts_rejected: int = 0
    refreshed_addresses: int = 0
    elapsed_seconds: float = 0.0
