"""
Document store client contract.

Components receive a client instance at construction; nothing in the
indexer reaches for a process-wide store handle.
"""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class BulkRow:
    """Outcome of one document in a bulk write."""

    id: str
    rev: str | None = None
    error: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FetchRow:
    """Outcome of one key in a multi-key fetch."""

    key: str
    doc: dict[str, Any] | None = None
    rev: str | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.error is None and self.doc is not None


class DocumentStoreClient(Protocol):
    """Capabilities consumed from the document store."""

    async def bulk_write(
        self, db_name: str, documents: list[dict[str, Any]]
    ) -> list[BulkRow]:
        """Write documents in one request, outcomes in submission order."""
        ...

    async def get(self, db_name: str, doc_id: str) -> dict[str, Any]:
        """Read one document; raises NotFound."""
        ...

    async def fetch_documents(
        self, db_name: str, keys: list[str]
    ) -> list[FetchRow]:
        """Read many documents by key; missing keys yield error rows."""
        ...

    async def insert(
        self, db_name: str, document: dict[str, Any], doc_id: str
    ) -> dict[str, Any]:
        """Create or update one document; raises DocumentConflict."""
        ...

    async def query_view(
        self,
        db_name: str,
        design_doc: str,
        view_name: str,
        keys: list[str],
        include_docs: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query a view by keys, returning its rows."""
        ...
