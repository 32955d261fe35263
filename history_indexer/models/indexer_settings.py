"""
Indexer settings model.

Single checkpoint document per indexer identity. The payload is opaque:
any extra key is kept and written back as-is.
"""

from typing import Any

from pydantic import ConfigDict

from history_indexer.models.base import StoreDocument


class IndexerSettings(StoreDocument):
    """Per-indexer checkpoint state (last processed block, etc.)."""

    id_attribute = "id"

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    rev: str | None = None

    @property
    def payload(self) -> dict[str, Any]:
        """Opaque key/value payload."""
        return dict(self.model_extra or {})
