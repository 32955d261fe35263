"""
Bulk Writer.

Submits a batch of documents of one kind in a single request and
classifies each outcome as accepted or rejected.
"""

import time
from typing import Any

from loguru import logger

from history_indexer.models.base import ID_FIELD
from history_indexer.models.results import BulkWriteResult, RejectedDocument
from history_indexer.store.client import DocumentStoreClient
from history_indexer.utils.exceptions import BulkWriteFailure, StoreError


class BulkWriter:
    """
    Batch writer for one database.

    Rejections (document already present, stale revision, validation) are
    an expected steady-state outcome and are only logged; a failure of the
    request itself raises BulkWriteFailure.
    """

    def __init__(self, client: DocumentStoreClient, db_name: str) -> None:
        """
        Initialize writer.

        Args:
            client: Document store client
            db_name: Target database
        """
        self.client = client
        self.db_name = db_name

    async def write(
        self, kind: str, documents: list[dict[str, Any]]
    ) -> BulkWriteResult:
        """
        Write a batch and classify per-document outcomes.

        Args:
            kind: Document kind for logging (transactions, accounts)
            documents: Documents, each with a unique `_id`

        Returns:
            Outcome per document, in submission order

        Raises:
            ValueError: If identifiers are missing or not unique
            BulkWriteFailure: If the batch call itself failed
        """
        ids = [doc.get(ID_FIELD) for doc in documents]
        if any(not doc_id for doc_id in ids):
            raise ValueError(f"Every {kind} document needs an {ID_FIELD}")
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate identifiers in {kind} batch")

        result = BulkWriteResult(kind=kind, submitted=len(documents))
        if not documents:
            return result

        start = time.perf_counter()
        logger.info(f"saving {len(documents)} {kind}")

        try:
            rows = await self.client.bulk_write(self.db_name, documents)
        except StoreError as e:
            logger.error(f"Bulk write of {len(documents)} {kind} failed: {e}")
            raise BulkWriteFailure(kind, ids, str(e)) from e

        if len(rows) != len(documents):
            raise BulkWriteFailure(
                kind,
                ids,
                f"store answered {len(rows)} rows for {len(documents)} documents",
            )

        for doc_id, row in zip(ids, rows):
            if row.ok:
                result.accepted.append(doc_id)
                if row.rev:
                    result.revisions[doc_id] = row.rev
            else:
                result.rejected.append(
                    RejectedDocument(
                        id=row.id or doc_id, error=row.error, reason=row.reason
                    )
                )

        result.elapsed_seconds = time.perf_counter() - start

        rejection = result.partial_rejection
        if rejection:
            logger.info(
                f"#{rejection.count} of {rejection.submitted} {kind} rejected: "
                f"{rejection.rejected_ids}"
            )
        logger.info(
            f"saved {len(result.accepted)}/{len(documents)} {kind}, "
            f"duration in sec: {result.elapsed_seconds:.3f}"
        )
        return result
