"""
Base repository.

Common single-document operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from history_indexer.models.base import StoreDocument
from history_indexer.store.client import DocumentStoreClient

# Generic type for model
ModelType = TypeVar("ModelType", bound=StoreDocument)


class BaseRepository(Generic[ModelType]):
    """
    Base repository bound to one database and one record type.

    Type Parameters:
        ModelType: StoreDocument subclass

    Example:
        class AccountRepository(BaseRepository[Account]):
            def __init__(self, client: DocumentStoreClient, db_name: str):
                super().__init__(Account, client, db_name)
    """

    def __init__(
        self,
        model: type[ModelType],
        client: DocumentStoreClient,
        db_name: str,
    ) -> None:
        """
        Initialize repository.

        Args:
            model: Record class
            client: Document store client
            db_name: Database holding the records
        """
        self.model = model
        self.client = client
        self.db_name = db_name

    async def get_by_id(self, doc_id: str) -> ModelType:
        """
        Get record by document id.

        Raises:
            NotFound: If the document does not exist
        """
        document = await self.client.get(self.db_name, doc_id)
        return self.model.from_document(document)

    async def get_raw(self, doc_id: str) -> dict[str, Any]:
        """
        Get the stored document as-is.

        Raises:
            NotFound: If the document does not exist
        """
        return await self.client.get(self.db_name, doc_id)

    async def put(self, record: ModelType) -> str:
        """
        Create or update one record.

        Returns:
            New revision token

        Raises:
            DocumentConflict: If the record's revision is stale
        """
        response = await self.client.insert(
            self.db_name, record.to_document(), record.doc_id
        )
        return response.get("rev")
