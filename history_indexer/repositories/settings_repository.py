"""
Indexer settings repository.

Single-document checkpoint state per indexer. Settings are replaced
wholesale, never merged.
"""

from loguru import logger

from history_indexer.models.indexer_settings import IndexerSettings
from history_indexer.repositories.base import BaseRepository
from history_indexer.store.client import DocumentStoreClient
from history_indexer.utils.exceptions import (
    DocumentConflict,
    NotFound,
    SettingsWriteFailure,
    StoreError,
)


class SettingsRepository(BaseRepository[IndexerSettings]):
    """Repository for indexer settings."""

    def __init__(self, client: DocumentStoreClient, db_name: str) -> None:
        """Initialize repository."""
        super().__init__(IndexerSettings, client, db_name)

    async def get(self, indexer_id: str) -> IndexerSettings:
        """
        Get settings for an indexer.

        Args:
            indexer_id: Indexer identity

        Returns:
            Stored settings, with their current revision

        Raises:
            NotFound: If no settings were saved for this indexer
        """
        logger.info(f"fetching settings for # {indexer_id}")
        try:
            settings = await self.get_by_id(indexer_id)
        except NotFound:
            logger.warning(f"no settings stored for indexer {indexer_id}")
            raise

        logger.info(f"settings for indexer {indexer_id} found: {settings.payload}")
        return settings

    async def save(self, settings: IndexerSettings) -> IndexerSettings:
        """
        Create or update settings (read current revision, then write).

        The new revision is stored on `settings`.

        Args:
            settings: Settings to persist

        Returns:
            The same settings object

        Raises:
            DocumentConflict: If another writer updated the same id in between
            SettingsWriteFailure: If the write failed for any other reason
        """
        logger.info(f"saving indexer settings {settings.id}: {settings.payload}")

        try:
            existing = await self.get_raw(settings.id)
            logger.info(
                f"settings for indexer {settings.id} exist, updating revision"
            )
            settings.rev = existing.get("_rev")
        except NotFound:
            settings.rev = None
        except StoreError as e:
            logger.error(f"error reading settings for indexer {settings.id}: {e}")
            raise SettingsWriteFailure(settings.id, str(e)) from e

        try:
            settings.rev = await self.put(settings)
        except DocumentConflict:
            logger.error(f"revision conflict saving settings for {settings.id}")
            raise
        except StoreError as e:
            logger.error(
                f"error creating settings for indexer : {settings.id}, {e}"
            )
            raise SettingsWriteFailure(settings.id, str(e)) from e

        logger.info(f"settings for indexer : {settings.id} inserted")
        return settings
