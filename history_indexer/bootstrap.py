"""
Service wiring.

Builds the indexer components around one store client and tears them
down on shutdown. Components receive the client explicitly; nothing here
is a process-wide singleton.
"""

from dataclasses import dataclass

from loguru import logger

from history_indexer.config.settings import Settings, settings as default_settings
from history_indexer.repositories.settings_repository import SettingsRepository
from history_indexer.services.account_tx_index import AccountTransactionIndex
from history_indexer.services.history_sync import HistorySyncService
from history_indexer.store.client import DocumentStoreClient
from history_indexer.store.couchdb import CouchDBClient


@dataclass
class IndexerServices:
    """Components sharing one document store client."""

    client: DocumentStoreClient
    history: HistorySyncService
    index: AccountTransactionIndex
    indexer_settings: SettingsRepository


def create_services(
    client: DocumentStoreClient | None = None,
    config: Settings | None = None,
) -> IndexerServices:
    """
    Build indexer services.

    Args:
        client: Store client (a CouchDBClient from config when omitted)
        config: Settings (defaults to the loaded environment settings)

    Returns:
        Wired services
    """
    config = config or default_settings
    if client is None:
        client = CouchDBClient(
            base_url=config.couchdb_url,
            auth=config.store_auth,
            timeout=config.store_timeout,
        )

    history = HistorySyncService(
        client,
        config.history_db_name,
        max_retries=config.reconcile_max_retries,
        retry_base_delay=config.reconcile_retry_base_delay,
        view_name=config.index_view_name,
        default_limit=config.default_query_limit,
    )
    services = IndexerServices(
        client=client,
        history=history,
        index=history.index,
        indexer_settings=SettingsRepository(client, config.settings_db_name),
    )
    logger.info(
        f"Indexer services initialized (history={config.history_db_name}, "
        f"settings={config.settings_db_name})"
    )
    return services


async def shutdown_services(services: IndexerServices) -> None:
    """Wait for in-flight view refreshes and close the store client."""
    logger.info("Graceful shutdown initiated...")

    await services.history.close()

    close = getattr(services.client, "close", None)
    if close is not None:
        await close()
        logger.info("Document store client closed")

    logger.info("Graceful shutdown complete")
