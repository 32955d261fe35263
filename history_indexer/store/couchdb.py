"""
CouchDB HTTP client.

Implements DocumentStoreClient with aiohttp against the CouchDB API:
`_bulk_docs`, `_all_docs` with keys, single document GET/PUT and
`_design/{doc}/_view/{view}` queries.
"""

from typing import Any
from urllib.parse import quote

import aiohttp
from loguru import logger

from history_indexer.config.constants import (
    STORE_ERROR_CONFLICT,
    STORE_ERROR_NOT_FOUND,
)
from history_indexer.config.settings import settings
from history_indexer.utils.exceptions import (
    DocumentConflict,
    NotFound,
    StoreError,
)

from .client import BulkRow, FetchRow
from .timeouts import with_timeout


class CouchDBClient:
    """
    Async CouchDB client.

    Usage:
        async with CouchDBClient() as client:
            rows = await client.bulk_write("history", docs)
    """

    def __init__(
        self,
        base_url: str | None = None,
        auth: tuple[str, str] | None = None,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: Server URL (defaults to settings.couchdb_url)
            auth: (user, password) for basic auth
            timeout: Per-call timeout in seconds
            session: Existing aiohttp session (owned by the caller)
        """
        self.base_url = (base_url or settings.couchdb_url).rstrip("/")
        self.auth = auth if auth is not None else settings.store_auth
        self.timeout = timeout or settings.store_timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "CouchDBClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            auth = aiohttp.BasicAuth(*self.auth) if self.auth else None
            self._session = aiohttp.ClientSession(
                auth=auth,
                headers={"Content-Type": "application/json"},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _url(self, db_name: str, *parts: str) -> str:
        path = "/".join(quote(part, safe="") for part in (db_name, *parts))
        return f"{self.base_url}/{path}"

    async def _request(
        self,
        method: str,
        url: str,
        operation_name: str,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> tuple[int, Any]:
        """
        Send one request bounded by the client timeout.

        Returns:
            (HTTP status, decoded JSON body)

        Raises:
            StoreTimeoutError: If the call times out
            StoreError: On transport errors or undecodable bodies
        """
        async def call() -> tuple[int, Any]:
            session = await self._get_session()
            async with session.request(
                method, url, params=params, json=json
            ) as response:
                body = await response.json(content_type=None)
                return response.status, body

        try:
            return await with_timeout(
                call(), timeout=self.timeout, operation_name=operation_name
            )
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"{operation_name} failed: {e}")
            raise StoreError(f"{operation_name} failed: {e}") from e

    @staticmethod
    def _error_text(body: Any) -> str:
        if isinstance(body, dict):
            return f"{body.get('error')}: {body.get('reason')}"
        return str(body)

    async def bulk_write(
        self, db_name: str, documents: list[dict[str, Any]]
    ) -> list[BulkRow]:
        """
        Write documents through `_bulk_docs`.

        Raises:
            StoreError: If the request itself failed
        """
        status, body = await self._request(
            "POST",
            self._url(db_name, "_bulk_docs"),
            operation_name=f"bulk write to {db_name}",
            json={"docs": documents},
        )
        if status not in (200, 201, 202) or not isinstance(body, list):
            raise StoreError(
                f"bulk write to {db_name} rejected: HTTP {status} "
                f"{self._error_text(body)}"
            )
        return [
            BulkRow(
                id=row.get("id"),
                rev=row.get("rev"),
                error=row.get("error"),
                reason=row.get("reason"),
            )
            for row in body
        ]

    async def get(self, db_name: str, doc_id: str) -> dict[str, Any]:
        """
        Read one document.

        Raises:
            NotFound: If the document does not exist
            StoreError: On any other failure
        """
        status, body = await self._request(
            "GET",
            self._url(db_name, doc_id),
            operation_name=f"get {doc_id} from {db_name}",
        )
        if status == 404:
            raise NotFound(doc_id, db_name)
        if status != 200:
            raise StoreError(
                f"get {doc_id} from {db_name} failed: HTTP {status} "
                f"{self._error_text(body)}"
            )
        return body

    async def fetch_documents(
        self, db_name: str, keys: list[str]
    ) -> list[FetchRow]:
        """
        Read many documents through `_all_docs`.

        Missing and deleted keys come back as error rows, not exceptions.

        Raises:
            StoreError: If the request itself failed
        """
        status, body = await self._request(
            "POST",
            self._url(db_name, "_all_docs"),
            operation_name=f"fetch {len(keys)} keys from {db_name}",
            params={"include_docs": "true"},
            json={"keys": keys},
        )
        if status != 200 or not isinstance(body, dict):
            raise StoreError(
                f"fetch from {db_name} failed: HTTP {status} "
                f"{self._error_text(body)}"
            )

        rows = []
        for row in body.get("rows", []):
            value = row.get("value") or {}
            if "error" in row:
                rows.append(FetchRow(key=row["key"], error=row["error"]))
            elif value.get("deleted") or row.get("doc") is None:
                rows.append(
                    FetchRow(key=row["key"], error=STORE_ERROR_NOT_FOUND)
                )
            else:
                rows.append(
                    FetchRow(
                        key=row["key"],
                        doc=row["doc"],
                        rev=value.get("rev") or row["doc"].get("_rev"),
                    )
                )
        return rows

    async def insert(
        self, db_name: str, document: dict[str, Any], doc_id: str
    ) -> dict[str, Any]:
        """
        Create or update one document.

        Returns:
            Store response with the new `rev`

        Raises:
            DocumentConflict: If the revision token is stale or missing
            StoreError: On any other failure
        """
        status, body = await self._request(
            "PUT",
            self._url(db_name, doc_id),
            operation_name=f"insert {doc_id} into {db_name}",
            json=document,
        )
        if status == 409 or (
            isinstance(body, dict) and body.get("error") == STORE_ERROR_CONFLICT
        ):
            raise DocumentConflict(doc_id, db_name)
        if status not in (200, 201, 202):
            raise StoreError(
                f"insert {doc_id} into {db_name} failed: HTTP {status} "
                f"{self._error_text(body)}"
            )
        return body

    async def query_view(
        self,
        db_name: str,
        design_doc: str,
        view_name: str,
        keys: list[str],
        include_docs: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Query a view by keys.

        Raises:
            NotFound: If the design document or view does not exist
            StoreError: On any other failure
        """
        params = {"include_docs": "true" if include_docs else "false"}
        if limit is not None:
            params["limit"] = str(limit)

        view_path = f"_design/{design_doc}/_view/{view_name}"
        status, body = await self._request(
            "POST",
            f"{self._url(db_name)}/{view_path}",
            operation_name=f"query {view_path} on {db_name}",
            params=params,
            json={"keys": keys},
        )
        if status == 404:
            raise NotFound(view_path, db_name)
        if status != 200 or not isinstance(body, dict):
            raise StoreError(
                f"query {view_path} on {db_name} failed: HTTP {status} "
                f"{self._error_text(body)}"
            )
        return body.get("rows", [])
