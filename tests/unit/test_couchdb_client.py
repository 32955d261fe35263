"""Unit tests for the CouchDB HTTP client."""

import asyncio
from typing import Any

import pytest

from history_indexer.store.couchdb import CouchDBClient
from history_indexer.utils.exceptions import (
    DocumentConflict,
    NotFound,
    StoreError,
    StoreTimeoutError,
)


class FakeResponse:
    """aiohttp response stand-in."""

    def __init__(self, status: int, body: Any, delay: float = 0) -> None:
        self.status = status
        self._body = body
        self._delay = delay

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def json(self, content_type: str | None = None) -> Any:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._body


class FakeSession:
    """Records requests and answers from a queue of responses."""

    def __init__(self, *responses: FakeResponse) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method, url, params=None, json=None) -> FakeResponse:
        self.requests.append(
            {"method": method, "url": url, "params": params, "json": json}
        )
        return self.responses.pop(0)

    async def close(self) -> None:
        self.closed = True


def client_with(*responses: FakeResponse, timeout: float = 5.0):
    session = FakeSession(*responses)
    client = CouchDBClient(
        base_url="http://couch:5984/", auth=None, timeout=timeout, session=session
    )
    return client, session


class TestBulkWrite:
    """Tests for _bulk_docs."""

    @pytest.mark.asyncio
    async def test_rows_are_mapped(self):
        """Accepted and rejected rows keep their order."""
        client, session = client_with(
            FakeResponse(
                201,
                [
                    {"ok": True, "id": "a", "rev": "1-x"},
                    {"id": "b", "error": "conflict", "reason": "Document update conflict."},
                ],
            )
        )

        rows = await client.bulk_write("history", [{"_id": "a"}, {"_id": "b"}])

        assert [row.id for row in rows] == ["a", "b"]
        assert rows[0].ok and rows[0].rev == "1-x"
        assert not rows[1].ok and rows[1].error == "conflict"
        assert session.requests[0]["method"] == "POST"
        assert session.requests[0]["url"] == "http://couch:5984/history/_bulk_docs"
        assert session.requests[0]["json"] == {"docs": [{"_id": "a"}, {"_id": "b"}]}

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        """A non-2xx answer fails the whole call."""
        client, _ = client_with(
            FakeResponse(500, {"error": "unknown_error", "reason": "boom"})
        )

        with pytest.raises(StoreError, match="HTTP 500"):
            await client.bulk_write("history", [{"_id": "a"}])


class TestSingleDocuments:
    """Tests for GET and PUT of one document."""

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self):
        """404 maps to NotFound."""
        client, _ = client_with(
            FakeResponse(404, {"error": "not_found", "reason": "missing"})
        )

        with pytest.raises(NotFound):
            await client.get("settings", "indexer-1")

    @pytest.mark.asyncio
    async def test_get_quotes_document_id(self):
        """Ids are escaped in the URL."""
        client, session = client_with(FakeResponse(200, {"_id": "a/b"}))

        await client.get("settings", "a/b")

        assert session.requests[0]["url"] == "http://couch:5984/settings/a%2Fb"

    @pytest.mark.asyncio
    async def test_insert_conflict(self):
        """409 maps to DocumentConflict."""
        client, _ = client_with(
            FakeResponse(409, {"error": "conflict", "reason": "Document update conflict."})
        )

        with pytest.raises(DocumentConflict):
            await client.insert("settings", {"a": 1}, "indexer-1")

    @pytest.mark.asyncio
    async def test_insert_returns_revision(self):
        """Successful PUT returns the store response."""
        client, session = client_with(
            FakeResponse(201, {"ok": True, "id": "indexer-1", "rev": "2-y"})
        )

        response = await client.insert("settings", {"a": 1}, "indexer-1")

        assert response["rev"] == "2-y"
        assert session.requests[0]["method"] == "PUT"


class TestFetchDocuments:
    """Tests for _all_docs."""

    @pytest.mark.asyncio
    async def test_missing_and_deleted_are_error_rows(self):
        """Only live documents come back as found."""
        client, session = client_with(
            FakeResponse(
                200,
                {
                    "rows": [
                        {
                            "key": "a",
                            "id": "a",
                            "value": {"rev": "3-a"},
                            "doc": {"_id": "a", "_rev": "3-a"},
                        },
                        {"key": "b", "error": "not_found"},
                        {
                            "key": "c",
                            "id": "c",
                            "value": {"rev": "2-c", "deleted": True},
                            "doc": None,
                        },
                    ]
                },
            )
        )

        rows = await client.fetch_documents("history", ["a", "b", "c"])

        assert [row.found for row in rows] == [True, False, False]
        assert rows[0].rev == "3-a"
        assert rows[2].error == "not_found"
        assert session.requests[0]["params"] == {"include_docs": "true"}
        assert session.requests[0]["json"] == {"keys": ["a", "b", "c"]}


class TestQueryView:
    """Tests for view queries."""

    @pytest.mark.asyncio
    async def test_query_params(self):
        """Keys go in the body, limit and include_docs in the query."""
        client, session = client_with(FakeResponse(200, {"rows": [{"id": "t"}]}))

        rows = await client.query_view("history", "from", "account", ["0xabc"], limit=3)

        assert rows == [{"id": "t"}]
        request = session.requests[0]
        assert request["url"] == (
            "http://couch:5984/history/_design/from/_view/account"
        )
        assert request["params"] == {"include_docs": "true", "limit": "3"}
        assert request["json"] == {"keys": ["0xabc"]}

    @pytest.mark.asyncio
    async def test_missing_view_raises_not_found(self):
        """A missing design document is an error, not an empty result."""
        client, _ = client_with(
            FakeResponse(404, {"error": "not_found", "reason": "missing"})
        )

        with pytest.raises(NotFound):
            await client.query_view("history", "to", "account", ["0xabc"])


class TestTransport:
    """Tests for timeouts and session ownership."""

    @pytest.mark.asyncio
    async def test_slow_call_times_out(self):
        """A hung call fails with StoreTimeoutError."""
        client, _ = client_with(FakeResponse(200, {}, delay=1.0), timeout=0.05)

        with pytest.raises(StoreTimeoutError):
            await client.get("settings", "indexer-1")

    @pytest.mark.asyncio
    async def test_timeout_is_a_store_error(self):
        """Callers catching StoreError also see timeouts."""
        client, _ = client_with(FakeResponse(200, {}, delay=1.0), timeout=0.05)

        with pytest.raises(StoreError):
            await client.fetch_documents("history", ["a"])

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self):
        """A caller-owned session outlives the client."""
        client, session = client_with()

        async with client:
            pass

        assert session.closed is False
