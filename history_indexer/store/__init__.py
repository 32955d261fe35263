"""
Document store access.

`DocumentStoreClient` is the capability set the indexer consumes;
`CouchDBClient` implements it over the CouchDB HTTP API.
"""

from .client import BulkRow, DocumentStoreClient, FetchRow
from .couchdb import CouchDBClient
from .timeouts import with_timeout

__all__ = [
    "BulkRow",
    "CouchDBClient",
    "DocumentStoreClient",
    "FetchRow",
    "with_timeout",
]
