"""
Chain history indexer.

Persists blockchain transactions and per-account aggregates into a
CouchDB-style document store and serves "transactions touching account X"
queries from its secondary views.
"""

__version__ = "0.1.0"
