"""
Application constants.

Centralized constants for the indexer.
"""

# ========================================================================
# DOCUMENT STORE CONSTANTS
# ========================================================================

# Store operation timeout (in seconds)
STORE_TIMEOUT = 30.0

# Conflict retry settings for account write-back
RECONCILE_MAX_RETRIES = 3
RECONCILE_RETRY_BASE_DELAY = 0.5  # 0.5s, 1s, 2s...

# Store error names (CouchDB error field of a bulk/fetch row)
STORE_ERROR_CONFLICT = "conflict"
STORE_ERROR_NOT_FOUND = "not_found"
STORE_ERROR_FORBIDDEN = "forbidden"

# Document kinds submitted to the bulk writer
KIND_TRANSACTIONS = "transactions"
KIND_ACCOUNTS = "accounts"

# ========================================================================
# ACCOUNT INDEX CONSTANTS
# ========================================================================

# Design documents holding one view each, keyed by account address
CONTRACT_DESIGN_DOC = "contract"
BLOCK_DESIGN_DOC = "block"
FROM_DESIGN_DOC = "from"
TO_DESIGN_DOC = "to"

DEFAULT_ACCOUNT_VIEW_NAME = "account"
DEFAULT_QUERY_LIMIT = 10

# Ids logged in failure messages before truncation
MAX_IDS_IN_ERROR = 5
