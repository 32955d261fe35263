"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

import re

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from history_indexer.config.constants import (
    DEFAULT_ACCOUNT_VIEW_NAME,
    DEFAULT_QUERY_LIMIT,
    RECONCILE_MAX_RETRIES,
    RECONCILE_RETRY_BASE_DELAY,
    STORE_TIMEOUT,
)

# CouchDB database names: lowercase, start with a letter
_DB_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_$()+/-]*$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Document store
    couchdb_url: str = "http://localhost:5984"
    couchdb_user: str | None = None
    couchdb_password: str | None = None
    history_db_name: str = "history"
    settings_db_name: str = "settings"
    index_view_name: str = DEFAULT_ACCOUNT_VIEW_NAME

    # Store call behaviour
    store_timeout: float = Field(
        default=STORE_TIMEOUT,
        gt=0,
        description="Timeout in seconds applied to every store round trip",
    )
    reconcile_max_retries: int = Field(
        default=RECONCILE_MAX_RETRIES,
        ge=0,
        description="Conflict retries per account batch before giving up",
    )
    reconcile_retry_base_delay: float = Field(
        default=RECONCILE_RETRY_BASE_DELAY,
        ge=0,
        description="Base delay in seconds for conflict retry backoff",
    )
    default_query_limit: int = Field(
        default=DEFAULT_QUERY_LIMIT,
        gt=0,
        description="Default number of documents returned by account queries",
    )

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = "logs/indexer.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("couchdb_url")
    @classmethod
    def validate_couchdb_url(cls, v: str) -> str:
        """Validate document store URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "COUCHDB_URL must start with http:// or https://"
            )
        return v.rstrip("/")

    @field_validator("history_db_name", "settings_db_name")
    @classmethod
    def validate_db_name(cls, v: str) -> str:
        """Validate CouchDB database name."""
        if not _DB_NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid database name: {v}. Must be lowercase and "
                "start with a letter."
            )
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "Settings":
        """Credentials must be set together."""
        if bool(self.couchdb_user) != bool(self.couchdb_password):
            raise ValueError(
                "COUCHDB_USER and COUCHDB_PASSWORD must be set together"
            )
        return self

    @property
    def store_auth(self) -> tuple[str, str] | None:
        """Basic auth pair for the document store, if configured."""
        if self.couchdb_user and self.couchdb_password:
            return self.couchdb_user, self.couchdb_password
        return None


# Global settings instance
settings = Settings()
