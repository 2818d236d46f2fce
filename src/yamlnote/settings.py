"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the yamlnote engine and its REST API server.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # REST API
    api_server_host: str = "localhost"
    api_server_port: int = 8000
    port: int | None = None  # platform-injected PORT; takes precedence over api_server_port
    max_request_bytes: int = 5 * 1024 * 1024

    @property
    def effective_port(self) -> int:
        """Return the port to listen on (``PORT`` takes precedence)."""
        return self.port if self.port is not None else self.api_server_port

    # Parser limits
    max_document_size: int = 5_000_000  # characters
    max_node_count: int = 50_000
    max_depth: int = 64

    # Schema cache
    schema_cache_size: int = 64  # 0 disables caching
