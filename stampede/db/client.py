"""Turso/libSQL database client wrapper."""

import asyncio
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from libsql_client import Client, ResultSet, create_client

from stampede.config import settings

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "file:stampede.db"


class DatabaseClient:
    """Wrapper for the libSQL async client.

    Supports both cloud Turso (with auth token) and local SQLite files.
    Every call is bounded by ``timeout`` seconds and raises ``TimeoutError``
    when the store does not answer in time. A statement that times out may
    still have been applied by the server.
    """

    def __init__(
        self,
        url: str | None = None,
        auth_token: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize client with connection parameters.

        Args:
            url: Database URL. Defaults to settings or local file.
            auth_token: Auth token for Turso cloud. Defaults to settings.
            timeout: Per-call timeout in seconds. Defaults to settings.
        """
        self.url = url or settings.turso_database_url or DEFAULT_DATABASE_URL
        self.auth_token = auth_token or settings.turso_auth_token
        self.timeout = timeout or settings.db_timeout_seconds
        self._client: Client | None = None

    async def connect(self) -> None:
        """Establish database connection."""
        if self._client is not None:
            return

        if self.auth_token and self.url.startswith("libsql://"):
            # Cloud Turso
            self._client = create_client(
                url=self.url,
                auth_token=self.auth_token,
            )
        else:
            # Local file database
            parsed = urlparse(self.url)
            if parsed.scheme == "file" and parsed.path:
                Path(parsed.path).parent.mkdir(parents=True, exist_ok=True)
            self._client = create_client(url=self.url)

        logger.info(f"Connected to database: {self.url}")

    def _connected(self) -> Client:
        if not self._client:
            msg = "Not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._client

    async def execute(
        self,
        sql: str,
        params: list[Any] | None = None,
    ) -> ResultSet:
        """Execute a SQL statement.

        Args:
            sql: SQL query with ? placeholders
            params: Query parameters

        Returns:
            ResultSet with rows and metadata

        Raises:
            TimeoutError: If the store does not answer within the timeout
        """
        client = self._connected()
        async with asyncio.timeout(self.timeout):
            return await client.execute(sql, params or [])

    async def execute_batch(self, statements: list[str]) -> None:
        """Execute multiple SQL statements in one transaction.

        Args:
            statements: List of SQL statements
        """
        client = self._connected()
        async with asyncio.timeout(self.timeout):
            await client.batch(statements)

    async def close(self) -> None:
        """Close the database connection."""
        if self._client:
            await self._client.close()
            self._client = None
            logger.info("Database connection closed")

    async def is_healthy(self) -> bool:
        """Check if database connection is healthy."""
        try:
            if not self._client:
                return False
            result = await self.execute("SELECT 1")
            return len(result.rows) == 1
        except Exception:
            return False
