# core/db_manager.py
"""Own the single shared Neo4j connection used by the query gateway.

`Neo4jConnectionRegistry` creates its connection lazily on first use and
closes it only when the host application calls `shutdown()`. The connection
itself is produced by a connector (`connect` by default), which keeps the
driver behind the small `ConnectionHandle` protocol the gateway relies on.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import structlog
from neo4j import GraphDatabase  # type: ignore
from neo4j.exceptions import ServiceUnavailable  # type: ignore

import config
from config.settings import AdapterSettings
from core.exceptions import DatabaseConnectionError, create_error_context

logger = structlog.get_logger(__name__)


class ConnectionHandle(Protocol):
    async def query(self, text: str, parameters: dict[str, Any]) -> list[Any]: ...

    async def close(self) -> None: ...


Connector = Callable[[AdapterSettings], Awaitable[ConnectionHandle]]


class Neo4jConnection:
    """Connection handle over a synchronous Neo4j driver.

    Driver calls run in a worker thread so the async signature holds. The
    driver's own pool multiplexes concurrent queries on this handle.
    """

    def __init__(self, driver: Any, database: str | None = None):
        self.driver = driver
        self.database = database

    def _sync_query(self, text: str, parameters: dict[str, Any]) -> list[Any]:
        with self.driver.session(database=self.database) as session:
            result = session.run(text, parameters)
            return list(result)

    async def query(self, text: str, parameters: dict[str, Any]) -> list[Any]:
        return await asyncio.to_thread(self._sync_query, text, parameters)

    async def close(self) -> None:
        await asyncio.to_thread(self.driver.close)


async def connect(settings: AdapterSettings) -> Neo4jConnection:
    """Create a driver from `settings` and verify it can reach the server.

    Raises:
        DatabaseConnectionError: The driver could not be created or the server
            is unreachable or rejects the credentials.
    """
    uri = settings.neo4j_uri
    driver = None
    try:
        driver = GraphDatabase.driver(
            uri,
            auth=(settings.NEO4J_USER, settings.NEO4J_PASSWORD),
            connection_timeout=settings.NEO4J_CONNECTION_TIMEOUT,
        )
        await asyncio.to_thread(driver.verify_connectivity)
    except ServiceUnavailable as e:
        logger.critical("Neo4j service unavailable", uri=uri, error=str(e))
        if driver is not None:
            driver.close()
        raise DatabaseConnectionError(
            "Neo4j database is not available",
            details={
                "uri": uri,
                "original_error": str(e),
                "suggestion": "Ensure the Neo4j database is running and accessible",
            },
        ) from e
    except Exception as e:
        logger.critical("Unexpected error during Neo4j connection", uri=uri, error=str(e), exc_info=True)
        if driver is not None:
            driver.close()
        raise DatabaseConnectionError(
            "Database connection failed during connect",
            details=create_error_context(uri=uri, original_error=str(e), error_type=type(e).__name__),
        ) from e

    logger.info("Successfully connected to Neo4j", uri=uri, database=settings.NEO4J_DATABASE)
    return Neo4jConnection(driver, settings.NEO4J_DATABASE)


class Neo4jConnectionRegistry:
    """Process-wide holder of one lazily created connection handle."""

    def __init__(self, settings: AdapterSettings | None = None, connector: Connector = connect):
        self._settings = settings
        self._connector = connector
        self._connection: ConnectionHandle | None = None
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> AdapterSettings:
        # Resolved on use so config.reload() applies to the next connection.
        return self._settings or config.settings

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def get_connection(self) -> ConnectionHandle:
        """Return the shared handle, connecting on first use."""
        if self._connection is not None:
            return self._connection

        async with self._lock:
            if self._connection is None:
                logger.info("No active connection, connecting", uri=self.settings.neo4j_uri)
                self._connection = await self._connector(self.settings)
        return self._connection

    async def shutdown(self) -> None:
        """Close the shared handle. A later `get_connection()` reconnects."""
        async with self._lock:
            connection, self._connection = self._connection, None

        if connection is None:
            logger.info("No active Neo4j connection to close")
            return

        await connection.close()
        logger.info("Neo4j connection closed")


connection_registry = Neo4jConnectionRegistry()
