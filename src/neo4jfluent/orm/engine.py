# src/neo4jfluent/orm/engine.py
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple, cast

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession

from neo4jfluent.config import Neo4jSettings

logger = logging.getLogger(__name__)


class GraphEngine:
    """
    Owns the async Neo4j driver for one server and default database.

    The engine does not connect on construction. Call ``await engine.connect()``
    or use it as an async context manager. Gateways borrow sessions from it.
    """

    def __init__(
        self,
        uri: str,
        auth: Tuple[str, str],
        database: str = "neo4j",
        driver_config: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            uri: Bolt URI of the server, e.g. ``bolt://localhost:7687``.
            auth: ``(username, password)``.
            database: Database used by sessions when none is requested.
            driver_config: Extra keyword arguments for ``AsyncGraphDatabase.driver``.
        """
        self.uri: str = uri
        self.auth: Tuple[str, str] = auth
        self.default_database: str = database

        _driver_defaults = {
            "max_connection_lifetime": 3600,  # seconds
            "keep_alive": True,
            "user_agent": "Neo4jFluent/0.1.0",
        }
        self.driver_config: Dict[str, Any] = {**_driver_defaults, **(driver_config or {})}

        self._driver: Optional[AsyncDriver] = None
        self._is_connected: bool = False
        self._connection_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Neo4jSettings, **driver_config: Any) -> "GraphEngine":
        return cls(
            uri=settings.uri,
            auth=settings.auth,
            database=settings.database,
            driver_config=driver_config,
        )

    async def connect(self) -> None:
        """Create the driver and verify connectivity. Idempotent."""
        async with self._connection_lock:
            if self._is_connected and self._driver:
                return

            logger.info("Connecting to %s (default database '%s')", self.uri, self.default_database)
            try:
                self._driver = AsyncGraphDatabase.driver(
                    self.uri,
                    auth=self.auth,
                    **self.driver_config
                )
                await self._driver.verify_connectivity()
                self._is_connected = True
                logger.info("Connected to %s", self.uri)
            except Exception as e:
                self._driver = None
                self._is_connected = False
                logger.error("Connection to %s failed: %s", self.uri, e)
                raise ConnectionError(f"Failed to connect to Neo4j at {self.uri}: {e}") from e

    async def close(self) -> None:
        """Close the driver if one was created."""
        async with self._connection_lock:
            if self._driver is None:
                return
            if self._is_connected:
                logger.info("Closing connection to %s", self.uri)
            else:
                logger.warning("Driver for %s was not fully connected; closing it anyway", self.uri)
            await self._driver.close()
            self._driver = None
            self._is_connected = False
            logger.info("Connection to %s closed", self.uri)

    def get_session(self, database: Optional[str] = None) -> AsyncSession:
        """
        Open a session on ``database`` (the engine default when None).

        Raises:
            ConnectionError: if the engine is not connected.
        """
        if not self._driver or not self._is_connected:
            raise ConnectionError(
                f"GraphEngine for {self.uri} is not connected. Call `await engine.connect()` first."
            )
        return cast(AsyncSession, self._driver.session(database=database or self.default_database))

    @property
    def driver(self) -> AsyncDriver:
        if not self._driver or not self._is_connected:
            raise ConnectionError(
                f"GraphEngine for {self.uri} is not connected. Call `await engine.connect()` first."
            )
        return self._driver

    @property
    def connected(self) -> bool:
        return self._is_connected

    async def __aenter__(self) -> "GraphEngine":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def create_graph_engine(
    uri: str,
    auth: Tuple[str, str],
    database: str = "neo4j",
    **driver_config: Any
) -> GraphEngine:
    """
    Create a GraphEngine; connect it with ``await engine.connect()`` or
    ``async with engine:``.

    Args:
        uri: Bolt URI of the server.
        auth: ``(username, password)``.
        database: Default database for sessions.
        **driver_config: Extra driver options (user_agent, max_connection_pool_size, ...).
    """
    logger.debug("Creating GraphEngine for %s (database '%s')", uri, database)
    return GraphEngine(uri=uri, auth=auth, database=database, driver_config=driver_config)
