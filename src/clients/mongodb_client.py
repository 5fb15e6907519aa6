"""MongoDB client for product document storage."""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection


class MongoDBClient:
    """Async MongoDB client with connection management.

    Wraps a Motor client bound to a single database and collection.
    Supports async context manager pattern for proper resource cleanup.
    """

    def __init__(
        self,
        url: str,
        database_name: str,
        collection_name: str,
        server_selection_timeout_ms: int = 5000,
    ):
        """Initialize the MongoDB client.

        Args:
            url: MongoDB connection string (mongodb:// or mongodb+srv://)
            database_name: Name of the database to use
            collection_name: Name of the collection to use
            server_selection_timeout_ms: How long connect() waits for a reachable server
        """
        self._url = url
        self._database_name = database_name
        self._collection_name = collection_name
        self._server_selection_timeout_ms = server_selection_timeout_ms

        self._client: Optional[AsyncIOMotorClient] = None
        self._collection: Optional[AsyncIOMotorCollection] = None

    async def connect(self) -> None:
        """Establish connection and verify the server is reachable."""
        self._client = AsyncIOMotorClient(
            self._url,
            serverSelectionTimeoutMS=self._server_selection_timeout_ms,
        )
        # Motor connects lazily; ping so misconfiguration fails at startup
        await self._client.admin.command("ping")

        self._collection = self._client[self._database_name][self._collection_name]

        await self._collection.create_index("name")

    async def close(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._collection = None

    async def __aenter__(self) -> "MongoDBClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit with cleanup."""
        await self.close()
        return False

    @property
    def collection(self) -> AsyncIOMotorCollection:
        """The connected products collection.

        Raises:
            RuntimeError: If client is not connected.
        """
        if self._collection is None:
            raise RuntimeError("MongoDB client not connected. Call connect() first.")
        return self._collection
