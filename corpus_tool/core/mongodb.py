"""
MongoDB connection and database client.
"""
import asyncio
import logging
from typing import Callable

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from corpus_tool.core.config import settings
from corpus_tool.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class MongoDB:
    """MongoDB connection manager.

    The client is created lazily on the first ``connect()`` and shared by every
    caller afterwards. Creation is single-flight: callers arriving while a
    connection attempt is in progress wait for that attempt instead of
    starting their own.
    """

    def __init__(
        self,
        url: str | None = None,
        database_name: str | None = None,
        collection_name: str | None = None,
        client_factory: Callable[..., AsyncIOMotorClient] = AsyncIOMotorClient,
    ):
        self.url = url or settings.mongodb_url
        self.database_name = database_name or settings.mongodb_database
        self.collection_name = collection_name or settings.mongodb_collection
        self._client_factory = client_factory
        self.client: AsyncIOMotorClient | None = None
        self.database = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self.database is not None

    async def connect(self):
        """Connect to MongoDB and return the database handle."""
        if self.database is not None:
            return self.database

        async with self._lock:
            # Another caller may have finished connecting while we waited
            if self.database is not None:
                return self.database

            client = self._client_factory(
                self.url, serverSelectionTimeoutMS=settings.mongodb_timeout_ms
            )
            try:
                await client.admin.command("ping")
                database = client[self.database_name]
                await database[self.collection_name].create_index(
                    "document_id", unique=True
                )
            except PyMongoError as e:
                client.close()
                logger.error(f"Could not connect to MongoDB: {e}")
                raise StoreUnavailableError(f"Could not connect to MongoDB: {e}") from e

            self.client = client
            self.database = database
            logger.info(f"Connected to MongoDB database '{self.database_name}'")
            return self.database

    async def disconnect(self):
        """Disconnect from MongoDB. Safe to call when not connected."""
        async with self._lock:
            if self.client:
                self.client.close()
                logger.info("Disconnected from MongoDB")
            self.client = None
            self.database = None

    async def ping(self) -> bool:
        """Check that the server answers, connecting first if needed."""
        try:
            await self.connect()
            await self.client.admin.command("ping")
        except (StoreUnavailableError, PyMongoError) as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    async def get_collection(self, collection_name: str | None = None):
        """Get a collection from the database, connecting first if needed."""
        database = await self.connect()
        return database[collection_name or self.collection_name]


# Global MongoDB instance
mongodb = MongoDB()
