"""
Snippet Manager Backend — Document Store Adapter
==================================================

What:  Owns the MongoDB client and exposes single-document operations
       against one named collection.
How:   Wraps motor's AsyncIOMotorClient. Every driver failure is converted
       to StoreError on the spot; nothing is retried.
Who:   Created by the app lifespan, injected into SnippetRepository through
       FastAPI dependencies (see dependencies.py).
When:  connect() once at startup, disconnect() once at shutdown; the
       operations run per request.

Concurrency:
    A single MongoStorage instance is shared by every in-flight request.
    The motor client keeps its own connection pool and is safe for
    concurrent use, so the adapter holds no locks.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from snippet_manager.exceptions import (
    DisconnectError,
    StorageConnectionError,
    StoreError,
)

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

_FAILURE_MESSAGES = {
    "insert": "Failed to save code snippet",
    "find_one": "Failed to fetch snippet",
    "find": "Failed to fetch snippets",
    "update": "Failed to update snippet",
    "delete": "Failed to delete snippet",
}


class MongoStorage:
    """
    Connection holder plus CRUD primitives for a single collection.

    Attributes:
        uri:              MongoDB connection string
        database_name:    Database holding the collection
        collection_name:  The one collection every operation targets
        timeout_ms:       Server-selection timeout handed to the driver
    """

    def __init__(
        self,
        uri: str,
        database_name: str,
        collection_name: str,
        timeout_ms: int = 5000,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self.uri = uri
        self.database_name = database_name
        self.collection_name = collection_name
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._collection: Optional[Any] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """
        Create the client and confirm the server answers a ping.

        motor connects lazily, so without the ping a bad URI would only
        surface on the first request.

        Raises:
            StorageConnectionError: client creation or ping failed
        """
        if self._client is not None:
            return
        try:
            client = self._client_factory(
                self.uri,
                tz_aware=True,
                serverSelectionTimeoutMS=self.timeout_ms,
            )
        except (PyMongoError, ValueError) as e:
            raise StorageConnectionError(
                message=f"Invalid MongoDB connection settings: {e}",
                context={"database": self.database_name, "error_type": type(e).__name__},
            ) from e

        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise StorageConnectionError(
                message=f"Could not connect to MongoDB: {e}",
                context={"database": self.database_name, "error_type": type(e).__name__},
            ) from e

        self._client = client
        self._collection = client[self.database_name][self.collection_name]
        logger.info(
            "Connected to MongoDB (database=%s, collection=%s)",
            self.database_name,
            self.collection_name,
        )

    async def disconnect(self) -> None:
        """
        Release the client and its connection pool. No-op when not connected.

        Raises:
            DisconnectError: the driver failed while closing
        """
        if self._client is None:
            return
        client, self._client, self._collection = self._client, None, None
        try:
            client.close()
        except PyMongoError as e:
            raise DisconnectError(
                message=f"Could not close the MongoDB connection: {e}",
                context={"error_type": type(e).__name__},
            ) from e
        logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """Liveness probe for the health endpoint. Never raises."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False
        return True

    # ── Operations ────────────────────────────────────────────────────────

    @property
    def collection(self) -> Any:
        if self._collection is None:
            raise StoreError(
                message="The storage connection is not open",
                reason="connect() has not been called",
            )
        return self._collection

    async def insert_one(self, document: Document) -> ObjectId:
        """Insert a document and return its `_id`."""
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise self._store_error("insert", e) from e
        return result.inserted_id

    async def find_one(
        self,
        filter: Document,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> Optional[Document]:
        """Return the first matching document, or None when nothing matches."""
        try:
            if sort:
                return await self.collection.find_one(filter, sort=list(sort))
            return await self.collection.find_one(filter)
        except PyMongoError as e:
            raise self._store_error("find_one", e) from e

    async def find_many(self, filter: Document) -> List[Document]:
        """Return every matching document in storage order, fully materialized."""
        try:
            cursor = self.collection.find(filter)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise self._store_error("find", e) from e

    async def update_one(self, filter: Document, patch: Document) -> Tuple[int, int]:
        """
        Apply `patch` (an update document such as {"$set": {...}}) to the
        first match.

        Returns:
            (matched_count, modified_count)
        """
        try:
            result = await self.collection.update_one(filter, patch)
        except PyMongoError as e:
            raise self._store_error("update", e) from e
        return result.matched_count, result.modified_count

    async def delete_one(self, filter: Document) -> int:
        """Delete the first match and return the deleted count (0 or 1)."""
        try:
            result = await self.collection.delete_one(filter)
        except PyMongoError as e:
            raise self._store_error("delete", e) from e
        return result.deleted_count

    def _store_error(self, operation: str, exc: PyMongoError) -> StoreError:
        logger.error("MongoDB %s failed on %s: %s", operation, self.collection_name, exc)
        return StoreError(
            message=_FAILURE_MESSAGES.get(operation, "A storage error occurred"),
            reason=str(exc),
            context={"operation": operation, "error_type": type(exc).__name__},
        )
