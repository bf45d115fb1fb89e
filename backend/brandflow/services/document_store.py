# /brandflow/services/document_store.py

import logging
from motor.motor_asyncio import AsyncIOMotorClient
from bson import ObjectId
from bson.errors import BSONError
from pymongo.errors import PyMongoError
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from brandflow.config.settings import settings
from brandflow.flows.errors import PersistenceError
from brandflow.utils.metrics import database_operations_counter

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 20


class DocumentStore(Protocol):
    """
    The key-value document store the flows depend on. Every write is stamped
    with the store's own clock, never the caller's.
    """

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]: ...

    async def set(self, collection: str, key: str, document: Dict[str, Any], timestamp_field: str = "updatedAt") -> None: ...

    async def append(self, collection: str, document: Dict[str, Any], timestamp_field: str = "timestamp") -> str: ...

    async def find_recent(self, collection: str, limit: int = DEFAULT_RECENT_LIMIT, sort_field: str = "timestamp") -> List[Dict[str, Any]]: ...

    async def ping(self) -> None: ...


class MongoDocumentStore:
    """
    MongoDB implementation of DocumentStore. Server timestamps come from
    `$currentDate`, so `cachedAt` and `timestamp` reflect the database clock.
    Any driver error is raised as PersistenceError; callers decide whether it
    is fatal.
    """

    def __init__(self, mongo_uri: str, client: Optional[AsyncIOMotorClient] = None):
        try:
            self.client = client or AsyncIOMotorClient(
                mongo_uri,
                maxPoolSize=settings.max_pool_size,
                minPoolSize=settings.min_pool_size,
                tls=settings.mongo_ssl,
                tz_aware=True,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000
            )
            self.db = self.client.get_default_database()
            logger.info("MongoDB client initialized successfully.")
        except Exception as e:
            logger.error(f"Error initializing MongoDB client: {e}")
            raise

    # ==================== Helper Methods ====================

    def _serialize_id(self, document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Convert ObjectId to string for JSON serialization."""
        if document and isinstance(document.get("_id"), ObjectId):
            document["_id"] = str(document["_id"])
        return document

    async def _run(self, operation_name: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        try:
            result = await operation()
        except (PyMongoError, BSONError) as e:
            database_operations_counter.labels(operation=operation_name, status="failed").inc()
            logger.exception(f"Database operation '{operation_name}' failed: {type(e).__name__}")
            raise PersistenceError(f"{operation_name} failed: {e}") from e
        database_operations_counter.labels(operation=operation_name, status="success").inc()
        return result

    # ==================== Index Management ====================

    async def create_indexes(self) -> None:
        """Create the indexes used by dashboards and cache inspection."""
        indexes = [
            (settings.flow_log_collection, [("timestamp", -1)], {}),
            (settings.flow_log_collection, [("name", 1), ("timestamp", -1)], {}),
            (settings.cache_collection, [("cachedAt", -1)], {}),
        ]

        for collection, keys, options in indexes:
            try:
                await self.db[collection].create_index(keys, **options)
                logger.debug(f"Created index on {collection}: {keys}")
            except Exception as e:
                logger.error(f"Failed to create index on {collection} {keys}: {e}")

        logger.info("Database indexes created successfully.")

    # ==================== Document Operations ====================

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        return await self._run("get", lambda: self.db[collection].find_one({"_id": key}))

    async def set(self, collection: str, key: str, document: Dict[str, Any], timestamp_field: str = "updatedAt") -> None:
        fields = {k: v for k, v in document.items() if k not in ("_id", timestamp_field)}
        await self._run(
            "set",
            lambda: self.db[collection].update_one(
                {"_id": key},
                {"$set": fields, "$currentDate": {timestamp_field: True}},
                upsert=True,
            ),
        )

    async def append(self, collection: str, document: Dict[str, Any], timestamp_field: str = "timestamp") -> str:
        # An upsert on a fresh ObjectId lets the server stamp the insert time.
        doc_id = ObjectId()
        fields = {k: v for k, v in document.items() if k not in ("_id", timestamp_field)}
        await self._run(
            "append",
            lambda: self.db[collection].update_one(
                {"_id": doc_id},
                {"$setOnInsert": fields, "$currentDate": {timestamp_field: True}},
                upsert=True,
            ),
        )
        return str(doc_id)

    async def find_recent(self, collection: str, limit: int = DEFAULT_RECENT_LIMIT, sort_field: str = "timestamp") -> List[Dict[str, Any]]:
        async def _query():
            cursor = self.db[collection].find().sort(sort_field, -1).limit(limit)
            return await cursor.to_list(length=limit)

        documents = await self._run("find_recent", _query)
        return [self._serialize_id(doc) for doc in documents]

    async def ping(self) -> None:
        await self._run("ping", lambda: self.db.command("ping"))

    def close(self) -> None:
        self.client.close()
