"""
Database Connection and Utilities
MongoDB connection management and the key-value store used for wizard state
"""

import os
from datetime import datetime, timezone
from typing import Dict, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError
from dotenv import load_dotenv

from services.monitoring_service import logger

load_dotenv()

MONGODB_URI = os.getenv("MONGODB_URI", "").strip()
DB_NAME = os.getenv("DB_NAME", "ridewizard")
KV_COLLECTION = os.getenv("KV_COLLECTION", "kv_store")


class PersistenceError(Exception):
    """Raised when the local key-value store cannot be read or written"""


class DatabaseManager:
    """Owns the MongoDB client; constructed once at startup and passed around"""

    def __init__(self, client=None, db_name: str = DB_NAME):
        if client is None:
            if not MONGODB_URI:
                raise RuntimeError("MONGODB_URI is missing (set the environment variable).")
            client = MongoClient(MONGODB_URI)
        self._client = client
        self._db = self._client[db_name]

    @property
    def client(self):
        """Get MongoDB client"""
        return self._client

    @property
    def db(self):
        """Get database instance"""
        return self._db

    def get_collection(self, name):
        """Get a collection by name"""
        return self._db[name]

    def close(self):
        """Close database connection"""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None


class BaseModel:
    """Base model class with common database operations"""

    collection_name = None

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager
        if not self.collection_name:
            raise NotImplementedError("collection_name must be defined")

    @property
    def collection(self):
        """Get the MongoDB collection for this model"""
        return self.db_manager.get_collection(self.collection_name)

    def find_one(self, filter_dict, projection=None):
        """Find a single document"""
        return self.collection.find_one(filter_dict, projection)

    def update_one(self, filter_dict, update_dict, upsert=False):
        """Update a single document"""
        result = self.collection.update_one(filter_dict, update_dict, upsert=upsert)
        return result.modified_count > 0 or result.upserted_id is not None

    def delete_one(self, filter_dict):
        """Delete a single document"""
        result = self.collection.delete_one(filter_dict)
        return result.deleted_count > 0


class KeyValueStore(BaseModel):
    """
    Durable string key-value store backed by a MongoDB collection.

    Every key is a single document ``{_id: key, value: str, updated_at}``.
    Writes are durable per key but there is no transaction across keys.
    """

    collection_name = KV_COLLECTION

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self.find_one({"_id": key}, {"value": 1})
        except PyMongoError as e:
            raise PersistenceError(f"read of {key!r} failed: {e}") from e
        return doc.get("value") if doc else None

    def set(self, key: str, value: str) -> None:
        try:
            self.update_one(
                {"_id": key},
                {"$set": {"value": value, "updated_at": datetime.now(timezone.utc)}},
                upsert=True
            )
        except PyMongoError as e:
            raise PersistenceError(f"write of {key!r} failed: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self.delete_one({"_id": key})
        except PyMongoError as e:
            raise PersistenceError(f"remove of {key!r} failed: {e}") from e


class MemoryKeyValueStore:
    """Process-local store with the same interface, used when no MongoDB is configured"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


def create_store(db_manager: Optional[DatabaseManager] = None):
    """Build the key-value store for the configured environment"""
    if db_manager is None and not MONGODB_URI:
        logger.warning("[Database] MONGODB_URI not set - wizard state is kept in memory only")
        return MemoryKeyValueStore()
    return KeyValueStore(db_manager or DatabaseManager())
