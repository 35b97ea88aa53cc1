"""
Database utilities
MongoDB connection, collections, indexes and document helpers
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, AsyncMongoClient

from gamehouse.config import get_settings
from gamehouse.errors import ValidationFailed


logger = structlog.get_logger(__name__)

COLLECTIONS = (
    "customers",
    "categories",
    "services",
    "sessions",
    "operators",
    "user_sessions",
    "password_resets",
    "settings",
    "activity_logs",
    "backup_jobs",
)


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_object_id(value: Any) -> ObjectId:
    """Parse a path/body id, rejecting malformed values"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationFailed("invalid_id")


def serialize_document(value: Any) -> Any:
    """Convert a stored document into JSON-friendly data (id strings, ISO dates)"""
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if key == "_id":
                result["id"] = serialize_document(item)
            else:
                result[key] = serialize_document(item)
        return result
    if isinstance(value, list):
        return [serialize_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    return value


class GameHouseDatabase:
    """Database connection and collection access"""

    def __init__(self, url: Optional[str] = None, name: Optional[str] = None):
        settings = get_settings()
        self.url = url or settings.mongodb_url
        self.name = name or settings.mongodb_db
        self.timeout_ms = settings.mongodb_timeout_ms
        self.client: Optional[AsyncMongoClient] = None
        self.db = None

    async def initialize(self):
        """Connect, verify the connection and create indexes"""
        try:
            self.client = AsyncMongoClient(
                self.url,
                tz_aware=True,
                serverSelectionTimeoutMS=self.timeout_ms,
            )
            self.db = self.client[self.name]
            await self.ping()
            logger.info("Database connection test successful", database=self.name)
            await self.ensure_indexes()
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    async def close(self):
        """Close the client"""
        if self.client:
            await self.client.close()
            self.client = None
            logger.info("Database connection closed")

    async def ping(self) -> bool:
        await self.client.admin.command("ping")
        return True

    def collection(self, name: str):
        if self.db is None:
            raise RuntimeError("Database not initialized")
        return self.db[name]

    def __getattr__(self, name: str):
        # Collections are reachable as attributes: db.customers, db.sessions, ...
        if name in COLLECTIONS:
            return self.collection(name)
        raise AttributeError(name)

    async def ensure_indexes(self):
        """Create unique and TTL indexes"""
        await self.collection("customers").create_index("phone", unique=True)
        await self.collection("customers").create_index([("created_at", DESCENDING)])
        await self.collection("categories").create_index("name", unique=True)
        await self.collection("services").create_index("category")
        await self.collection("sessions").create_index([("status", ASCENDING), ("start_time", ASCENDING)])
        await self.collection("sessions").create_index("customer_id")
        await self.collection("operators").create_index("username", unique=True)
        await self.collection("operators").create_index("email", unique=True)
        await self.collection("settings").create_index("key", unique=True)

        await self.collection("user_sessions").create_index("token", unique=True)
        await self.collection("user_sessions").create_index("expires_at", expireAfterSeconds=0)
        await self.collection("password_resets").create_index("token", unique=True)
        await self.collection("password_resets").create_index("expires_at", expireAfterSeconds=0)
        await self.collection("activity_logs").create_index("expires_at", expireAfterSeconds=0)
        await self.collection("activity_logs").create_index([("timestamp", DESCENDING)])
        await self.collection("backup_jobs").create_index("backup_id", unique=True)

        logger.info("Database indexes ensured")

    async def get_stats(self) -> Dict[str, int]:
        """Document counts per collection"""
        return {
            name: await self.collection(name).estimated_document_count()
            for name in COLLECTIONS
        }
