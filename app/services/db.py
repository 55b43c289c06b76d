# async mongodb client for the backend api
# uses motor for non-blocking operations
# EntryStore is the datastore capability the insight and reminder components depend on

import logging
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """async mongodb connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """establish connection to mongodb"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        self.client = AsyncIOMotorClient(settings.MONGODB_URI)
        self.db = self.client[settings.MONGODB_DATABASE]

        # verify connection
        await self.client.admin.command("ping")
        logger.info("MongoDB connection established")

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    # collection accessors

    @property
    def profiles(self):
        return self.db["profiles"]

    @property
    def journal_entries(self):
        return self.db["journal_entries"]

    @property
    def insights(self):
        return self.db["insights"]


def parse_timestamp(value) -> Optional[datetime]:
    """parse a stored iso timestamp (or datetime) into an aware utc datetime"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class EntryStore:
    """read/write access to entries, profiles and stored insights.

    timestamps are stored as utc iso strings, so range filters compare
    lexicographically the same way they compare chronologically.
    """

    def __init__(self, database: Database):
        self.database = database

    # entries

    async def query_entries(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """entries for a user with start <= created_at <= end, oldest first"""
        cursor = self.database.journal_entries.find(
            {
                "user_id": user_id,
                "created_at": {"$gte": start.isoformat(), "$lte": end.isoformat()},
            },
            {"_id": 0},
        ).sort("created_at", 1)
        if limit is not None:
            cursor = cursor.limit(limit)
        return [doc async for doc in cursor]

    async def list_entries(self, user_id: str, limit: int = 50, skip: int = 0) -> list[dict]:
        cursor = (
            self.database.journal_entries.find({"user_id": user_id}, {"_id": 0})
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
        )
        return [doc async for doc in cursor]

    async def get_entries_by_ids(self, user_id: str, entry_ids: list[str]) -> list[dict]:
        cursor = self.database.journal_entries.find(
            {"user_id": user_id, "entry_id": {"$in": entry_ids}},
            {"_id": 0},
        )
        return [doc async for doc in cursor]

    async def insert_entry(self, doc: dict) -> str:
        await self.database.journal_entries.insert_one(doc)
        return doc["entry_id"]

    async def update_entry_analysis(self, entry_id: str, fields: dict) -> bool:
        result = await self.database.journal_entries.update_one(
            {"entry_id": entry_id},
            {"$set": fields},
        )
        return result.modified_count > 0

    async def last_entry_date(self, user_id: str) -> Optional[datetime]:
        """most recent entry timestamp for a user, or None if they never wrote"""
        cursor = (
            self.database.journal_entries.find({"user_id": user_id}, {"created_at": 1, "_id": 0})
            .sort("created_at", -1)
            .limit(1)
        )
        async for doc in cursor:
            return parse_timestamp(doc.get("created_at"))
        return None

    # profiles

    async def query_active_users(self) -> list[dict]:
        cursor = self.database.profiles.find(
            {"is_active": True},
            {"user_id": 1, "notifications_enabled": 1, "push_token": 1, "_id": 0},
        )
        return [doc async for doc in cursor]

    async def get_profile(self, user_id: str) -> Optional[dict]:
        return await self.database.profiles.find_one({"user_id": user_id}, {"_id": 0})

    async def get_push_token(self, user_id: str) -> Optional[str]:
        profile = await self.get_profile(user_id)
        if not profile:
            return None
        return profile.get("push_token") or None

    async def update_notification_settings(
        self,
        user_id: str,
        push_token: Optional[str] = None,
        notifications_enabled: Optional[bool] = None,
    ) -> dict:
        fields = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if push_token is not None:
            fields["push_token"] = push_token
        if notifications_enabled is not None:
            fields["notifications_enabled"] = notifications_enabled
        await self.database.profiles.update_one(
            {"user_id": user_id},
            {"$set": fields},
            upsert=True,
        )
        return await self.get_profile(user_id) or {}

    async def clear_push_token(self, user_id: str) -> None:
        await self.database.profiles.update_one(
            {"user_id": user_id},
            {"$set": {"push_token": None}},
        )

    # insights

    async def save_insight(self, user_id: str, doc: dict) -> None:
        await self.database.insights.insert_one({"user_id": user_id, **doc})

    async def recent_insights(self, user_id: str, limit: int = 5) -> list[dict]:
        cursor = (
            self.database.insights.find({"user_id": user_id}, {"_id": 0})
            .sort("date", -1)
            .limit(limit)
        )
        return [doc async for doc in cursor]


# singleton instances
db = Database()
entry_store = EntryStore(db)


async def get_db() -> Database:
    """dependency injection for database access"""
    return db


async def get_entry_store() -> EntryStore:
    """dependency injection for the entry store"""
    return entry_store
