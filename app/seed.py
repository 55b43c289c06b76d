# seed script — creates indexes and a demo profile in mongodb
# run once: python -m app.seed

import asyncio
import logging
import os
from datetime import datetime, timezone

from app.services.db import Database, db

logger = logging.getLogger(__name__)

# demo profile id from env
DEMO_USER_ID = os.getenv("SEED_USER_ID", "demo-user")


async def create_indexes(database: Database) -> None:
    """indexes backing the range, last-entry and active-user queries"""
    await database.journal_entries.create_index([("user_id", 1), ("created_at", -1)])
    await database.journal_entries.create_index("entry_id", unique=True)
    await database.profiles.create_index("user_id", unique=True)
    await database.profiles.create_index("is_active")
    await database.insights.create_index([("user_id", 1), ("date", -1)])
    logger.info("Created indexes on journal_entries, profiles and insights")


async def seed_demo_profile(database: Database, user_id: str = DEMO_USER_ID) -> bool:
    """insert the demo profile, skips if it already exists. returns True when created."""
    existing = await database.profiles.find_one({"user_id": user_id})
    if existing:
        logger.info(f"Demo profile already exists: {user_id}")
        return False

    await database.profiles.insert_one({
        "user_id": user_id,
        "role": "premium",
        "is_active": True,
        "notifications_enabled": False,
        "push_token": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
    })
    logger.info(f"Created demo profile: {user_id}")
    return True


async def seed(database: Database = db):
    await database.connect()
    try:
        await create_indexes(database)
        await seed_demo_profile(database)
        logger.info("Seed complete!")
    finally:
        await database.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    asyncio.run(seed())
