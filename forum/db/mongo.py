"""Process-wide MongoDB connection.

The client is created lazily on first use and shared by every request.
Concurrent first callers wait on the same lock, so only one client is ever
opened per process.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING

from forum.core.settings import settings

logger = logging.getLogger(__name__)

USERS = "users"
POSTS = "posts"

_client: Optional[AsyncIOMotorClient] = None
_lock = asyncio.Lock()


async def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is not None:
        return _client
    async with _lock:
        if _client is None:
            logger.info("connecting to MongoDB database %r", settings.mongodb_db)
            _client = AsyncIOMotorClient(
                settings.mongodb_uri,
                serverSelectionTimeoutMS=settings.store_timeout_ms,
                socketTimeoutMS=settings.store_timeout_ms,
                connectTimeoutMS=settings.store_timeout_ms,
            )
    return _client


async def get_database() -> AsyncIOMotorDatabase:
    client = await get_client()
    return client[settings.mongodb_db]


async def get_collection(name: str) -> AsyncIOMotorCollection:
    db = await get_database()
    return db[name]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[USERS].create_index([("name", ASCENDING)], unique=True, name="users_name_unique")


async def close_client() -> None:
    global _client
    async with _lock:
        if _client is not None:
            _client.close()
            _client = None


async def clear_database(db: AsyncIOMotorDatabase) -> None:
    """Drop every user and post. Used by the seed script and tests only."""
    await db[USERS].delete_many({})
    await db[POSTS].delete_many({})
