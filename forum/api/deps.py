from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from motor.motor_asyncio import AsyncIOMotorDatabase

from forum.core.errors import Unauthorized
from forum.core.settings import settings
from forum.db.mongo import get_database
from forum.db.posts import PostRepository
from forum.db.users import UserRepository
from forum.services.auth import ACCESS_PURPOSE, decode_token
from forum.services.blobs import BlobStore
from forum.services.content import ContentService
from forum.services.feed import FeedService
from forum.services.interactions import InteractionService
from forum.services.notifier import Notifier, build_notifier
from forum.services.profile import IdentityService
from forum.services.registration import RegistrationService
from forum.services.tokens import registration_codec

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    id: str
    is_admin: bool = False


async def get_db() -> AsyncIOMotorDatabase:
    return await get_database()


_notifier: Optional[Notifier] = None


def get_notifier() -> Notifier:
    global _notifier
    if _notifier is None:
        _notifier = build_notifier(settings)
    return _notifier


def get_blob_store() -> BlobStore:
    return BlobStore(settings)


def get_users(db: AsyncIOMotorDatabase = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_posts(db: AsyncIOMotorDatabase = Depends(get_db)) -> PostRepository:
    return PostRepository(db)


def get_identity(users: UserRepository = Depends(get_users)) -> IdentityService:
    return IdentityService(users)


def get_interactions(
    users: UserRepository = Depends(get_users), posts: PostRepository = Depends(get_posts)
) -> InteractionService:
    return InteractionService(users, posts)


def get_feed(users: UserRepository = Depends(get_users), posts: PostRepository = Depends(get_posts)) -> FeedService:
    return FeedService(users, posts)


def get_content(
    users: UserRepository = Depends(get_users),
    posts: PostRepository = Depends(get_posts),
    blobs: BlobStore = Depends(get_blob_store),
) -> ContentService:
    return ContentService(users, posts, blobs)


def get_registration(
    users: UserRepository = Depends(get_users), notifier: Notifier = Depends(get_notifier)
) -> RegistrationService:
    return RegistrationService(users, registration_codec(), notifier, settings)


async def get_current_actor(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Optional[Actor]:
    if cred is None:
        return None
    try:
        payload = decode_token(cred.credentials)
    except JWTError:
        return None
    if payload.get("purpose") != ACCESS_PURPOSE or not payload.get("sub"):
        return None
    return Actor(id=str(payload["sub"]), is_admin=bool(payload.get("adm", False)))


async def require_actor(actor: Optional[Actor] = Depends(get_current_actor)) -> Actor:
    if actor is None:
        raise Unauthorized()
    return actor
