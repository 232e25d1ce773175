"""
Shared fixtures: an in-memory Motor database, repositories, services,
sample users/posts and an HTTP client wired to the same database.
"""
from __future__ import annotations

import os

# settings are read at import time
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB", "forum_test")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("ALLOWED_EMAIL_SUFFIXES", ".edu")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from forum.core.settings import Settings, settings
from forum.db.mongo import ensure_indexes
from forum.db.posts import PostRepository
from forum.db.users import UserRepository
from forum.models.common import utcnow
from forum.models.post import Post
from forum.models.user import User
from forum.services.auth import generate_credentials
from forum.services.blobs import BlobStore
from forum.services.content import ContentService
from forum.services.feed import FeedService
from forum.services.interactions import InteractionService
from forum.services.profile import IdentityService
from forum.services.registration import RegistrationService
from forum.services.tokens import registration_codec

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


class RecordingNotifier:
    """Keeps every (email, token) instead of sending mail."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []

    async def send_verification_email(self, email: str, token: str) -> None:
        self.sent.append((email, token))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1]


# ==================== Database fixtures ====================


@pytest.fixture
def mongo_db():
    """A fresh in-memory database per test."""
    client = AsyncMongoMockClient()
    return client["forum_test"]


@pytest.fixture
async def db(mongo_db):
    await ensure_indexes(mongo_db)
    return mongo_db


@pytest.fixture
def users_repo(db) -> UserRepository:
    return UserRepository(db)


@pytest.fixture
def posts_repo(db) -> PostRepository:
    return PostRepository(db)


# ==================== Service fixtures ====================


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return settings.model_copy(update={"upload_dir": str(tmp_path / "uploads"), "max_upload_bytes": 1024})


@pytest.fixture
def blobs(test_settings) -> BlobStore:
    return BlobStore(test_settings)


@pytest.fixture
def interactions(users_repo, posts_repo) -> InteractionService:
    return InteractionService(users_repo, posts_repo)


@pytest.fixture
def content(users_repo, posts_repo, blobs) -> ContentService:
    return ContentService(users_repo, posts_repo, blobs)


@pytest.fixture
def feed(users_repo, posts_repo) -> FeedService:
    return FeedService(users_repo, posts_repo)


@pytest.fixture
def identity(users_repo) -> IdentityService:
    return IdentityService(users_repo)


@pytest.fixture
def registration(users_repo, notifier, test_settings) -> RegistrationService:
    return RegistrationService(users_repo, registration_codec(), notifier, test_settings)


# ==================== Data fixtures ====================


@pytest.fixture
def make_user(users_repo):
    async def _make(name: str, password: str = "secret123", is_admin: bool = False) -> User:
        now = utcnow()
        return await users_repo.create(
            {
                "name": name,
                "email": f"{name.lower()}@example.edu",
                "credentials": generate_credentials(password).model_dump(),
                "isAdmin": is_admin,
                "createdAt": now,
                "updatedAt": now,
            }
        )

    return _make


@pytest.fixture
def make_post(posts_repo):
    async def _make(author: User, title: str = "Hello", content: str = "First post", images=None) -> Post:
        now = utcnow()
        return await posts_repo.create(
            {
                "author": author.id,
                "title": title,
                "body": {"content": content, "images": list(images or [])},
                "interactions": {"likes": [], "forwards": [], "comments": []},
                "createdAt": now,
                "updatedAt": now,
            }
        )

    return _make


@pytest.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest.fixture
async def alice_post(make_post, alice) -> Post:
    return await make_post(alice, images=["/uploads/cat.png"])


# ==================== HTTP fixtures ====================


@pytest.fixture
def client(mongo_db, notifier, test_settings):
    from forum.api.deps import get_blob_store, get_db, get_notifier
    from forum.main import create_app

    app = create_app(init_store=False)

    async def _get_db():
        await ensure_indexes(mongo_db)
        return mongo_db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_blob_store] = lambda: BlobStore(test_settings)

    with TestClient(app) as c:
        yield c
