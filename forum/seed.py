"""Reset the database and load sample users and posts.

    python -m forum.seed

Every password below is for local testing only.
"""
from __future__ import annotations

import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from forum.core.logging import configure_logging
from forum.db.mongo import clear_database, close_client, ensure_indexes, get_database
from forum.db.posts import PostRepository
from forum.db.users import UserRepository
from forum.models.common import utcnow
from forum.models.post import InteractionKind
from forum.services.auth import generate_credentials

logger = logging.getLogger("forum.seed")

SAMPLE_USERS = [
    ("admin", "admin@example.edu", "admin123", True),
    ("regular_user", "user@example.edu", "user123", False),
    ("another_user", "another@example.edu", "another123", False),
]

SAMPLE_POSTS = [
    (0, "Welcome to the Forum!", "This is the first post in our new forum. Share your thoughts!"),
    (1, "Introduction Thread", "Hi everyone! Looking forward to great discussions."),
    (2, "Best Practices for Web Development", "Write clean code, test thoroughly, document your work."),
]


async def seed(db: AsyncIOMotorDatabase) -> None:
    await clear_database(db)
    await ensure_indexes(db)
    users_repo = UserRepository(db)
    posts_repo = PostRepository(db)

    users = []
    for name, email, password, is_admin in SAMPLE_USERS:
        now = utcnow()
        users.append(
            await users_repo.create(
                {
                    "name": name,
                    "email": email,
                    "credentials": generate_credentials(password).model_dump(),
                    "isAdmin": is_admin,
                    "createdAt": now,
                    "updatedAt": now,
                }
            )
        )
    logger.info("created users: %s", ", ".join(u.name for u in users))

    for author_idx, title, content in SAMPLE_POSTS:
        now = utcnow()
        post = await posts_repo.create(
            {
                "author": users[author_idx].id,
                "title": title,
                "body": {"content": content, "images": []},
                "interactions": {"likes": [], "forwards": [], "comments": []},
                "createdAt": now,
                "updatedAt": now,
            }
        )
        for liker in users[: author_idx + 2]:
            await posts_repo.toggle_interaction(post.id, liker.id, InteractionKind.LIKE)
        await posts_repo.toggle_interaction(post.id, users[0].id, InteractionKind.FORWARD)
        await posts_repo.add_comment(post.id, users[-1].id, "Nice post!")
    logger.info("created %d posts", len(SAMPLE_POSTS))


async def main() -> None:
    configure_logging()
    try:
        await seed(await get_database())
    finally:
        await close_client()


if __name__ == "__main__":
    asyncio.run(main())
