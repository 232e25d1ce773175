from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from forum.core.errors import Forbidden, InvalidAuthor, InvalidInput, NotFound
from forum.db.posts import PostRepository
from forum.db.users import UserRepository
from forum.models.common import utcnow
from forum.models.post import Interactions, Post, PostBody, PostDocument
from forum.services.blobs import BlobStore

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "Post not found"


def _required_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInput(f"{field} cannot be empty")
    return text


def _clean_images(images: List[str]) -> List[str]:
    cleaned = [i.strip() for i in images if isinstance(i, str)]
    if any(not i for i in cleaned) or len(cleaned) != len(images):
        raise InvalidInput("Image URLs must be non-empty strings")
    return cleaned


class ContentService:
    def __init__(self, users: UserRepository, posts: PostRepository, blobs: BlobStore) -> None:
        self.users = users
        self.posts = posts
        self.blobs = blobs

    async def create_post(
        self, author_id: str, title: Optional[str], content: Optional[str], image: Optional[bytes] = None
    ) -> Post:
        title = _required_text(title, "Title")
        content = _required_text(content, "Content")
        if not await self.users.exists(author_id):
            raise InvalidAuthor()
        images: List[str] = []
        if image is not None:
            images.append(await self.blobs.save(image))
        now = utcnow()
        document = PostDocument(
            author=author_id,
            title=title,
            body=PostBody(content=content, images=images),
            interactions=Interactions(),
            created_at=now,
            updated_at=now,
        )
        post = await self.posts.create(document)
        logger.info("user %s created post %s", author_id, post.id)
        return post

    async def update_post(
        self,
        post_id: str,
        acting_user_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        images: Optional[List[str]] = None,
        image: Optional[bytes] = None,
    ) -> Post:
        """Edit the title, content or images of a post owned by the actor.

        Only the given fields change. Leaving ``images`` out keeps the
        existing list; an uploaded ``image`` replaces it with that single
        image. Interactions, author and creation time are never written.
        """
        existing = await self.posts.find_by_id(post_id)
        if existing is None:
            raise NotFound(POST_NOT_FOUND)
        if existing.author != acting_user_id:
            raise Forbidden("You can only edit your own posts")

        changes: Dict[str, Any] = {}
        saved: Optional[str] = None
        if title is not None:
            changes["title"] = _required_text(title, "Title")
        if content is not None:
            changes["body.content"] = _required_text(content, "Content")
        if images is not None:
            changes["body.images"] = _clean_images(images)
        if image is not None:
            saved = await self.blobs.save(image)
            changes["body.images"] = [saved]

        updated = await self.posts.update_content(post_id, acting_user_id, changes)
        if updated is None:
            # the post went away or changed hands after the ownership check
            if saved is not None:
                await self.blobs.delete(saved)
            raise NotFound(POST_NOT_FOUND)
        return updated

    async def delete_post(self, post_id: str, acting_user_id: str) -> None:
        existing = await self.posts.find_by_id(post_id)
        if existing is None:
            raise NotFound(POST_NOT_FOUND)
        if existing.author != acting_user_id:
            raise Forbidden("You can only delete your own posts")
        if not await self.posts.delete(post_id):
            raise NotFound(POST_NOT_FOUND)
