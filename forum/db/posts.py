from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from forum.core.errors import Conflict
from forum.db.mongo import POSTS
from forum.models.common import parse_object_id, utcnow
from forum.models.post import Comment, InteractionKind, Post, PostDocument
from forum.models.validation import to_document, validate_post, validate_stored_post_safe

logger = logging.getLogger(__name__)

# both conditional writes miss only while another toggle by the same user
# is in flight
_TOGGLE_ATTEMPTS = 3


@dataclass(frozen=True)
class InteractionState:
    count: int
    active: bool


class PostRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.collection = db[POSTS]

    async def _find_many(self, query: Dict[str, Any]) -> List[Post]:
        posts = []
        async for doc in self.collection.find(query).sort("createdAt", DESCENDING):
            post = validate_stored_post_safe(doc)
            if post is not None:
                posts.append(post)
        return posts

    async def create(self, data: Any) -> Post:
        document: PostDocument = data if isinstance(data, PostDocument) else validate_post(data)
        result = await self.collection.insert_one(to_document(document))
        return Post(id=str(result.inserted_id), **document.model_dump())

    async def find_by_id(self, post_id: str) -> Optional[Post]:
        oid = parse_object_id(post_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc is None:
            return None
        return validate_stored_post_safe(doc)

    async def find_all(self) -> List[Post]:
        return await self._find_many({})

    async def find_by_author(self, author_id: str) -> List[Post]:
        return await self._find_many({"author": author_id})

    async def update_content(
        self, post_id: str, author_id: str, changes: Dict[str, Any]
    ) -> Optional[Post]:
        """Apply ``$set`` changes to a post owned by ``author_id``.

        ``changes`` uses stored paths (``title``, ``body.content``,
        ``body.images``). Returns None when no post with that id and author
        exists.
        """
        oid = parse_object_id(post_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "author": author_id},
            {"$set": {**changes, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        return validate_stored_post_safe(doc)

    async def delete(self, post_id: str) -> bool:
        oid = parse_object_id(post_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def toggle_interaction(
        self, post_id: str, user_id: str, kind: InteractionKind
    ) -> Optional[InteractionState]:
        """Add ``user_id`` to the like/forward set, or remove it if present.

        Membership is decided by the store: the add only matches when the id
        is absent, the pull only when it is present. Returns None when the
        post does not exist or fails validation; such posts are never written.
        """
        oid = parse_object_id(post_id)
        if oid is None or await self.find_by_id(post_id) is None:
            return None
        path = kind.path

        for _ in range(_TOGGLE_ATTEMPTS):
            now = utcnow()
            doc = await self.collection.find_one_and_update(
                {"_id": oid, path: {"$ne": user_id}},
                {"$addToSet": {path: user_id}, "$set": {"updatedAt": now}},
                return_document=ReturnDocument.AFTER,
            )
            active = True
            if doc is None:
                doc = await self.collection.find_one_and_update(
                    {"_id": oid, path: user_id},
                    {"$pull": {path: user_id}, "$set": {"updatedAt": now}},
                    return_document=ReturnDocument.AFTER,
                )
                active = False
            if doc is not None:
                post = validate_stored_post_safe(doc)
                if post is None:
                    return None
                return InteractionState(count=len(post.interactions.members(kind)), active=active)
            if await self.collection.find_one({"_id": oid}, {"_id": 1}) is None:
                return None
            logger.debug("toggle on post %s raced, retrying", post_id)

        logger.warning("toggle of %s on post %s did not settle", kind.value, post_id)
        raise Conflict("Post is being updated, try again")

    async def add_comment(self, post_id: str, author_id: str, content: str) -> Optional[List[Comment]]:
        oid = parse_object_id(post_id)
        # old-schema posts are left untouched
        if oid is None or await self.find_by_id(post_id) is None:
            return None
        now = utcnow()
        comment = Comment(author=author_id, body={"content": content}, created_at=now)
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {
                "$push": {"interactions.comments": comment.model_dump(by_alias=True)},
                "$set": {"updatedAt": now},
            },
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        post = validate_stored_post_safe(doc)
        if post is None:
            return None
        return post.interactions.comments
