"""Likes, forwards and comments on posts."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from forum.core.errors import InvalidAuthor, InvalidInput, NotFound
from forum.db.posts import InteractionState, PostRepository
from forum.db.users import UserRepository
from forum.models.post import Comment, InteractionKind
from forum.models.user import PublicUser

UNKNOWN_AUTHOR = "Unknown"
POST_NOT_FOUND = "Post not found"


@dataclass
class CommentView:
    author: str
    author_name: str
    content: str
    created_at: datetime


def author_name(authors: Dict[str, Optional[PublicUser]], author_id: str) -> str:
    profile = authors.get(author_id)
    return profile.name if profile is not None else UNKNOWN_AUTHOR


class InteractionService:
    def __init__(self, users: UserRepository, posts: PostRepository) -> None:
        self.users = users
        self.posts = posts

    async def toggle(self, post_id: str, user_id: str, kind: InteractionKind) -> InteractionState:
        if not await self.users.exists(user_id):
            raise InvalidAuthor("Your account no longer exists")
        state = await self.posts.toggle_interaction(post_id, user_id, kind)
        if state is None:
            raise NotFound(POST_NOT_FOUND)
        return state

    async def toggle_like(self, post_id: str, user_id: str) -> InteractionState:
        return await self.toggle(post_id, user_id, InteractionKind.LIKE)

    async def toggle_forward(self, post_id: str, user_id: str) -> InteractionState:
        return await self.toggle(post_id, user_id, InteractionKind.FORWARD)

    async def add_comment(self, post_id: str, author_id: str, content: str) -> List[Comment]:
        text = (content or "").strip()
        if not text:
            raise InvalidInput("Comment content is required")
        if not await self.users.exists(author_id):
            raise InvalidAuthor()
        comments = await self.posts.add_comment(post_id, author_id, text)
        if comments is None:
            raise NotFound(POST_NOT_FOUND)
        return comments

    async def comment_views(self, comments: List[Comment]) -> List[CommentView]:
        authors = await self.users.resolve_authors(c.author for c in comments)
        return [
            CommentView(
                author=c.author,
                author_name=author_name(authors, c.author),
                content=c.body.content,
                created_at=c.created_at,
            )
            for c in comments
        ]
