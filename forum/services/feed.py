from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from forum.core.errors import NotFound
from forum.db.posts import PostRepository
from forum.db.users import UserRepository
from forum.models.post import InteractionKind, Post, PostWithAuthor
from forum.services.interactions import CommentView, InteractionService

logger = logging.getLogger(__name__)


@dataclass
class PostDetail:
    post: PostWithAuthor
    comments: List[CommentView]
    likes: int
    forwards: int
    liked: bool
    forwarded: bool


class FeedService:
    def __init__(self, users: UserRepository, posts: PostRepository) -> None:
        self.users = users
        self.posts = posts

    async def attach_authors(self, posts: List[Post]) -> List[PostWithAuthor]:
        authors = await self.users.resolve_authors(p.author for p in posts)
        out = []
        for post in posts:
            profile = authors.get(post.author)
            if profile is None:
                logger.warning("author %s not found for post %s, skipping", post.author, post.id)
                continue
            out.append(PostWithAuthor(**post.model_dump(), author_profile=profile))
        return out

    async def list_posts(self) -> List[PostWithAuthor]:
        return await self.attach_authors(await self.posts.find_all())

    async def list_posts_by_author(self, author_id: str) -> List[PostWithAuthor]:
        return await self.attach_authors(await self.posts.find_by_author(author_id))

    async def search_posts(self, term: str) -> List[PostWithAuthor]:
        """Case-insensitive substring match on title, content and author name."""
        posts = await self.list_posts()
        needle = (term or "").strip().lower()
        if not needle:
            return posts
        return [
            p
            for p in posts
            if needle in p.title.lower()
            or needle in p.body.content.lower()
            or needle in p.author_profile.name.lower()
        ]

    async def post_detail(self, post_id: str, viewer_id: Optional[str] = None) -> PostDetail:
        post = await self.posts.find_by_id(post_id)
        if post is None:
            raise NotFound("Post not found")
        with_author = await self.attach_authors([post])
        if not with_author:
            raise NotFound("Post not found")
        comments = await InteractionService(self.users, self.posts).comment_views(post.interactions.comments)
        likes = post.interactions.members(InteractionKind.LIKE)
        forwards = post.interactions.members(InteractionKind.FORWARD)
        return PostDetail(
            post=with_author[0],
            comments=comments,
            likes=len(likes),
            forwards=len(forwards),
            liked=viewer_id in likes if viewer_id else False,
            forwarded=viewer_id in forwards if viewer_id else False,
        )
