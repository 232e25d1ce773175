from __future__ import annotations

from datetime import datetime
from typing import Any, List

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from forum.models.post import Post, PostWithAuthor
from forum.models.user import PublicUser, User
from forum.services.interactions import CommentView


def ok(data: Any) -> dict:
    return {"success": True, "data": jsonable_encoder(data)}


def fail(error: str) -> dict:
    return {"success": False, "error": error}


class SignupIn(BaseModel):
    username: str = Field(max_length=64)
    email: str = Field(max_length=254)
    password: str = Field(max_length=128)


class VerifyIn(BaseModel):
    token: str


class LoginIn(BaseModel):
    username: str
    password: str


class UsernameIn(BaseModel):
    username: str


class CommentIn(BaseModel):
    content: str = Field(max_length=5000)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AccountOut(BaseModel):
    id: str
    name: str
    email: str
    is_admin: bool
    created_at: datetime

    @classmethod
    def of(cls, user: User) -> "AccountOut":
        return cls(id=user.id, name=user.name, email=user.email, is_admin=user.is_admin, created_at=user.created_at)


class CommentOut(BaseModel):
    author: str
    author_name: str
    content: str
    created_at: datetime

    @classmethod
    def of(cls, c: CommentView) -> "CommentOut":
        return cls(author=c.author, author_name=c.author_name, content=c.content, created_at=c.created_at)


class PostOut(BaseModel):
    id: str
    author: PublicUser
    title: str
    content: str
    images: List[str]
    likes: int
    forwards: int
    comments: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def of(cls, p: PostWithAuthor) -> "PostOut":
        return cls(
            id=p.id,
            author=p.author_profile,
            title=p.title,
            content=p.body.content,
            images=p.body.images,
            likes=len(p.interactions.likes),
            forwards=len(p.interactions.forwards),
            comments=len(p.interactions.comments),
            created_at=p.created_at,
            updated_at=p.updated_at,
        )


class PostDetailOut(BaseModel):
    post: PostOut
    comments: List[CommentOut]
    liked: bool
    forwarded: bool


class LikeOut(BaseModel):
    count: int
    liked: bool


class ForwardOut(BaseModel):
    count: int
    forwarded: bool


class PostEditOut(BaseModel):
    id: str
    author: str
    title: str
    content: str
    images: List[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def of(cls, p: Post) -> "PostEditOut":
        return cls(
            id=p.id,
            author=p.author,
            title=p.title,
            content=p.body.content,
            images=p.body.images,
            created_at=p.created_at,
            updated_at=p.updated_at,
        )
