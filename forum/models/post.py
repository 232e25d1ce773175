from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from forum.models.common import IdRef, PyObjectId
from forum.models.user import PublicUser


class InteractionKind(str, Enum):
    LIKE = "likes"
    FORWARD = "forwards"

    @property
    def path(self) -> str:
        return f"interactions.{self.value}"


class PostBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str
    images: List[str] = Field(default_factory=list)


class CommentBody(BaseModel):
    content: str


class Comment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    author: IdRef
    body: CommentBody
    created_at: datetime = Field(alias="createdAt")


class Interactions(BaseModel):
    likes: List[IdRef] = Field(default_factory=list)
    forwards: List[IdRef] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)

    @field_validator("likes", "forwards")
    @classmethod
    def _unique_members(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("interaction set holds a duplicate id")
        return v

    def members(self, kind: InteractionKind) -> List[str]:
        return self.likes if kind is InteractionKind.LIKE else self.forwards


class PostDocument(BaseModel):
    """A post as written to the ``posts`` collection, minus its id."""

    model_config = ConfigDict(populate_by_name=True)

    author: IdRef
    title: str = Field(min_length=1)
    body: PostBody
    interactions: Interactions = Field(default_factory=Interactions)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class StoredPost(PostDocument):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")

    def to_serializable(self) -> "Post":
        return Post(id=str(self.id), **self.model_dump(exclude={"id"}))


class Post(PostDocument):
    id: str


class PostWithAuthor(Post):
    author_profile: PublicUser
