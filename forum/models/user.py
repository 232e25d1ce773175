from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from forum.models.common import PyObjectId


class Credentials(BaseModel):
    salt: str
    hash: str


class UserDocument(BaseModel):
    """A user as written to the ``users`` collection, minus its id."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    email: str
    credentials: Credentials
    is_admin: bool = Field(default=False, alias="isAdmin")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class StoredUser(UserDocument):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(alias="_id")

    def to_serializable(self) -> "User":
        return User(id=str(self.id), **self.model_dump(exclude={"id"}))


class User(UserDocument):
    id: str

    def public(self) -> "PublicUser":
        return PublicUser(id=self.id, name=self.name, is_admin=self.is_admin, created_at=self.created_at)


class PublicUser(BaseModel):
    """What other users get to see about an author."""

    id: str
    name: str
    is_admin: bool = False
    created_at: datetime
