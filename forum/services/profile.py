from __future__ import annotations

import re
from typing import Optional

from forum.core.errors import InvalidInput, NotFound
from forum.db.users import UserRepository
from forum.models.user import User
from forum.services.auth import verify_password

USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def check_username(name: str) -> str:
    """Names are case-sensitive and compared exactly."""
    if not name:
        raise InvalidInput("Username cannot be empty")
    if len(name) < 3 or len(name) > 30:
        raise InvalidInput("Username must be between 3 and 30 characters")
    if not USERNAME_RE.match(name):
        raise InvalidInput("Username can only contain letters, numbers, underscores, and hyphens")
    return name


class IdentityService:
    def __init__(self, users: UserRepository) -> None:
        self.users = users

    async def authenticate(self, name: str, password: str) -> Optional[User]:
        name = (name or "").strip()
        if not name or not password:
            return None
        user = await self.users.find_by_name(name)
        if user is None or not verify_password(password, user.credentials):
            return None
        return user

    async def current_user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def update_username(self, user_id: str, new_name: str) -> User:
        name = check_username((new_name or "").strip())
        updated = await self.users.update_name(user_id, name)
        if updated is None:
            raise NotFound("User not found")
        return updated
