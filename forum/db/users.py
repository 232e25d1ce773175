from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from forum.core.errors import Conflict
from forum.db.mongo import USERS
from forum.models.common import parse_object_id, utcnow
from forum.models.user import PublicUser, User
from forum.models.validation import to_document, validate_stored_user_safe, validate_user

logger = logging.getLogger(__name__)

USER_EXISTS = "User already exists"


class UserRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.collection = db[USERS]

    async def create(self, data: dict) -> User:
        """Validate and insert a user; a taken name raises Conflict."""
        document = validate_user(data)
        raw = to_document(document)
        try:
            result = await self.collection.insert_one(raw)
        except DuplicateKeyError as exc:
            raise Conflict(USER_EXISTS) from exc
        return User(id=str(result.inserted_id), **document.model_dump())

    async def find_by_id(self, user_id: str) -> Optional[User]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid})
        if doc is None:
            return None
        return validate_stored_user_safe(doc)

    async def find_by_name(self, name: str) -> Optional[User]:
        doc = await self.collection.find_one({"name": name})
        if doc is None:
            return None
        return validate_stored_user_safe(doc)

    async def exists(self, user_id: str) -> bool:
        return await self.find_by_id(user_id) is not None

    async def find_all(self) -> List[User]:
        users = []
        async for doc in self.collection.find({}):
            user = validate_stored_user_safe(doc)
            if user is not None:
                users.append(user)
        return users

    async def resolve_authors(self, ids: Iterable[str]) -> Dict[str, Optional[PublicUser]]:
        """Batch lookup of author profiles.

        Every requested id is a key of the result; ids that are malformed,
        missing, or whose document fails validation map to None.
        """
        wanted = list(dict.fromkeys(ids))
        found: Dict[str, Optional[PublicUser]] = {i: None for i in wanted}
        oids = [oid for oid in (parse_object_id(i) for i in wanted) if oid is not None]
        if not oids:
            return found
        async for doc in self.collection.find({"_id": {"$in": oids}}):
            user = validate_stored_user_safe(doc)
            if user is not None and user.id in found:
                found[user.id] = user.public()
        return found

    async def update_name(self, user_id: str, name: str) -> Optional[User]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": {"name": name, "updatedAt": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise Conflict("Username is already taken") from exc
        if doc is None:
            return None
        return validate_stored_user_safe(doc)

    async def delete(self, user_id: str) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0
