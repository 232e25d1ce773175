"""Boundary validators for user and post documents.

Each entity has a throwing validator for creation/decode paths, a safe one
that returns None, and a stored-view validator that turns a raw store
document into its serializable form. Everything read from the store goes
through the stored-view validator; documents that fail it are dropped and
logged so that old-schema documents never reach callers.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from forum.core.errors import SchemaMismatch
from forum.models.post import Post, PostDocument, StoredPost
from forum.models.user import StoredUser, User, UserDocument

logger = logging.getLogger(__name__)


def _describe(data: Any) -> str:
    if isinstance(data, dict):
        return str(data.get("_id", "<no id>"))
    return type(data).__name__


def _parse(model: type[BaseModel], data: Any):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise SchemaMismatch(f"invalid {model.__name__}: {exc.error_count()} error(s)") from exc


def _parse_safe(model: type[BaseModel], data: Any):
    try:
        return model.model_validate(data)
    except ValidationError:
        return None


def validate_user(data: Any) -> UserDocument:
    return _parse(UserDocument, data)


def validate_user_safe(data: Any) -> Optional[UserDocument]:
    return _parse_safe(UserDocument, data)


def validate_stored_user_safe(doc: Any) -> Optional[User]:
    try:
        stored = StoredUser.model_validate(doc)
    except ValidationError as exc:
        logger.warning("dropping user document %s: %s", _describe(doc), exc.errors(include_url=False))
        return None
    return stored.to_serializable()


def validate_post(data: Any) -> PostDocument:
    return _parse(PostDocument, data)


def validate_post_safe(data: Any) -> Optional[PostDocument]:
    return _parse_safe(PostDocument, data)


def validate_stored_post_safe(doc: Any) -> Optional[Post]:
    try:
        stored = StoredPost.model_validate(doc)
    except ValidationError as exc:
        logger.warning("dropping post document %s: %s", _describe(doc), exc.errors(include_url=False))
        return None
    return stored.to_serializable()


def to_document(model: BaseModel) -> dict:
    """Plain dict in the stored field naming, ready for insertion."""
    return model.model_dump(by_alias=True, exclude={"id"})
