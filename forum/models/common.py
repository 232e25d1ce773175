from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BeforeValidator, WithJsonSchema


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return ``value`` as an ObjectId, or None when it cannot be one."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except InvalidId:
        return None


def _as_object_id(value: Any) -> ObjectId:
    oid = parse_object_id(value)
    if oid is None:
        raise ValueError(f"not a valid ObjectId: {value!r}")
    return oid


def _as_reference(value: Any) -> str:
    # references are kept as 24-hex strings; ObjectIds from older writes are coerced
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, str) and ObjectId.is_valid(value):
        return value.lower()
    raise ValueError(f"not a valid id reference: {value!r}")


# native id of a stored document
PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(_as_object_id),
    WithJsonSchema({"type": "string"}),
]

# id of another document, as held inside a document
IdRef = Annotated[str, BeforeValidator(_as_reference)]
