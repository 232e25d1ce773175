"""Error taxonomy shared by services and the HTTP layer.

Services raise these; repositories return ``None`` for absent documents.
The API turns every ``ForumError`` into ``{"success": false, "error": ...}``.
"""
from __future__ import annotations


class ForumError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(ForumError):
    status_code = 404
    default_message = "Not found"


class Unauthorized(ForumError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ForumError):
    status_code = 403
    default_message = "Forbidden"


class ValidationFailed(ForumError):
    status_code = 400
    default_message = "Invalid data"


class InvalidInput(ValidationFailed):
    """A required field is missing, empty, or malformed."""


class SchemaMismatch(ValidationFailed):
    """A document does not match its schema."""

    default_message = "Document does not match schema"


class InvalidToken(ValidationFailed):
    default_message = "Invalid or expired verification link"


class InvalidAuthor(ValidationFailed):
    default_message = "Author does not exist"


class Conflict(ForumError):
    status_code = 409
    default_message = "Already exists"


class ExternalFailure(ForumError):
    status_code = 502
    default_message = "External service failed"
