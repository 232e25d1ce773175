"""Email-verified signup without a pending-users table.

The pending registration (name, email, credentials) lives only inside a
signed, expiring token mailed to the user. Redeeming a token creates the
user; the unique name index makes the first redemption for a name win and
every later one (replay or a second token) fail with Conflict.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from pydantic import BaseModel, ValidationError

from forum.core.errors import Conflict, InvalidInput, InvalidToken
from forum.core.settings import Settings
from forum.db.users import USER_EXISTS, UserRepository
from forum.models.common import utcnow
from forum.models.user import Credentials, User
from forum.services.auth import generate_credentials
from forum.services.notifier import Notifier
from forum.services.profile import check_username
from forum.services.tokens import TokenCodec

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class RegistrationPayload(BaseModel):
    name: str
    email: str
    credentials: Credentials


def email_allowed(email: str, suffixes: list[str]) -> bool:
    address = email.strip().lower()
    return any(address.endswith(suffix) for suffix in suffixes)


class RegistrationService:
    def __init__(self, users: UserRepository, codec: TokenCodec, notifier: Notifier, cfg: Settings) -> None:
        self.users = users
        self.codec = codec
        self.notifier = notifier
        self.cfg = cfg

    async def signup(self, name: str, email: str, password: str) -> str:
        """Issue and mail a verification token; returns the token."""
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password:
            raise InvalidInput("Username, email, and password are required")
        check_username(name)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        suffixes = self.cfg.allowed_email_suffixes_list
        if not email_allowed(email, suffixes):
            raise InvalidInput("Email domain is not allowed. Allowed: " + ", ".join(suffixes))
        if await self.users.find_by_name(name) is not None:
            raise Conflict(USER_EXISTS)

        payload = RegistrationPayload(name=name, email=email, credentials=generate_credentials(password))
        token = self.codec.sign(payload.model_dump(), timedelta(hours=self.cfg.registration_token_hours))
        await self.notifier.send_verification_email(email, token)
        logger.info("verification token issued for %r", name)
        return token

    async def verify(self, token: str) -> User:
        claims = self.codec.verify(token or "")
        if claims is None:
            raise InvalidToken()
        try:
            payload = RegistrationPayload.model_validate(claims)
        except ValidationError as exc:
            raise InvalidToken() from exc

        if await self.users.find_by_name(payload.name) is not None:
            raise Conflict(USER_EXISTS)
        now = utcnow()
        user = await self.users.create(
            {
                "name": payload.name,
                "email": payload.email,
                "credentials": payload.credentials.model_dump(),
                "isAdmin": False,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        logger.info("user %r verified and created as %s", user.name, user.id)
        return user
