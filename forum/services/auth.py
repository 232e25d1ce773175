from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import jwt

from forum.core.settings import settings
from forum.models.user import Credentials

ph = PasswordHasher()

ACCESS_PURPOSE = "access"


def generate_credentials(password: str) -> Credentials:
    salt = secrets.token_hex(16)
    return Credentials(salt=salt, hash=ph.hash(password, salt=bytes.fromhex(salt)))


def verify_password(password: str, credentials: Credentials) -> bool:
    try:
        return ph.verify(credentials.hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(sub: str, is_admin: bool = False) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": sub,
        "adm": is_admin,
        "purpose": ACCESS_PURPOSE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.access_token_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"], issuer=settings.jwt_issuer)
