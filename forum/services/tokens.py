from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from forum.core.settings import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenCodec:
    """Signs and verifies short-lived HS256 tokens scoped to one purpose."""

    def __init__(self, secret: str, issuer: str, purpose: str) -> None:
        self.secret = secret
        self.issuer = issuer
        self.purpose = purpose

    def sign(self, payload: Dict[str, Any], ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            **payload,
            "iss": self.issuer,
            "purpose": self.purpose,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[ALGORITHM], issuer=self.issuer)
        except JWTError as exc:
            logger.info("rejected %s token: %s", self.purpose, exc)
            return None
        if claims.get("purpose") != self.purpose:
            logger.info("rejected token issued for %r, expected %r", claims.get("purpose"), self.purpose)
            return None
        return claims


def registration_codec() -> TokenCodec:
    return TokenCodec(settings.jwt_secret, settings.jwt_issuer, "registration")
