"""
Issue and verify the bearer token that identifies a caller across requests.

The token is an HS512-signed JWT carrying the user id. It is never sent in the
clear: the Session Carrier seals it into the `access_token` cookie. Its own
`exp` claim is the only validity window of a session; nothing is stored
server-side.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any

import jwt

from planner.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_ALGORITHM = "HS512"
_MINIMUM_SECRET_LENGTH = 64


class TokenError(Exception):
    """Raised when a bearer token is invalid or expired. Do not log the token."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str | None
    issued_at: int
    expires_at: int


class TokenProvider:
    def __init__(self, secret: str, issuer: str, expiration_seconds: int) -> None:
        if not secret or not secret.strip():
            raise ValueError("JWT secret must be configured (PLANNER_JWT_SECRET)")
        if len(secret.encode("utf-8")) < _MINIMUM_SECRET_LENGTH:
            logger.warning(
                "JWT secret is weak (< %d bytes); generate one with: openssl rand -base64 64",
                _MINIMUM_SECRET_LENGTH,
            )
        self._secret = secret
        self._issuer = issuer
        self._expiration_seconds = expiration_seconds

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> TokenProvider:
        settings = settings or get_settings()
        return cls(settings.jwt_secret, settings.jwt_issuer, settings.jwt_expiration_seconds)

    @property
    def expiration_seconds(self) -> int:
        return self._expiration_seconds

    def issue(self, user_id: int, email: str | None = None, now: float | None = None) -> str:
        issued_at = int(now if now is not None else time.time())
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "userId": user_id,
            "iss": self._issuer,
            "iat": issued_at,
            "exp": issued_at + self._expiration_seconds,
        }
        if email:
            payload["email"] = email
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                issuer=self._issuer,
                options={"require": ["exp", "iss", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Token expired")
            raise TokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise TokenError("Invalid token") from e

        raw_user_id = payload.get("userId", payload.get("sub"))
        try:
            user_id = int(raw_user_id)
        except (TypeError, ValueError) as e:
            raise TokenError("Invalid token: subject") from e

        return TokenClaims(
            user_id=user_id,
            email=payload.get("email"),
            issued_at=int(payload.get("iat", 0)),
            expires_at=int(payload["exp"]),
        )
