from __future__ import annotations

import logging

from fastapi import Request, Response

from planner.crypto import DecryptError, TokenCipher
from planner.settings import Settings, get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE_NAME = "access_token"
COOKIE_PATH = "/"
SAME_SITE = "strict"


class SessionCarrier:
    """
    Bridge between the Token Cipher and the cookie transport.

    - `issue` seals the raw token and sets it as an HttpOnly, SameSite=Strict,
      Path=/ cookie; Secure and Domain come from configuration.
    - `revoke` emits the same cookie, empty, with a zero lifetime.
    - `read` returns the opened token or None. A missing cookie and a corrupted
      one are indistinguishable here: both fall through to "anonymous".
    """

    def __init__(self, cipher: TokenCipher, secure: bool = False, domain: str | None = None) -> None:
        self._cipher = cipher
        self._secure = secure
        self._domain = domain

    @classmethod
    def from_settings(cls, cipher: TokenCipher, settings: Settings | None = None) -> SessionCarrier:
        settings = settings or get_settings()
        return cls(cipher, secure=settings.cookie_secure, domain=settings.resolved_cookie_domain())

    def issue(self, response: Response, raw_token: str, max_age_seconds: int) -> None:
        response.set_cookie(
            key=ACCESS_TOKEN_COOKIE_NAME,
            value=self._cipher.seal(raw_token),
            max_age=max_age_seconds,
            path=COOKIE_PATH,
            domain=self._domain,
            secure=self._secure,
            httponly=True,
            samesite=SAME_SITE,
        )
        logger.debug("Session cookie issued max_age=%s secure=%s", max_age_seconds, self._secure)

    def revoke(self, response: Response) -> None:
        response.set_cookie(
            key=ACCESS_TOKEN_COOKIE_NAME,
            value="",
            max_age=0,
            path=COOKIE_PATH,
            domain=self._domain,
            secure=self._secure,
            httponly=True,
            samesite=SAME_SITE,
        )
        logger.debug("Session cookie revoked")

    def read(self, request: Request, cookie_name: str = ACCESS_TOKEN_COOKIE_NAME) -> str | None:
        sealed = request.cookies.get(cookie_name)
        if not sealed:
            return None
        try:
            return self._cipher.open(sealed)
        except DecryptError:
            logger.info("Unreadable session cookie ignored name=%s", cookie_name)
            return None
