from __future__ import annotations

from datetime import datetime, timezone
import logging

from fastapi import HTTPException, Request, status
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from planner.models.security import User
from planner.security.config import SecurityConfig
from planner.security.session import SessionCarrier
from planner.security.tokens import TokenError, TokenProvider

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(plain_password, password_hash)


def extract_user_id(
    request: Request,
    config: SecurityConfig,
    carrier: SessionCarrier,
    tokens: TokenProvider,
) -> int | None:
    """
    Identify the caller from the sealed session cookie.

    - Input: `Cookie: access_token=<sealed JWT>`
    - Missing, undecryptable, expired or invalid tokens all mean "anonymous" (None).
    """

    raw_token = carrier.read(request, config.auth.cookie_name)
    if raw_token is None:
        logger.info("No readable session (auth required) path=%s method=%s", request.url.path, request.method)
        return None

    try:
        claims = tokens.verify(raw_token)
    except TokenError:
        logger.info("Session token rejected path=%s method=%s", request.url.path, request.method)
        return None

    return claims.user_id


def load_user(db: Session, user_id: int) -> User:
    user = db.execute(
        select(User).where(User.id == user_id).options(selectinload(User.positions))
    ).scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or inactive user")

    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Check credentials; the same 401 is raised for unknown users and wrong passwords."""
    user = db.execute(
        select(User).where(User.email == email.strip().lower()).options(selectinload(User.positions))
    ).scalar_one_or_none()

    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.info("Login failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return user
