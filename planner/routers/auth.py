from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from planner.db.session import get_db
from planner.models.security import User
from planner.schemas.security import LoginIn, UserOut
from planner.security.auth import authenticate
from planner.security.dependencies import get_current_user, get_session_carrier, get_token_provider
from planner.security.session import SessionCarrier
from planner.security.tokens import TokenProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth/login", response_model=UserOut)
def login(
    body: LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    carrier: SessionCarrier = Depends(get_session_carrier),
    tokens: TokenProvider = Depends(get_token_provider),
) -> User:
    user = authenticate(db, body.email, body.password)
    token = tokens.issue(user.id, user.email)
    carrier.issue(response, token, tokens.expiration_seconds)
    logger.info("Login succeeded user=%s", user.id)
    return user


@router.post("/auth/logout", status_code=204)
def logout(response: Response, carrier: SessionCarrier = Depends(get_session_carrier)) -> None:
    carrier.revoke(response)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> User:
    return user
