from __future__ import annotations

import logging
import time

import jwt
import pytest

from planner.security.tokens import TokenError, TokenProvider
from planner.settings import Settings

SECRET = "s" * 64


@pytest.fixture
def provider() -> TokenProvider:
    return TokenProvider(SECRET, issuer="planner-test", expiration_seconds=600)


def test_issue_then_verify(provider):
    token = provider.issue(42, email="user@planner.example")

    claims = provider.verify(token)

    assert claims.user_id == 42
    assert claims.email == "user@planner.example"
    assert claims.expires_at - claims.issued_at == 600


def test_token_is_hs512_with_issuer(provider):
    token = provider.issue(7)
    assert jwt.get_unverified_header(token)["alg"] == "HS512"

    payload = jwt.decode(token, SECRET, algorithms=["HS512"], issuer="planner-test")
    assert payload["sub"] == "7"
    assert payload["userId"] == 7
    assert "email" not in payload


def test_expired_token_is_rejected(provider):
    token = provider.issue(1, now=time.time() - 3600)
    with pytest.raises(TokenError):
        provider.verify(token)


def test_token_from_other_issuer_is_rejected(provider):
    other = TokenProvider(SECRET, issuer="someone-else", expiration_seconds=600)
    with pytest.raises(TokenError):
        provider.verify(other.issue(1))


def test_token_signed_with_other_secret_is_rejected(provider):
    other = TokenProvider("o" * 64, issuer="planner-test", expiration_seconds=600)
    with pytest.raises(TokenError):
        provider.verify(other.issue(1))


def test_token_without_subject_is_rejected(provider):
    token = jwt.encode(
        {"iss": "planner-test", "exp": int(time.time()) + 60},
        SECRET,
        algorithm="HS512",
    )
    with pytest.raises(TokenError):
        provider.verify(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_garbage_is_rejected(provider, token):
    with pytest.raises(TokenError):
        provider.verify(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenProvider("  ", issuer="planner", expiration_seconds=60)


def test_short_secret_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="planner.security.tokens"):
        TokenProvider("short", issuer="planner", expiration_seconds=60)
    assert any("weak" in record.getMessage() for record in caplog.records)


def test_from_settings():
    settings = Settings(jwt_secret=SECRET, jwt_issuer="from-settings", jwt_expiration_seconds=5)
    provider = TokenProvider.from_settings(settings)

    assert provider.expiration_seconds == 5
    claims = provider.verify(provider.issue(3))
    assert claims.user_id == 3
