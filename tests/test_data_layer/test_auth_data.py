"""
Tests for user-loading and credential checks (ORM).

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

import pytest
from fastapi import HTTPException

from planner.access.kinds import Role, ScopeKind
from planner.models.organization import Campus, RegionalTechnologicalInstitute
from planner.models.security import Position, User
from planner.security.auth import authenticate, get_password_hash, load_user, verify_password


def _campus(db_session) -> Campus:
    rti = RegionalTechnologicalInstitute(name="RTI Test")
    db_session.add(rti)
    db_session.flush()
    campus = Campus(name="Test Campus", rti_id=rti.id)
    db_session.add(campus)
    db_session.flush()
    return campus


def test_load_user_returns_user_with_positions(db_session):
    # Arrange: create a campus and a user holding one position there
    campus = _campus(db_session)
    user = User(email="test@example.com", full_name="Test User", is_active=True)
    user.positions.append(Position.for_campus(Role.TEACHER, campus.id))
    db_session.add(user)
    db_session.commit()

    # Act
    loaded = load_user(db_session, user.id)

    # Assert
    assert loaded.id == user.id
    assert loaded.email == "test@example.com"
    assert len(loaded.positions) == 1
    assert loaded.positions[0].role == Role.TEACHER
    assert loaded.positions[0].scope_kind == ScopeKind.CAMPUS
    assert loaded.positions[0].scope_id == campus.id


def test_load_user_raises_when_not_found(db_session):
    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, 99999)
    assert exc_info.value.status_code == 401


def test_load_user_raises_when_inactive(db_session):
    user = User(email="inactive@example.com", is_active=False)
    db_session.add(user)
    db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, user.id)
    assert exc_info.value.status_code == 401


@pytest.mark.filterwarnings("error:datetime.datetime.utcnow:DeprecationWarning")
def test_authenticate_normalizes_email_and_records_login(db_session):
    user = User(email="login@example.com", password_hash=get_password_hash("s3cret"))
    db_session.add(user)
    db_session.commit()
    assert user.last_login_at is None

    authenticated = authenticate(db_session, "  Login@Example.com ", "s3cret")

    assert authenticated.id == user.id
    assert authenticated.last_login_at is not None


@pytest.mark.parametrize(
    "email,password",
    [
        ("login@example.com", "wrong"),
        ("nobody@example.com", "s3cret"),
    ],
)
def test_authenticate_rejects_bad_credentials_with_same_error(db_session, email, password):
    db_session.add(User(email="login@example.com", password_hash=get_password_hash("s3cret")))
    db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        authenticate(db_session, email, password)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid credentials"


def test_authenticate_rejects_user_without_password(db_session):
    db_session.add(User(email="sso-only@example.com", password_hash=None))
    db_session.commit()

    with pytest.raises(HTTPException):
        authenticate(db_session, "sso-only@example.com", "")


def test_password_hash_round_trip():
    hashed = get_password_hash("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed) is True
    assert verify_password("other", hashed) is False
    assert verify_password("s3cret", None) is False
