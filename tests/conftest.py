"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other. Resolver tests use the
in-memory graph and grant store below, so the hierarchy walk is exercised
without any storage at all.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from planner.access.grants import PositionGrant
from planner.access.kinds import PARENT_KIND, ResourceKind, ResourceRef, Role, ScopeKind


TEST_DB_URL = "sqlite:///:memory:"
REPO_ROOT = Path(__file__).resolve().parents[1]


# ---- In-memory collaborators ---------------------------------------------------------


class InMemoryOrganizationalGraph:
    """Arena of integer ids: (kind, id) -> parent reference."""

    def __init__(self) -> None:
        self.existing: set[tuple[ResourceKind, int]] = set()
        self.parents: dict[tuple[ResourceKind, int], ResourceRef] = {}
        self.offerings: dict[int, set[int]] = {}
        self.teachers: dict[int, set[int]] = {}

    def _add(self, kind: ResourceKind, resource_id: int, parent_id: int | None = None) -> None:
        self.existing.add((kind, resource_id))
        if parent_id is not None:
            self.parents[(kind, resource_id)] = ResourceRef(PARENT_KIND[kind], parent_id)

    def add_rti(self, rti_id: int) -> None:
        self._add(ResourceKind.RTI, rti_id)

    def add_campus(self, campus_id: int, rti_id: int) -> None:
        self._add(ResourceKind.CAMPUS, campus_id, rti_id)

    def add_program(self, program_id: int, campus_ids: list[int]) -> None:
        self._add(ResourceKind.PROGRAM, program_id)
        self.offerings[program_id] = set(campus_ids)

    def add_term(self, term_id: int, program_id: int) -> None:
        self._add(ResourceKind.TERM, term_id, program_id)

    def add_curricular_unit(self, cu_id: int, term_id: int) -> None:
        self._add(ResourceKind.CURRICULAR_UNIT, cu_id, term_id)

    def add_course(self, course_id: int, cu_id: int, teacher_ids: tuple[int, ...] = ()) -> None:
        self._add(ResourceKind.COURSE, course_id, cu_id)
        self.teachers[course_id] = set(teacher_ids)

    def add_weekly_planning(self, wp_id: int, course_id: int) -> None:
        self._add(ResourceKind.WEEKLY_PLANNING, wp_id, course_id)

    def add_programmatic_content(self, pc_id: int, wp_id: int) -> None:
        self._add(ResourceKind.PROGRAMMATIC_CONTENT, pc_id, wp_id)

    def add_activity(self, activity_id: int, pc_id: int) -> None:
        self._add(ResourceKind.ACTIVITY, activity_id, pc_id)

    # OrganizationalGraph protocol

    def exists(self, kind: ResourceKind, resource_id: int) -> bool:
        return (kind, resource_id) in self.existing

    def get_parent(self, kind: ResourceKind, resource_id: int) -> ResourceRef | None:
        return self.parents.get((kind, resource_id))

    def get_offering_campuses(self, program_id: int) -> frozenset[int]:
        return frozenset(self.offerings.get(program_id, set()))

    def get_assigned_teacher_user_ids(self, course_id: int) -> frozenset[int]:
        return frozenset(self.teachers.get(course_id, set()))


class InMemoryGrantStore:
    def __init__(self) -> None:
        self.grants: dict[int, list[PositionGrant]] = {}

    def grant_campus(self, user_id: int, campus_id: int, role: Role = Role.TEACHER) -> None:
        self.grants.setdefault(user_id, []).append(PositionGrant(role, ScopeKind.CAMPUS, campus_id))

    def grant_rti(self, user_id: int, rti_id: int, role: Role = Role.ADMIN) -> None:
        self.grants.setdefault(user_id, []).append(PositionGrant(role, ScopeKind.RTI, rti_id))

    def get_positions(self, user_id: int) -> list[PositionGrant]:
        return list(self.grants.get(user_id, []))


@pytest.fixture
def org() -> InMemoryOrganizationalGraph:
    """
    Standard tree used by resolver tests:

        RTI 1 -- campus 10 (C1), campus 11
        RTI 2 -- campus 20 (C2)

        program 100 offered at 10 and 20 -> term 200 -> unit 300 -> course 400
            -> weekly planning 500 -> content 600 -> activity 700
        program 101 offered at 11 -> term 201 -> unit 301 -> course 401 (teacher: user 1)
            -> weekly planning 501 -> content 601 -> activity 701

    Orphans: course 499 (unit 399 missing); term 299 under program 199 (no offering campus).
    """

    g = InMemoryOrganizationalGraph()
    g.add_rti(1)
    g.add_rti(2)
    g.add_campus(10, 1)
    g.add_campus(11, 1)
    g.add_campus(20, 2)

    g.add_program(100, [10, 20])
    g.add_term(200, 100)
    g.add_curricular_unit(300, 200)
    g.add_course(400, 300)
    g.add_weekly_planning(500, 400)
    g.add_programmatic_content(600, 500)
    g.add_activity(700, 600)

    g.add_program(101, [11])
    g.add_term(201, 101)
    g.add_curricular_unit(301, 201)
    g.add_course(401, 301, teacher_ids=(1,))
    g.add_weekly_planning(501, 401)
    g.add_programmatic_content(601, 501)
    g.add_activity(701, 601)

    g.add_course(499, 399)
    g.add_program(199, [])
    g.add_term(299, 199)
    return g


@pytest.fixture
def grants() -> InMemoryGrantStore:
    return InMemoryGrantStore()


# ---- Database ------------------------------------------------------------------------


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from planner.db.base import Base
    import planner.models.organization  # noqa: F401
    import planner.models.security  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state. Commits
    inside the code under test become savepoint releases.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
        join_transaction_mode="create_savepoint",
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def seeded(db_session):
    """Demo organization from `planner.db.init_db.seed`, keyed by name for lookups."""
    from sqlalchemy import select

    from planner.db.init_db import seed
    from planner.models.organization import Campus, Course, Program, RegionalTechnologicalInstitute
    from planner.models.security import User

    seed(db_session)

    def by(model, column, value):
        return db_session.scalars(select(model).where(column == value)).one()

    return {
        "north": by(RegionalTechnologicalInstitute, RegionalTechnologicalInstitute.name, "RTI North"),
        "south": by(RegionalTechnologicalInstitute, RegionalTechnologicalInstitute.name, "RTI South"),
        "fray_bentos": by(Campus, Campus.name, "Fray Bentos"),
        "rivera": by(Campus, Campus.name, "Rivera"),
        "durazno": by(Campus, Campus.name, "Durazno"),
        "software": by(Program, Program.name, "Software Engineering"),
        "dairy": by(Program, Program.name, "Dairy Technology"),
        "course_a": by(Course, Course.shift, "MORNING"),
        "course_b": by(Course, Course.shift, "EVENING"),
        "admin": by(User, User.email, "admin@planner.example"),
        "coordinator": by(User, User.email, "coordinator@planner.example"),
        "teacher": by(User, User.email, "teacher@planner.example"),
    }


# ---- Application ---------------------------------------------------------------------


@pytest.fixture
def settings():
    from planner.settings import Settings

    return Settings(
        db_url=TEST_DB_URL,
        security_config_path=str(REPO_ROOT / "config" / "security_config.yaml"),
        encryption_secret="test-encryption-secret",
        jwt_secret="t" * 64,
        jwt_issuer="planner-test",
        jwt_expiration_seconds=3600,
    )


@pytest.fixture
def client(settings, db_session, seeded):
    """TestClient over the seeded, rolled-back session."""
    from fastapi.testclient import TestClient

    from planner.db.session import get_db
    from planner.main import create_app

    app = create_app(settings=settings, seed_database=False)

    def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app) as test_client:
        yield test_client
