from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from planner.access.kinds import Role
from planner.db.base import Base
from planner.db.session import SessionLocal, engine
from planner.models.organization import (
    Activity,
    Campus,
    Course,
    CurricularUnit,
    Program,
    ProgrammaticContent,
    RegionalTechnologicalInstitute,
    Term,
    WeeklyPlanning,
)
from planner.models.security import Position, User
from planner.security.auth import get_password_hash

DEMO_PASSWORD = "planner-demo"


def init_db() -> None:
    """
    Create tables + seed demo data.

    Small and deterministic so the access rules can be tried without setup.
    Every demo user logs in with `DEMO_PASSWORD`.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(RegionalTechnologicalInstitute.id).limit(1)).first() is not None


def seed(db: Session) -> None:
    # Organization: two RTIs, three campuses
    north = RegionalTechnologicalInstitute(name="RTI North")
    south = RegionalTechnologicalInstitute(name="RTI South")
    db.add_all([north, south])
    db.flush()

    fray_bentos = Campus(name="Fray Bentos", rti_id=north.id)
    rivera = Campus(name="Rivera", rti_id=north.id)
    durazno = Campus(name="Durazno", rti_id=south.id)
    db.add_all([fray_bentos, rivera, durazno])
    db.flush()

    # Software engineering is offered at two campuses of different RTIs.
    software = Program(name="Software Engineering", duration_in_terms=8, total_credits=360)
    software.campuses.extend([fray_bentos, durazno])
    dairy = Program(name="Dairy Technology", duration_in_terms=6, total_credits=240)
    dairy.campuses.append(rivera)
    db.add_all([software, dairy])
    db.flush()

    term_1 = Term(number=1, program_id=software.id)
    dairy_term_1 = Term(number=1, program_id=dairy.id)
    db.add_all([term_1, dairy_term_1])
    db.flush()

    programming = CurricularUnit(name="Programming I", credits=10, term_id=term_1.id)
    milk = CurricularUnit(name="Milk Processing", credits=8, term_id=dairy_term_1.id)
    db.add_all([programming, milk])
    db.flush()

    # Users
    admin = User(email="admin@planner.example", full_name="Ada Admin", password_hash=get_password_hash(DEMO_PASSWORD))
    admin.positions.append(Position.for_rti(Role.ADMIN, north.id))

    coordinator = User(
        email="coordinator@planner.example",
        full_name="Cora Coordinator",
        password_hash=get_password_hash(DEMO_PASSWORD),
    )
    coordinator.positions.append(Position.for_campus(Role.COORDINATOR, fray_bentos.id))

    teacher = User(email="teacher@planner.example", full_name="Tom Teacher", password_hash=get_password_hash(DEMO_PASSWORD))
    teacher.positions.append(Position.for_campus(Role.TEACHER, rivera.id))

    db.add_all([admin, coordinator, teacher])
    db.flush()

    # Courses: the teacher is assigned to a course outside their campus.
    course_a = Course(
        shift="MORNING",
        start_date=date(2026, 3, 2),
        end_date=date(2026, 7, 3),
        curricular_unit_id=programming.id,
    )
    course_a.teachers.append(teacher)
    course_b = Course(shift="EVENING", curricular_unit_id=milk.id)
    db.add_all([course_a, course_b])
    db.flush()

    week_1 = WeeklyPlanning(week_number=1, start_date=date(2026, 3, 2), end_date=date(2026, 3, 8), course_id=course_a.id)
    db.add(week_1)
    db.flush()

    content = ProgrammaticContent(content="Variables and control flow", weekly_planning_id=week_1.id)
    db.add(content)
    db.flush()

    db.add(Activity(description="Warm-up exercises", duration_in_minutes=45, programmatic_content_id=content.id))

    db.commit()
