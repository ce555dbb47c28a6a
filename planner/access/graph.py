"""
Read-only view of the organizational containment graph.

The resolver never touches ORM objects: it asks for parent links and offering
campuses by integer id, so the walk can be tested against any implementation
of `OrganizationalGraph` (the SQL one below, or an in-memory fake).
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from planner.access.kinds import ResourceKind, ResourceRef
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
    campus_programs,
    course_teachers,
)


class OrganizationalGraph(Protocol):
    def exists(self, kind: ResourceKind, resource_id: int) -> bool: ...

    def get_parent(self, kind: ResourceKind, resource_id: int) -> ResourceRef | None: ...

    def get_offering_campuses(self, program_id: int) -> frozenset[int]: ...

    def get_assigned_teacher_user_ids(self, course_id: int) -> frozenset[int]: ...


# kind -> (model, parent foreign-key column, parent kind)
_PARENT_COLUMNS = {
    ResourceKind.ACTIVITY: (Activity, Activity.programmatic_content_id, ResourceKind.PROGRAMMATIC_CONTENT),
    ResourceKind.PROGRAMMATIC_CONTENT: (
        ProgrammaticContent,
        ProgrammaticContent.weekly_planning_id,
        ResourceKind.WEEKLY_PLANNING,
    ),
    ResourceKind.WEEKLY_PLANNING: (WeeklyPlanning, WeeklyPlanning.course_id, ResourceKind.COURSE),
    ResourceKind.COURSE: (Course, Course.curricular_unit_id, ResourceKind.CURRICULAR_UNIT),
    ResourceKind.CURRICULAR_UNIT: (CurricularUnit, CurricularUnit.term_id, ResourceKind.TERM),
    ResourceKind.TERM: (Term, Term.program_id, ResourceKind.PROGRAM),
    ResourceKind.CAMPUS: (Campus, Campus.rti_id, ResourceKind.RTI),
}

_MODELS = {
    ResourceKind.ACTIVITY: Activity,
    ResourceKind.PROGRAMMATIC_CONTENT: ProgrammaticContent,
    ResourceKind.WEEKLY_PLANNING: WeeklyPlanning,
    ResourceKind.COURSE: Course,
    ResourceKind.CURRICULAR_UNIT: CurricularUnit,
    ResourceKind.TERM: Term,
    ResourceKind.PROGRAM: Program,
    ResourceKind.CAMPUS: Campus,
    ResourceKind.RTI: RegionalTechnologicalInstitute,
}


class SqlOrganizationalGraph:
    """`OrganizationalGraph` backed by a SQLAlchemy session (one per request)."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def exists(self, kind: ResourceKind, resource_id: int) -> bool:
        model = _MODELS[kind]
        return self._db.execute(select(model.id).where(model.id == resource_id)).first() is not None

    def get_parent(self, kind: ResourceKind, resource_id: int) -> ResourceRef | None:
        entry = _PARENT_COLUMNS.get(kind)
        if entry is None:
            return None
        model, parent_column, parent_kind = entry
        parent_id = self._db.execute(select(parent_column).where(model.id == resource_id)).scalar_one_or_none()
        if parent_id is None:
            return None
        return ResourceRef(kind=parent_kind, id=parent_id)

    def get_offering_campuses(self, program_id: int) -> frozenset[int]:
        rows = self._db.execute(
            select(campus_programs.c.campus_id).where(campus_programs.c.program_id == program_id)
        ).scalars()
        return frozenset(rows)

    def get_assigned_teacher_user_ids(self, course_id: int) -> frozenset[int]:
        rows = self._db.execute(
            select(course_teachers.c.user_id).where(course_teachers.c.course_id == course_id)
        ).scalars()
        return frozenset(rows)
