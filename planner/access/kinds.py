"""Closed vocabularies shared by the resolver, the stores and the ORM models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ResourceKind(str, Enum):
    """Every protected resource kind, leaves first."""

    ACTIVITY = "activity"
    PROGRAMMATIC_CONTENT = "programmatic_content"
    WEEKLY_PLANNING = "weekly_planning"
    COURSE = "course"
    CURRICULAR_UNIT = "curricular_unit"
    TERM = "term"
    PROGRAM = "program"
    CAMPUS = "campus"
    RTI = "rti"


class ScopeKind(str, Enum):
    """Kind of organizational unit a position is bound to."""

    CAMPUS = "CAMPUS"
    RTI = "RTI"


class Role(str, Enum):
    """Closed set of position roles."""

    ADMIN = "ADMIN"
    EDUCATION_MANAGER = "EDUCATION_MANAGER"
    COORDINATOR = "COORDINATOR"
    ANALYST = "ANALYST"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


# Single-parent containment chain up to Program. Program is offered at several
# campuses and is resolved through the offering relation instead.
PARENT_KIND: dict[ResourceKind, ResourceKind] = {
    ResourceKind.ACTIVITY: ResourceKind.PROGRAMMATIC_CONTENT,
    ResourceKind.PROGRAMMATIC_CONTENT: ResourceKind.WEEKLY_PLANNING,
    ResourceKind.WEEKLY_PLANNING: ResourceKind.COURSE,
    ResourceKind.COURSE: ResourceKind.CURRICULAR_UNIT,
    ResourceKind.CURRICULAR_UNIT: ResourceKind.TERM,
    ResourceKind.TERM: ResourceKind.PROGRAM,
    ResourceKind.CAMPUS: ResourceKind.RTI,
}


@dataclass(frozen=True)
class ResourceRef:
    kind: ResourceKind
    id: int
