"""
Hierarchical access resolver.

Answers "may this actor operate on resource R?" for every protected resource
kind by walking the containment graph up to the owning Campus/RTI scopes and
intersecting them with the actor's positional grants.

Key ideas:
- Ancestry is resolved explicitly over integer ids (see `owning_scopes`).
- Program and everything beneath it is owned by the union of the campuses
  offering the program, plus the RTIs of those campuses. Every descendant of a
  program therefore resolves to the same scope set, so access is consistent
  whichever descendant is asked.
- An RTI-scoped grant covers every campus under it; a campus-scoped grant never
  covers the RTI itself.
- Direct teacher assignment on a course grants access to that course and its
  planning subtree regardless of organizational scope.
- Missing or orphaned resources are denials, never a distinct "not found".

Role is not consulted by `has_access` / `validate_access`. The role-aware course
guards further down are layered on top of the same scope resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable

from planner.access.errors import AccessDeniedError
from planner.access.grants import PositionGrant, PositionGrantStore
from planner.access.graph import OrganizationalGraph
from planner.access.kinds import PARENT_KIND, ResourceKind, Role, ScopeKind

logger = logging.getLogger(__name__)


# ---- Data structures -----------------------------------------------------------------


@dataclass(frozen=True)
class ScopeSet:
    """Campuses and RTIs that own a resource."""

    campus_ids: frozenset[int]
    rti_ids: frozenset[int]

    def covers(self, grant: PositionGrant) -> bool:
        if grant.scope_kind == ScopeKind.RTI:
            return grant.scope_id in self.rti_ids
        if grant.scope_kind == ScopeKind.CAMPUS:
            return grant.scope_id in self.campus_ids
        return False

    def covers_any(self, grants: Iterable[PositionGrant]) -> bool:
        return any(self.covers(g) for g in grants)


@dataclass(frozen=True)
class _Resolution:
    scopes: ScopeSet
    # Set when the resource is a course or lies in a course's planning subtree.
    course_id: int | None = None


_COURSE_SUBTREE = frozenset(
    {
        ResourceKind.COURSE,
        ResourceKind.WEEKLY_PLANNING,
        ResourceKind.PROGRAMMATIC_CONTENT,
        ResourceKind.ACTIVITY,
    }
)

# Roles allowed to update or delete a course in their scope.
_COURSE_ADMIN_ROLES = frozenset({Role.ANALYST, Role.COORDINATOR})


# ---- Resolver ------------------------------------------------------------------------


class AccessResolver:
    """
    Stateless per call; holds only the two read-only collaborators.

    Usage:
        resolver = AccessResolver(SqlOrganizationalGraph(db), SqlPositionGrantStore(db))
        resolver.validate_access(user_id, ResourceKind.COURSE, course_id)
    """

    def __init__(self, graph: OrganizationalGraph, grants: PositionGrantStore) -> None:
        self._graph = graph
        self._grants = grants

    # ---- Ancestry --------------------------------------------------------------------

    def owning_scopes(self, kind: ResourceKind, resource_id: int) -> ScopeSet | None:
        """Return the owning Campus/RTI scope set, or None for missing or orphaned resources."""
        resolution = self._resolve(kind, resource_id)
        return resolution.scopes if resolution is not None else None

    def _resolve(self, kind: ResourceKind, resource_id: int) -> _Resolution | None:
        kind = ResourceKind(kind)

        if kind == ResourceKind.RTI:
            if not self._graph.exists(ResourceKind.RTI, resource_id):
                return None
            return _Resolution(ScopeSet(campus_ids=frozenset(), rti_ids=frozenset({resource_id})))

        if kind == ResourceKind.CAMPUS:
            rti_id = self._campus_rti(resource_id)
            if rti_id is None:
                return None
            return _Resolution(ScopeSet(campus_ids=frozenset({resource_id}), rti_ids=frozenset({rti_id})))

        course_id = resource_id if kind == ResourceKind.COURSE else None
        current_kind, current_id = kind, resource_id

        # The chain is acyclic and of fixed length; the bound also guards against
        # a store that reports an unexpected parent kind.
        for _ in range(len(PARENT_KIND)):
            if current_kind == ResourceKind.PROGRAM:
                break
            parent = self._graph.get_parent(current_kind, current_id)
            if parent is None or parent.kind != PARENT_KIND[current_kind]:
                return None
            current_kind, current_id = parent.kind, parent.id
            if current_kind == ResourceKind.COURSE:
                course_id = current_id
        else:
            return None

        scopes = self._program_scopes(current_id)
        if scopes is None:
            return None
        return _Resolution(scopes, course_id if kind in _COURSE_SUBTREE else None)

    def _campus_rti(self, campus_id: int) -> int | None:
        parent = self._graph.get_parent(ResourceKind.CAMPUS, campus_id)
        if parent is None or parent.kind != ResourceKind.RTI:
            return None
        return parent.id

    def _program_scopes(self, program_id: int) -> ScopeSet | None:
        campus_ids: set[int] = set()
        rti_ids: set[int] = set()
        for campus_id in self._graph.get_offering_campuses(program_id):
            rti_id = self._campus_rti(campus_id)
            if rti_id is None:
                continue
            campus_ids.add(campus_id)
            rti_ids.add(rti_id)

        if not campus_ids:
            return None
        return ScopeSet(campus_ids=frozenset(campus_ids), rti_ids=frozenset(rti_ids))

    # ---- Main decision API -----------------------------------------------------------

    def has_access(self, actor_id: int, kind: ResourceKind, resource_id: int) -> bool:
        """
        Decide whether the actor may act on the resource.

        Never raises: missing resources, actors without positions and lookup
        errors all fail closed.
        """

        try:
            return self._decide(actor_id, kind, resource_id)
        except Exception as exc:
            logger.warning(
                "Access check failed closed user=%s kind=%s id=%s error=%s",
                actor_id,
                getattr(kind, "value", kind),
                resource_id,
                type(exc).__name__,
            )
            return False

    def validate_access(self, actor_id: int, kind: ResourceKind, resource_id: int) -> None:
        """Same decision as `has_access`; raises AccessDeniedError instead of returning False."""
        if not self.has_access(actor_id, kind, resource_id):
            raise AccessDeniedError()

    def _decide(self, actor_id: int, kind: ResourceKind, resource_id: int) -> bool:
        kind = ResourceKind(kind)
        resolution = self._resolve(kind, resource_id)
        if resolution is None:
            logger.debug("Access denied (unresolved ancestry) user=%s kind=%s id=%s", actor_id, kind.value, resource_id)
            return False

        if resolution.course_id is not None and self._is_assigned_teacher(actor_id, resolution.course_id):
            logger.debug("Access allowed (direct assignment) user=%s kind=%s id=%s", actor_id, kind.value, resource_id)
            return True

        grants = self._grants.get_positions(actor_id)
        if not grants:
            logger.debug("Access denied (no positions) user=%s kind=%s id=%s", actor_id, kind.value, resource_id)
            return False

        if resolution.scopes.covers_any(grants):
            logger.debug("Access allowed user=%s kind=%s id=%s", actor_id, kind.value, resource_id)
            return True

        logger.debug(
            "Access denied user=%s kind=%s id=%s campuses=%s rtis=%s",
            actor_id,
            kind.value,
            resource_id,
            sorted(resolution.scopes.campus_ids),
            sorted(resolution.scopes.rti_ids),
        )
        return False

    def _is_assigned_teacher(self, actor_id: int, course_id: int) -> bool:
        return actor_id in self._graph.get_assigned_teacher_user_ids(course_id)

    def accessible_campus_ids(self, actor_id: int, campus_ids: Iterable[int]) -> list[int]:
        """Filter candidate campus ids down to the ones the actor may see, keeping order."""
        return [cid for cid in campus_ids if self.has_access(actor_id, ResourceKind.CAMPUS, cid)]

    # ---- Role-aware course guards ----------------------------------------------------

    def validate_course_planning_management(self, actor_id: int, course_id: int) -> None:
        """
        Planning (weekly plans, contents, activities) is managed only by the
        course's own teachers: an active TEACHER position plus direct assignment.
        Administrative roles in scope are not enough. Orphaned or missing courses
        are denied even to assigned teachers.
        """

        if self.owning_scopes(ResourceKind.COURSE, course_id) is None:
            logger.debug("Planning management denied (unresolved ancestry) user=%s course=%s", actor_id, course_id)
            raise AccessDeniedError()
        grants = self._grants.get_positions(actor_id)
        if not any(g.role == Role.TEACHER for g in grants):
            logger.debug("Planning management denied (no TEACHER position) user=%s course=%s", actor_id, course_id)
            raise AccessDeniedError()
        if not self._is_assigned_teacher(actor_id, course_id):
            logger.debug("Planning management denied (not assigned) user=%s course=%s", actor_id, course_id)
            raise AccessDeniedError()

    def validate_course_update_access(self, actor_id: int, course_id: int) -> None:
        """ANALYST/COORDINATOR in the course's scope, or a teacher assigned to the course."""
        scopes = self.owning_scopes(ResourceKind.COURSE, course_id)
        if scopes is None:
            raise AccessDeniedError()
        if self._is_assigned_teacher(actor_id, course_id):
            return
        if self._has_course_admin_role(actor_id, scopes):
            return
        logger.debug("Course update denied user=%s course=%s", actor_id, course_id)
        raise AccessDeniedError()

    def validate_course_delete_access(self, actor_id: int, course_id: int) -> None:
        """ANALYST/COORDINATOR in the course's scope. Assignment alone does not allow deletion."""
        scopes = self.owning_scopes(ResourceKind.COURSE, course_id)
        if scopes is None or not self._has_course_admin_role(actor_id, scopes):
            logger.debug("Course delete denied user=%s course=%s", actor_id, course_id)
            raise AccessDeniedError()

    def _has_course_admin_role(self, actor_id: int, scopes: ScopeSet) -> bool:
        grants = self._grants.get_positions(actor_id)
        return scopes.covers_any(g for g in grants if g.role in _COURSE_ADMIN_ROLES)
