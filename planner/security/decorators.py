from __future__ import annotations

from collections.abc import Callable

from planner.access.kinds import ResourceKind
from planner.security.config import Guard, ResourceRequirement


def requires_access(kind: ResourceKind, param: str, guard: Guard = "scope") -> Callable:
    """
    Guard the endpoint with the access resolver before the handler runs.

    `param` names the path parameter holding the resource id, e.g.
    `@requires_access(ResourceKind.COURSE, "course_id")`.
    """

    requirement = ResourceRequirement(kind=ResourceKind(kind), param=param, guard=guard)

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_resource__", requirement)
        return fn

    return decorator
