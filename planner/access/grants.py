from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from planner.access.kinds import Role, ScopeKind
from planner.models.security import Position


@dataclass(frozen=True)
class PositionGrant:
    """One positional grant: a role scoped to a single Campus or RTI."""

    role: Role
    scope_kind: ScopeKind
    scope_id: int


class PositionGrantStore(Protocol):
    def get_positions(self, user_id: int) -> list[PositionGrant]: ...


class SqlPositionGrantStore:
    """Reads the actor's active positions. Revoked (inactive) positions grant nothing."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_positions(self, user_id: int) -> list[PositionGrant]:
        rows = self._db.execute(
            select(Position.role, Position.scope_kind, Position.campus_id, Position.rti_id)
            .where(Position.user_id == user_id, Position.is_active.is_(True))
            .order_by(Position.id)
        ).all()

        grants: list[PositionGrant] = []
        for role, scope_kind, campus_id, rti_id in rows:
            scope_id = campus_id if scope_kind == ScopeKind.CAMPUS else rti_id
            if scope_id is None:
                continue
            grants.append(PositionGrant(role=role, scope_kind=scope_kind, scope_id=scope_id))
        return grants
