from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from planner.access.kinds import Role, ScopeKind


class PositionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: Role
    scope_kind: ScopeKind
    scope_id: int
    is_active: bool


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str | None
    is_active: bool
    positions: list[PositionOut]


class LoginIn(BaseModel):
    email: str
    password: str
