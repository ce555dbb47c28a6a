from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from planner.access.kinds import Role, ScopeKind
from planner.db.base import Base
from planner.models.organization import Campus, RegionalTechnologicalInstitute


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(150), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    positions: Mapped[list["Position"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class Position(Base):
    """
    A role bound to exactly one scope: a Campus or a whole RTI.

    The scope columns are never updated in place; re-scoping is a revoke
    (`is_active = False`) plus a new grant.
    """

    __tablename__ = "positions"
    __table_args__ = (
        CheckConstraint(
            "(scope_kind = 'CAMPUS' AND campus_id IS NOT NULL AND rti_id IS NULL)"
            " OR (scope_kind = 'RTI' AND rti_id IS NOT NULL AND campus_id IS NULL)",
            name="ck_positions_single_scope",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    role: Mapped[Role] = mapped_column(Enum(Role, native_enum=False, length=30), nullable=False)
    scope_kind: Mapped[ScopeKind] = mapped_column(Enum(ScopeKind, native_enum=False, length=10), nullable=False)
    campus_id: Mapped[int | None] = mapped_column(ForeignKey("campuses.id"), nullable=True, index=True)
    rti_id: Mapped[int | None] = mapped_column(ForeignKey("rtis.id"), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    user: Mapped[User] = relationship(back_populates="positions")
    campus: Mapped[Campus | None] = relationship()
    rti: Mapped[RegionalTechnologicalInstitute | None] = relationship()

    @property
    def scope_id(self) -> int:
        return self.campus_id if self.scope_kind == ScopeKind.CAMPUS else self.rti_id

    @classmethod
    def for_campus(cls, role: Role, campus_id: int) -> Position:
        return cls(role=role, scope_kind=ScopeKind.CAMPUS, campus_id=campus_id, rti_id=None)

    @classmethod
    def for_rti(cls, role: Role, rti_id: int) -> Position:
        return cls(role=role, scope_kind=ScopeKind.RTI, rti_id=rti_id, campus_id=None)
