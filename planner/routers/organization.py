from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from planner.access.resolver import AccessResolver
from planner.db.queries import get_or_404
from planner.db.session import get_db
from planner.models.organization import Campus, CurricularUnit, Program, RegionalTechnologicalInstitute, Term
from planner.schemas.organization import CampusOut, CurricularUnitOut, ProgramOut, RtiOut, TermOut
from planner.security.context import AuthzContext
from planner.security.dependencies import get_access_resolver, get_authz

router = APIRouter(tags=["organization"])


@router.get("/rtis/{rti_id}", response_model=RtiOut)
def get_rti(rti_id: int, db: Session = Depends(get_db)) -> RegionalTechnologicalInstitute:
    return get_or_404(db, RegionalTechnologicalInstitute, rti_id)


@router.get("/campuses", response_model=list[CampusOut])
def list_campuses(
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
    resolver: AccessResolver = Depends(get_access_resolver),
) -> list[Campus]:
    campuses = list(db.scalars(select(Campus).order_by(Campus.id)).all())
    visible = set(resolver.accessible_campus_ids(authz.user_id, [c.id for c in campuses]))
    return [c for c in campuses if c.id in visible]


@router.get("/campuses/{campus_id}", response_model=CampusOut)
def get_campus(campus_id: int, db: Session = Depends(get_db)) -> Campus:
    return get_or_404(db, Campus, campus_id)


@router.get("/programs/{program_id}", response_model=ProgramOut)
def get_program(program_id: int, db: Session = Depends(get_db)) -> Program:
    return get_or_404(db, Program, program_id)


@router.get("/terms/{term_id}", response_model=TermOut)
def get_term(term_id: int, db: Session = Depends(get_db)) -> Term:
    return get_or_404(db, Term, term_id)


@router.get("/curricular-units/{curricular_unit_id}", response_model=CurricularUnitOut)
def get_curricular_unit(curricular_unit_id: int, db: Session = Depends(get_db)) -> CurricularUnit:
    return get_or_404(db, CurricularUnit, curricular_unit_id)
