from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from planner.access.kinds import ResourceKind
from planner.db.queries import get_or_404
from planner.db.session import get_db
from planner.models.organization import Activity, Course, ProgrammaticContent, WeeklyPlanning
from planner.schemas.organization import (
    ActivityOut,
    CourseOut,
    CourseUpdateIn,
    ProgrammaticContentOut,
    WeeklyPlanningIn,
    WeeklyPlanningOut,
)
from planner.security.decorators import requires_access

router = APIRouter(tags=["courses"])


@router.get("/courses/{course_id}", response_model=CourseOut)
def get_course(course_id: int, db: Session = Depends(get_db)) -> Course:
    return get_or_404(db, Course, course_id)


@router.patch("/courses/{course_id}", response_model=CourseOut)
def update_course(course_id: int, body: CourseUpdateIn, db: Session = Depends(get_db)) -> Course:
    # Guarded by the "course_update" rule in the security config.
    course = get_or_404(db, Course, course_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(course, field, value)
    db.commit()
    db.refresh(course)
    return course


@router.delete("/courses/{course_id}", status_code=204)
def delete_course(course_id: int, db: Session = Depends(get_db)) -> Response:
    # Guarded by the "course_delete" rule in the security config.
    course = get_or_404(db, Course, course_id)
    db.delete(course)
    db.commit()
    return Response(status_code=204)


@router.post("/courses/{course_id}/weekly-plannings", response_model=WeeklyPlanningOut, status_code=201)
@requires_access(ResourceKind.COURSE, "course_id", guard="course_planning")
def add_weekly_planning(course_id: int, body: WeeklyPlanningIn, db: Session = Depends(get_db)) -> WeeklyPlanning:
    course = get_or_404(db, Course, course_id)
    planning = WeeklyPlanning(course_id=course.id, **body.model_dump())
    db.add(planning)
    db.commit()
    db.refresh(planning)
    return planning


@router.get("/weekly-plannings/{weekly_planning_id}", response_model=WeeklyPlanningOut)
def get_weekly_planning(weekly_planning_id: int, db: Session = Depends(get_db)) -> WeeklyPlanning:
    return get_or_404(db, WeeklyPlanning, weekly_planning_id)


@router.get("/programmatic-contents/{programmatic_content_id}", response_model=ProgrammaticContentOut)
def get_programmatic_content(programmatic_content_id: int, db: Session = Depends(get_db)) -> ProgrammaticContent:
    return get_or_404(db, ProgrammaticContent, programmatic_content_id)


@router.get("/activities/{activity_id}", response_model=ActivityOut)
@requires_access(ResourceKind.ACTIVITY, "activity_id")
def get_activity(activity_id: int, db: Session = Depends(get_db)) -> Activity:
    # No config entry required: the decorator provides the resource rule.
    return get_or_404(db, Activity, activity_id)
