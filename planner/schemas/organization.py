from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict


class RtiOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CampusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rti_id: int


class ProgramOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    duration_in_terms: int | None
    total_credits: int | None


class TermOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: int
    program_id: int


class CurricularUnitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    credits: int
    term_id: int


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    shift: str
    start_date: date | None
    end_date: date | None
    curricular_unit_id: int


class CourseUpdateIn(BaseModel):
    shift: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class WeeklyPlanningOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    week_number: int
    start_date: date | None
    end_date: date | None
    course_id: int


class WeeklyPlanningIn(BaseModel):
    week_number: int
    start_date: date | None = None
    end_date: date | None = None


class ProgrammaticContentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str | None
    weekly_planning_id: int


class ActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str | None
    duration_in_minutes: int | None
    programmatic_content_id: int
