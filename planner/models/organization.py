from __future__ import annotations

from datetime import date

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from planner.db.base import Base


# Program offering: a program may be offered at several campuses.
campus_programs = Table(
    "campus_programs",
    Base.metadata,
    Column("campus_id", ForeignKey("campuses.id"), primary_key=True),
    Column("program_id", ForeignKey("programs.id"), primary_key=True),
)

# Direct assignment of teachers (users) to a course.
course_teachers = Table(
    "course_teachers",
    Base.metadata,
    Column("course_id", ForeignKey("courses.id"), primary_key=True),
    Column("user_id", ForeignKey("users.id"), primary_key=True),
)


class RegionalTechnologicalInstitute(Base):
    __tablename__ = "rtis"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    campuses: Mapped[list["Campus"]] = relationship(back_populates="rti")


class Campus(Base):
    __tablename__ = "campuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    rti_id: Mapped[int] = mapped_column(ForeignKey("rtis.id"), nullable=False, index=True)

    rti: Mapped[RegionalTechnologicalInstitute] = relationship(back_populates="campuses")
    programs: Mapped[list["Program"]] = relationship(secondary=campus_programs, back_populates="campuses")


class Program(Base):
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    duration_in_terms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_credits: Mapped[int | None] = mapped_column(Integer, nullable=True)

    campuses: Mapped[list[Campus]] = relationship(secondary=campus_programs, back_populates="programs")
    terms: Mapped[list["Term"]] = relationship(back_populates="program")


class Term(Base):
    __tablename__ = "terms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id"), nullable=False, index=True)

    program: Mapped[Program] = relationship(back_populates="terms")
    curricular_units: Mapped[list["CurricularUnit"]] = relationship(back_populates="term")


class CurricularUnit(Base):
    __tablename__ = "curricular_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    term_id: Mapped[int] = mapped_column(ForeignKey("terms.id"), nullable=False, index=True)

    term: Mapped[Term] = relationship(back_populates="curricular_units")
    courses: Mapped[list["Course"]] = relationship(back_populates="curricular_unit")


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shift: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    curricular_unit_id: Mapped[int] = mapped_column(ForeignKey("curricular_units.id"), nullable=False, index=True)

    curricular_unit: Mapped[CurricularUnit] = relationship(back_populates="courses")
    teachers: Mapped[list["User"]] = relationship(secondary=course_teachers)  # noqa: F821
    weekly_plannings: Mapped[list["WeeklyPlanning"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
    )


class WeeklyPlanning(Base):
    __tablename__ = "weekly_plannings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)

    course: Mapped[Course] = relationship(back_populates="weekly_plannings")
    programmatic_contents: Mapped[list["ProgrammaticContent"]] = relationship(
        back_populates="weekly_planning",
        cascade="all, delete-orphan",
    )


class ProgrammaticContent(Base):
    __tablename__ = "programmatic_contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    weekly_planning_id: Mapped[int] = mapped_column(ForeignKey("weekly_plannings.id"), nullable=False, index=True)

    weekly_planning: Mapped[WeeklyPlanning] = relationship(back_populates="programmatic_contents")
    activities: Mapped[list["Activity"]] = relationship(
        back_populates="programmatic_content",
        cascade="all, delete-orphan",
    )


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_in_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    programmatic_content_id: Mapped[int] = mapped_column(
        ForeignKey("programmatic_contents.id"),
        nullable=False,
        index=True,
    )

    programmatic_content: Mapped[ProgrammaticContent] = relationship(back_populates="activities")
