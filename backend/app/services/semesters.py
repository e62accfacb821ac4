from __future__ import annotations

import logging
from datetime import date

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.db.storage import Storage
from app.models.program import AcademicYear, Program
from app.models.semester import Semester
from app.services.intervals import date_overlap

logger = logging.getLogger(__name__)

RANGE_FIELDS = ("program_id", "start_date", "end_date")
UPDATABLE_FIELDS = RANGE_FIELDS + (
    "academic_year_id",
    "name",
    "semester_number",
    "year_number",
    "is_active",
)
MIN_SEMESTER_NUMBER = 1
MAX_SEMESTER_NUMBER = 3


class SemesterDateRangeValidator:
    """Keeps the active semesters of a program on non-overlapping closed date ranges."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def require_active_program(self, program_id: int) -> Program:
        program = self.storage.get(Program, program_id)
        if program is None or not program.is_active:
            raise NotFoundError("Program", program_id, f"Program with ID {program_id} not found or inactive")
        return program

    def require_academic_year(self, academic_year_id: int) -> AcademicYear:
        academic_year = self.storage.get(AcademicYear, academic_year_id)
        if academic_year is None:
            raise NotFoundError(
                "AcademicYear",
                academic_year_id,
                f"Academic year with ID {academic_year_id} not found",
            )
        return academic_year

    def require_semester(self, semester_id: int) -> Semester:
        semester = self.storage.get(Semester, semester_id)
        if semester is None:
            raise NotFoundError("Semester", semester_id, f"Semester with ID {semester_id} not found")
        return semester

    @staticmethod
    def validate_numbers(semester_number: int, year_number: int) -> None:
        if not MIN_SEMESTER_NUMBER <= semester_number <= MAX_SEMESTER_NUMBER:
            raise ValidationError(
                f"Semester number must be between {MIN_SEMESTER_NUMBER} and {MAX_SEMESTER_NUMBER}",
                details={"semester_number": semester_number},
            )
        if year_number < 1:
            raise ValidationError("Year number must be at least 1", details={"year_number": year_number})

    @staticmethod
    def validate_dates(start_date: date, end_date: date) -> None:
        if end_date <= start_date:
            raise ValidationError(
                "End date must be after start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

    def ensure_no_overlap(
        self,
        program: Program,
        start_date: date,
        end_date: date,
        *,
        exclude_id: int | None = None,
    ) -> None:
        self.storage.lock(("semester", program.id))
        overlapping = [
            semester
            for semester in self.storage.find_active_semesters(program.id, exclude_id=exclude_id)
            if date_overlap(start_date, end_date, semester.start_date, semester.end_date)
        ]
        if overlapping:
            logger.info(
                "Semester range %s..%s overlaps %d semester(s) in program %s",
                start_date,
                end_date,
                len(overlapping),
                program.id,
            )
            raise ConflictError(
                f"Date range overlaps with existing semester(s) in {program.name}",
                details={
                    "program_id": program.id,
                    "conflicting_semester_ids": [semester.id for semester in overlapping],
                },
            )

    def create_semester(
        self,
        *,
        program_id: int,
        academic_year_id: int,
        name: str,
        semester_number: int,
        year_number: int,
        start_date: date,
        end_date: date,
        is_active: bool = True,
    ) -> Semester:
        program = self.require_active_program(program_id)
        self.require_academic_year(academic_year_id)
        self.validate_numbers(semester_number, year_number)
        self.validate_dates(start_date, end_date)
        if is_active:
            self.ensure_no_overlap(program, start_date, end_date)

        semester = Semester(
            program_id=program_id,
            academic_year_id=academic_year_id,
            name=name,
            semester_number=semester_number,
            year_number=year_number,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
        )
        return self.storage.create(semester)

    def update_semester(self, semester_id: int, fields: dict) -> Semester:
        semester = self.require_semester(semester_id)
        changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS and value is not None}
        merged = {key: changes.get(key, getattr(semester, key)) for key in UPDATABLE_FIELDS}

        program_changed = merged["program_id"] != semester.program_id
        dates_changed = merged["start_date"] != semester.start_date or merged["end_date"] != semester.end_date
        reactivated = merged["is_active"] and not semester.is_active

        program = None
        if program_changed or reactivated:
            program = self.require_active_program(merged["program_id"])
        if merged["academic_year_id"] != semester.academic_year_id:
            self.require_academic_year(merged["academic_year_id"])
        if "semester_number" in changes or "year_number" in changes:
            self.validate_numbers(merged["semester_number"], merged["year_number"])
        if dates_changed:
            self.validate_dates(merged["start_date"], merged["end_date"])

        if merged["is_active"] and (program_changed or dates_changed or reactivated):
            if program is None:
                program = self.require_active_program(merged["program_id"])
            self.ensure_no_overlap(program, merged["start_date"], merged["end_date"], exclude_id=semester.id)

        return self.storage.update(semester, changes)

    def deactivate(self, semester_id: int) -> Semester:
        semester = self.require_semester(semester_id)
        if not semester.is_active:
            return semester
        return self.storage.update(semester, {"is_active": False})

    def restore(self, semester_id: int) -> Semester:
        return self.update_semester(semester_id, {"is_active": True})
