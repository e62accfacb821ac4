"""Scheduling operations exposed to the API layer.

Every mutating call runs inside one storage transaction: validation, conflict
checks and the write either all commit or all roll back.
"""

from __future__ import annotations

import logging
import re
from datetime import date

from app.core.config import Settings, get_settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.db.storage import SqlStorage
from app.models.program import AcademicYear, Program
from app.models.room import ROOM_MAX_CAPACITY, ROOM_MIN_CAPACITY, Room
from app.models.schedule import ClassSection, DayOfWeek, ScheduleSlot
from app.models.semester import Semester
from app.models.staff import ROLE_PREFIXES, StaffMember, StaffRole
from app.schemas.conflict import ConflictReport
from app.schemas.room import BuildingRoomCount, CapacityStatistics, RoomStatistics
from app.services.conflict_service import ConflictService
from app.services.identifiers import IdentifierAllocator
from app.services.schedule_conflicts import ScheduleConflictChecker
from app.services.semesters import SemesterDateRangeValidator

logger = logging.getLogger(__name__)

ACADEMIC_YEAR_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")
ROOM_FIELDS = ("code", "building", "capacity")
CLASS_SECTION_FIELDS = ("section_name", "subject_id", "semester_id")


class SchedulingService:
    def __init__(self, storage: SqlStorage, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.storage = storage
        self.schedules = ScheduleConflictChecker(
            storage,
            min_duration_minutes=self.settings.slot_min_duration_minutes,
            max_duration_minutes=self.settings.slot_max_duration_minutes,
        )
        self.semesters = SemesterDateRangeValidator(storage)
        self.identifiers = IdentifierAllocator(storage, max_attempts=self.settings.identifier_max_attempts)

    # Schedules

    def create_schedule(
        self,
        *,
        class_id: int,
        room_id: int,
        day_of_week: DayOfWeek | str,
        start_time: str,
        end_time: str,
        is_recurring: bool = True,
        is_active: bool = True,
    ) -> ScheduleSlot:
        with self.storage.transaction():
            slot = self.schedules.create_slot(
                class_id=class_id,
                room_id=room_id,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                is_recurring=is_recurring,
                is_active=is_active,
            )
        logger.info(
            "Scheduled class %s in room %s on %s %s-%s (slot %s)",
            class_id,
            room_id,
            slot.day_of_week.value,
            start_time,
            end_time,
            slot.id,
        )
        return slot

    def update_schedule(self, slot_id: int, fields: dict) -> ScheduleSlot:
        with self.storage.transaction():
            slot = self.schedules.update_slot(slot_id, fields)
        logger.info("Updated schedule %s (%s)", slot_id, ", ".join(sorted(fields)) or "no changes")
        return slot

    def deactivate_schedule(self, slot_id: int) -> ScheduleSlot:
        with self.storage.transaction():
            return self.schedules.deactivate(slot_id)

    def restore_schedule(self, slot_id: int) -> ScheduleSlot:
        with self.storage.transaction():
            return self.schedules.restore(slot_id)

    def hard_delete_schedule(self, slot_id: int) -> None:
        with self.storage.transaction():
            self.schedules.hard_delete(slot_id)
        logger.info("Permanently deleted schedule %s", slot_id)

    def get_schedule(self, slot_id: int) -> ScheduleSlot:
        slot = self.schedules.require_slot(slot_id)
        if not slot.is_active:
            raise NotFoundError("Schedule", slot_id, f"Schedule with ID {slot_id} not found")
        return slot

    def list_schedules(
        self,
        *,
        room_id: int | None = None,
        class_id: int | None = None,
        day_of_week: DayOfWeek | None = None,
    ) -> list[ScheduleSlot]:
        if room_id is not None:
            self.schedules.require_active_room(room_id)
        if class_id is not None:
            self.schedules.require_active_class(class_id)
        return self.storage.list_slots(room_id=room_id, class_id=class_id, day=day_of_week)

    def query_available_rooms(
        self,
        day_of_week: DayOfWeek | str,
        start_time: str,
        end_time: str,
        min_capacity: int | None = None,
    ) -> list[Room]:
        return self.schedules.find_available_rooms(day_of_week, start_time, end_time, min_capacity)

    def audit_schedule(self) -> ConflictReport:
        slots = self.storage.list_slots()
        room_codes = {room.id: room.code for room in self.storage.list_rooms()}
        service = ConflictService(slots, room_codes)
        report = service.detect_conflicts()
        for conflict in report.conflicts:
            report.suggested_resolutions.extend(service.generate_resolutions(conflict))
        if report.conflicts:
            logger.warning("Schedule audit found %d conflict(s)", len(report.conflicts))
        return report

    # Semesters

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
        with self.storage.transaction():
            semester = self.semesters.create_semester(
                program_id=program_id,
                academic_year_id=academic_year_id,
                name=name,
                semester_number=semester_number,
                year_number=year_number,
                start_date=start_date,
                end_date=end_date,
                is_active=is_active,
            )
        logger.info("Created semester %s for program %s (%s..%s)", semester.id, program_id, start_date, end_date)
        return semester

    def update_semester(self, semester_id: int, fields: dict) -> Semester:
        with self.storage.transaction():
            return self.semesters.update_semester(semester_id, fields)

    def deactivate_semester(self, semester_id: int) -> Semester:
        with self.storage.transaction():
            return self.semesters.deactivate(semester_id)

    def restore_semester(self, semester_id: int) -> Semester:
        with self.storage.transaction():
            return self.semesters.restore(semester_id)

    def list_semesters(self, program_id: int) -> list[Semester]:
        if self.storage.get(Program, program_id) is None:
            raise NotFoundError("Program", program_id)
        return self.storage.list_semesters(program_id)

    # Identifiers and staff

    def allocate_identifier(self, prefix: str, year: int | None = None) -> str:
        return self.identifiers.allocate(prefix, year if year is not None else date.today().year)

    def create_staff_member(self, *, role: StaffRole | str, full_name: str, year: int | None = None) -> StaffMember:
        try:
            role = StaffRole(role)
        except ValueError as exc:
            raise ValidationError("Invalid staff role", details={"role": role}) from exc
        created: list[StaffMember] = []

        def register(code: str) -> None:
            member = StaffMember(
                code=code,
                role=role,
                full_name=full_name,
                email=f"{code}@{self.settings.staff_email_domain}",
            )
            created.append(self.storage.create(member))

        self.identifiers.allocate(
            ROLE_PREFIXES[role],
            year if year is not None else date.today().year,
            register=register,
        )
        # Only the last attempt committed.
        return created[-1]

    def list_staff(self) -> list[StaffMember]:
        return self.storage.list_staff()

    # Rooms

    @staticmethod
    def _validate_capacity(capacity: int) -> None:
        if not ROOM_MIN_CAPACITY <= capacity <= ROOM_MAX_CAPACITY:
            raise ValidationError(
                f"Capacity must be between {ROOM_MIN_CAPACITY} and {ROOM_MAX_CAPACITY}",
                details={"capacity": capacity},
            )

    def _require_room(self, room_id: int, *, active: bool | None = True) -> Room:
        room = self.storage.get(Room, room_id)
        if room is None or (active is not None and room.is_active != active):
            raise NotFoundError("Room", room_id, f"Room with ID {room_id} not found")
        return room

    def list_rooms(self, *, include_inactive: bool = False) -> list[Room]:
        return self.storage.list_rooms(include_inactive=include_inactive)

    def get_room(self, room_id: int) -> Room:
        return self._require_room(room_id)

    def search_rooms(self, query: str) -> list[Room]:
        """Active rooms whose code or building contains `query`, case-insensitively."""
        query = query.strip()
        if not query:
            raise ValidationError("Search query must not be empty")
        return self.storage.search_rooms(query)

    def list_rooms_by_building(self, building: str) -> list[Room]:
        return self.storage.list_rooms(building=building)

    def room_statistics(self) -> RoomStatistics:
        total = self.storage.count_rooms()
        active = self.storage.count_rooms(active_only=True)
        average, minimum, maximum = self.storage.active_room_capacity_stats()
        return RoomStatistics(
            total_rooms=total,
            active_rooms=active,
            inactive_rooms=total - active,
            rooms_by_building=[
                BuildingRoomCount(building=building, count=count)
                for building, count in self.storage.count_rooms_by_building()
            ],
            capacity=CapacityStatistics(
                average=round(average, 2) if average is not None else None,
                minimum=minimum,
                maximum=maximum,
            ),
        )

    def create_room(self, *, code: str, building: str, capacity: int, is_active: bool = True) -> Room:
        self._validate_capacity(capacity)
        with self.storage.transaction():
            if self.storage.find_room_by_code(code) is not None:
                raise ConflictError("Room code already exists", details={"code": code})
            room = self.storage.create(Room(code=code, building=building, capacity=capacity, is_active=is_active))
        logger.info("Created room %s (%s)", room.code, room.id)
        return room

    def update_room(self, room_id: int, fields: dict) -> Room:
        changes = {key: value for key, value in fields.items() if key in ROOM_FIELDS and value is not None}
        if "capacity" in changes:
            self._validate_capacity(changes["capacity"])
        with self.storage.transaction():
            room = self._require_room(room_id)
            if "code" in changes and changes["code"] != room.code:
                if self.storage.find_room_by_code(changes["code"], exclude_id=room_id) is not None:
                    raise ConflictError("Room code already exists", details={"code": changes["code"]})
            return self.storage.update(room, changes)

    def deactivate_room(self, room_id: int) -> Room:
        with self.storage.transaction():
            room = self._require_room(room_id)
            if self.storage.has_slots(room_id=room_id, active_only=True):
                raise ConflictError("Cannot delete room with active schedules", details={"room_id": room_id})
            return self.storage.update(room, {"is_active": False})

    def restore_room(self, room_id: int) -> Room:
        with self.storage.transaction():
            room = self._require_room(room_id, active=None)
            return self.storage.update(room, {"is_active": True})

    def hard_delete_room(self, room_id: int) -> None:
        with self.storage.transaction():
            room = self._require_room(room_id, active=None)
            if self.storage.has_slots(room_id=room_id, active_only=False):
                raise ConflictError(
                    "Cannot permanently delete room with schedule history",
                    details={"room_id": room_id},
                )
            self.storage.delete(room)
        logger.info("Permanently deleted room %s", room_id)

    # Class sections

    def _require_active_semester(self, semester_id: int) -> Semester:
        semester = self.storage.get(Semester, semester_id)
        if semester is None or not semester.is_active:
            raise NotFoundError("Semester", semester_id, f"Semester with ID {semester_id} not found or inactive")
        return semester

    def _ensure_unique_section(
        self,
        section_name: str,
        subject_id: int,
        semester_id: int,
        *,
        exclude_id: int | None = None,
    ) -> None:
        existing = self.storage.find_class_section(section_name, subject_id, semester_id, exclude_id=exclude_id)
        if existing is not None:
            raise ConflictError(
                "A class with this section name, subject, and semester already exists",
                details={"conflicting_class_id": existing.id},
            )

    def _require_class_section(self, class_id: int) -> ClassSection:
        class_section = self.storage.get(ClassSection, class_id)
        if class_section is None:
            raise NotFoundError("Class", class_id, f"Class with ID {class_id} not found")
        return class_section

    def list_class_sections(
        self,
        *,
        subject_id: int | None = None,
        semester_id: int | None = None,
        include_inactive: bool = False,
    ) -> list[ClassSection]:
        if semester_id is not None:
            self._require_active_semester(semester_id)
        return self.storage.list_class_sections(
            subject_id=subject_id,
            semester_id=semester_id,
            include_inactive=include_inactive,
        )

    def get_class_section(self, class_id: int) -> ClassSection:
        return self.schedules.require_active_class(class_id)

    def create_class_section(self, *, section_name: str, subject_id: int, semester_id: int) -> ClassSection:
        with self.storage.transaction():
            self._require_active_semester(semester_id)
            self._ensure_unique_section(section_name, subject_id, semester_id)
            class_section = self.storage.create(
                ClassSection(section_name=section_name, subject_id=subject_id, semester_id=semester_id)
            )
        logger.info("Created class %s (%s) in semester %s", class_section.section_name, class_section.id, semester_id)
        return class_section

    def update_class_section(self, class_id: int, fields: dict) -> ClassSection:
        changes = {key: value for key, value in fields.items() if key in CLASS_SECTION_FIELDS and value is not None}
        with self.storage.transaction():
            class_section = self.schedules.require_active_class(class_id)
            if changes.get("semester_id", class_section.semester_id) != class_section.semester_id:
                self._require_active_semester(changes["semester_id"])
            merged = {key: changes.get(key, getattr(class_section, key)) for key in CLASS_SECTION_FIELDS}
            if merged != {key: getattr(class_section, key) for key in CLASS_SECTION_FIELDS}:
                self._ensure_unique_section(
                    merged["section_name"],
                    merged["subject_id"],
                    merged["semester_id"],
                    exclude_id=class_id,
                )
            return self.storage.update(class_section, changes)

    def deactivate_class_section(self, class_id: int) -> ClassSection:
        with self.storage.transaction():
            class_section = self.schedules.require_active_class(class_id)
            if self.storage.has_slots(class_id=class_id, active_only=True):
                raise ConflictError("Cannot delete class with active schedules", details={"class_id": class_id})
            return self.storage.update(class_section, {"is_active": False})

    def restore_class_section(self, class_id: int) -> ClassSection:
        with self.storage.transaction():
            class_section = self._require_class_section(class_id)
            self._require_active_semester(class_section.semester_id)
            return self.storage.update(class_section, {"is_active": True})

    def hard_delete_class_section(self, class_id: int) -> None:
        with self.storage.transaction():
            class_section = self._require_class_section(class_id)
            if self.storage.has_slots(class_id=class_id, active_only=False):
                raise ConflictError(
                    "Cannot permanently delete class with schedule history",
                    details={"class_id": class_id},
                )
            self.storage.delete(class_section)
        logger.info("Permanently deleted class %s", class_id)

    # Programs and academic years

    def list_programs(self) -> list[Program]:
        return self.storage.list_programs()

    def create_program(self, *, name: str, code: str) -> Program:
        with self.storage.transaction():
            if self.storage.find_program_by_code(code) is not None:
                raise ConflictError("Program code already exists", details={"code": code})
            return self.storage.create(Program(name=name, code=code))

    def list_academic_years(self) -> list[AcademicYear]:
        return self.storage.list_academic_years()

    def create_academic_year(self, *, name: str, is_current: bool = False) -> AcademicYear:
        match = ACADEMIC_YEAR_PATTERN.match(name)
        if match is None or int(match.group(2)) != int(match.group(1)) + 1:
            raise ValidationError("Academic year must look like 2024-2025", details={"name": name})
        with self.storage.transaction():
            if self.storage.find_academic_year_by_name(name) is not None:
                raise ConflictError("Academic year already exists", details={"name": name})
            return self.storage.create(AcademicYear(name=name, is_current=is_current))
