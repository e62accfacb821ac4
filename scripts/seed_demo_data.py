"""Seed a small campus for SlotKeeper: one program, two semesters, rooms, sections and staff.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import logging
import os
from datetime import date

from app.core.config import get_settings
from app.core.exceptions import ConflictError
from app.core.logging import configure_logging
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.db.storage import SqlStorage
from app.models.staff import StaffRole
from app.services.scheduling import SchedulingService

logger = logging.getLogger("app.seed")

PROGRAM_CODE = "BTECH-CSE"
PROGRAM_NAME = "B.Tech Computer Science and Engineering"
ACADEMIC_YEAR = os.getenv("SEED_ACADEMIC_YEAR", "2026-2027").strip() or "2026-2027"
SEED_YEAR = int(ACADEMIC_YEAR[:4])
WORKING_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
TEACHING_HOURS = ["09:00", "10:00", "11:00", "14:00", "15:00"]
SECTION_NAMES = ["A", "B", "C"]
STAFF = [
    (StaffRole.head_of_department, "Meera Krishnan"),
    (StaffRole.teacher, "Arjun Nair"),
    (StaffRole.teacher, "Divya Menon"),
    (StaffRole.teacher, "Rahul Varma"),
]


def seed_rooms(service: SchedulingService) -> None:
    existing = {room.code for room in service.list_rooms()}
    for wing in ["A", "B"]:
        for index in range(1, 4):
            code = f"{wing}10{index}"
            if code in existing:
                continue
            service.create_room(code=code, building=f"Academic Block {wing}", capacity=[60, 65, 70][index - 1])
    if "LAB-1" not in existing:
        service.create_room(code="LAB-1", building="Laboratory Wing", capacity=40)


def seed_program(service: SchedulingService):
    program = next((item for item in service.list_programs() if item.code == PROGRAM_CODE), None)
    if program is None:
        program = service.create_program(name=PROGRAM_NAME, code=PROGRAM_CODE)
    academic_year = next((item for item in service.list_academic_years() if item.name == ACADEMIC_YEAR), None)
    if academic_year is None:
        academic_year = service.create_academic_year(name=ACADEMIC_YEAR, is_current=True)

    semesters = service.list_semesters(program.id)
    if not semesters:
        semesters = [
            service.create_semester(
                program_id=program.id,
                academic_year_id=academic_year.id,
                name=f"Odd Semester {ACADEMIC_YEAR}",
                semester_number=1,
                year_number=1,
                start_date=date(SEED_YEAR, 7, 15),
                end_date=date(SEED_YEAR, 11, 30),
            ),
            service.create_semester(
                program_id=program.id,
                academic_year_id=academic_year.id,
                name=f"Even Semester {ACADEMIC_YEAR}",
                semester_number=2,
                year_number=1,
                start_date=date(SEED_YEAR, 12, 15),
                end_date=date(SEED_YEAR + 1, 4, 30),
            ),
        ]
    return program, semesters[0]


def seed_sections(service: SchedulingService, semester) -> list:
    sections = service.list_class_sections(semester_id=semester.id)
    if sections:
        return sections
    return [
        service.create_class_section(section_name=f"CSE-1{name}", subject_id=index, semester_id=semester.id)
        for index, name in enumerate(SECTION_NAMES, start=1)
    ]


def seed_timetable(service: SchedulingService, sections: list) -> int:
    rooms = service.list_rooms()
    booked = 0
    for day_index, day in enumerate(WORKING_DAYS):
        for hour_index, start in enumerate(TEACHING_HOURS):
            for section_index, section in enumerate(sections):
                room = rooms[(day_index + hour_index + section_index) % len(rooms)]
                end = f"{int(start[:2]) + 1:02d}:00"
                try:
                    service.create_schedule(
                        class_id=section.id,
                        room_id=room.id,
                        day_of_week=day,
                        start_time=start,
                        end_time=end,
                    )
                except ConflictError as exc:
                    # Already seeded on an earlier run
                    logger.debug("Skipped %s %s %s: %s", section.section_name, day, start, exc.message)
                    continue
                booked += 1
    return booked


def seed_staff(service: SchedulingService) -> None:
    known = {member.full_name for member in service.list_staff()}
    for role, full_name in STAFF:
        if full_name not in known:
            service.create_staff_member(role=role, full_name=full_name, year=SEED_YEAR)


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        service = SchedulingService(SqlStorage(session), settings)
        seed_rooms(service)
        program, semester = seed_program(service)
        sections = seed_sections(service, semester)
        booked = seed_timetable(service, sections)
        seed_staff(service)

        report = service.audit_schedule()
        staff = service.list_staff()

    print("Demo data seeded successfully.")
    print("")
    print(f"Program: {PROGRAM_NAME} ({PROGRAM_CODE})")
    print(f"Class sections: {len(sections)}")
    print(f"New schedule slots: {booked}")
    print(f"Active slots audited: {report.slots_checked} ({len(report.conflicts)} conflicts)")
    print("Staff:")
    for member in staff:
        print(f"  {member.code}  {member.role.value:<20} {member.full_name}")


if __name__ == "__main__":
    main()
