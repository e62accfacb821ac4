import threading
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.db.base import Base
from app.db.storage import SqlStorage
from app.models.schedule import DayOfWeek
from app.services.scheduling import SchedulingService


def _book(service, campus, *, room=0, klass=0, day="Monday", start="09:00", end="10:00", **extra):
    return service.create_schedule(
        class_id=campus["classes"][klass].id,
        room_id=campus["rooms"][room].id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        **extra,
    )


def test_room_double_booking_is_rejected(service, campus):
    first = _book(service, campus, klass=0, start="09:00", end="10:30")

    with pytest.raises(ConflictError, match="Room is already booked at this time") as exc_info:
        _book(service, campus, klass=1, start="10:00", end="11:00")
    assert exc_info.value.details["conflicting_slot_id"] == first.id

    # Back-to-back in the same room is fine
    second = _book(service, campus, klass=1, start="10:30", end="11:30")
    assert second.id != first.id


def test_class_cannot_be_in_two_rooms_at_once(service, campus):
    _book(service, campus, room=0, klass=0, start="09:00", end="10:00")

    with pytest.raises(ConflictError, match="Class already has a schedule at this time"):
        _book(service, campus, room=1, klass=0, start="09:30", end="10:30")


def test_same_time_on_another_day_does_not_conflict(service, campus):
    _book(service, campus, day="Monday")
    slot = _book(service, campus, day=DayOfWeek.tuesday)
    assert slot.day_of_week == DayOfWeek.tuesday


@pytest.mark.parametrize(
    ("start", "end"),
    [("09:00", "09:20"), ("08:00", "12:01"), ("10:00", "09:00")],
)
def test_duration_bounds_are_enforced(service, campus, start, end):
    with pytest.raises(ValidationError):
        _book(service, campus, start=start, end=end)


def test_duration_bounds_are_inclusive(service, campus):
    _book(service, campus, room=0, start="08:00", end="08:30")
    _book(service, campus, room=1, klass=1, start="08:00", end="12:00")


def test_invalid_day_is_rejected(service, campus):
    with pytest.raises(ValidationError, match="Invalid day of week"):
        _book(service, campus, day="Saturday")


def test_inactive_room_cannot_be_booked(service, campus):
    room = campus["rooms"][2]
    service.deactivate_room(room.id)

    with pytest.raises(NotFoundError, match="Room not found or inactive"):
        _book(service, campus, room=2)


def test_failed_create_leaves_no_row(service, campus):
    _book(service, campus)
    with pytest.raises(ConflictError):
        _book(service, campus, klass=1)

    assert len(service.list_schedules()) == 1


def test_update_excludes_the_slot_itself(service, campus):
    slot = _book(service, campus, start="09:00", end="10:00")

    updated = service.update_schedule(slot.id, {"end_time": "10:30"})
    assert updated.end_time == "10:30"


def test_update_into_a_booked_range_is_rejected(service, campus):
    _book(service, campus, klass=0, start="09:00", end="10:00")
    other = _book(service, campus, klass=1, start="11:00", end="12:00")

    with pytest.raises(ConflictError, match="Room is already booked"):
        service.update_schedule(other.id, {"start_time": "09:30", "end_time": "10:30"})

    assert service.get_schedule(other.id).start_time == "11:00"


def test_update_to_another_room_checks_that_room(service, campus):
    _book(service, campus, room=1, klass=1, start="09:00", end="10:00")
    slot = _book(service, campus, room=0, klass=0, start="09:00", end="10:00")

    with pytest.raises(ConflictError, match="Room is already booked"):
        service.update_schedule(slot.id, {"room_id": campus["rooms"][1].id})


def test_non_scheduling_update_skips_conflict_check(service, campus):
    slot = _book(service, campus)
    updated = service.update_schedule(slot.id, {"is_recurring": False})
    assert updated.is_recurring is False


def test_deactivated_slot_frees_its_range(service, campus):
    slot = _book(service, campus, klass=0)
    service.deactivate_schedule(slot.id)

    replacement = _book(service, campus, klass=1)
    assert replacement.is_active

    with pytest.raises(NotFoundError):
        service.get_schedule(slot.id)


def test_restore_rechecks_conflicts(service, campus):
    slot = _book(service, campus, klass=0)
    service.deactivate_schedule(slot.id)
    _book(service, campus, klass=1)

    with pytest.raises(ConflictError, match="Room is already booked"):
        service.restore_schedule(slot.id)


def test_restore_without_clash_reactivates(service, campus):
    slot = _book(service, campus)
    service.deactivate_schedule(slot.id)

    restored = service.restore_schedule(slot.id)
    assert restored.is_active


def test_hard_delete_requires_deactivation(service, campus):
    slot = _book(service, campus)

    with pytest.raises(ConflictError, match="Deactivate the schedule"):
        service.hard_delete_schedule(slot.id)

    service.deactivate_schedule(slot.id)
    service.hard_delete_schedule(slot.id)

    with pytest.raises(NotFoundError):
        service.restore_schedule(slot.id)


def test_available_rooms_excludes_busy_rooms(service, campus):
    _book(service, campus, room=0, start="09:00", end="10:00")

    available = service.query_available_rooms("Monday", "09:30", "10:30")
    assert [room.code for room in available] == ["A102", "B201"]

    # Touching at the boundary does not make a room busy
    available = service.query_available_rooms("Monday", "10:00", "11:00")
    assert "A101" in [room.code for room in available]


def test_available_rooms_honours_min_capacity(service, campus):
    available = service.query_available_rooms("Friday", "09:00", "10:00", min_capacity=50)
    assert [room.code for room in available] == ["A102", "B201"]


def test_list_schedules_is_ordered_by_day_then_start(service, campus):
    _book(service, campus, room=0, day="Wednesday", start="09:00", end="10:00")
    _book(service, campus, room=0, day="Monday", start="14:00", end="15:00")
    _book(service, campus, room=0, day="Monday", start="08:00", end="09:00")

    slots = service.list_schedules(room_id=campus["rooms"][0].id)
    assert [(slot.day_of_week.value, slot.start_time) for slot in slots] == [
        ("Monday", "08:00"),
        ("Monday", "14:00"),
        ("Wednesday", "09:00"),
    ]


def test_room_with_active_schedules_cannot_be_deactivated(service, campus):
    slot = _book(service, campus)
    room_id = campus["rooms"][0].id

    with pytest.raises(ConflictError, match="Cannot delete room with active schedules"):
        service.deactivate_room(room_id)

    service.deactivate_schedule(slot.id)
    service.deactivate_room(room_id)

    with pytest.raises(ConflictError, match="schedule history"):
        service.hard_delete_room(room_id)


def test_morning_booking_scenario(service, campus):
    _book(service, campus, room=0, klass=0, start="08:00", end="09:30")

    with pytest.raises(ConflictError, match="Room is already booked"):
        _book(service, campus, room=0, klass=1, start="09:00", end="10:00")

    follow_up = _book(service, campus, room=0, klass=1, start="09:30", end="11:00")
    assert (follow_up.start_time, follow_up.end_time) == ("09:30", "11:00")


def test_concurrent_bookings_of_one_room_admit_a_single_slot(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'bookings.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    with SessionLocal() as db:
        setup = SchedulingService(SqlStorage(db), get_settings())
        program = setup.create_program(name="Computer Science", code="CS")
        academic_year = setup.create_academic_year(name="2024-2025")
        semester = setup.create_semester(
            program_id=program.id,
            academic_year_id=academic_year.id,
            name="Fall 2024",
            semester_number=1,
            year_number=1,
            start_date=date(2024, 9, 1),
            end_date=date(2024, 12, 15),
        )
        room_id = setup.create_room(code="A101", building="Block A", capacity=40).id
        # One section per thread so only the room is contended
        class_ids = [
            setup.create_class_section(section_name=f"CS-{index}", subject_id=index, semester_id=semester.id).id
            for index in range(1, 9)
        ]

    booked: list[int] = []
    refused: list[ConflictError] = []
    errors: list[Exception] = []
    guard = threading.Lock()
    start = threading.Barrier(len(class_ids))

    def worker(class_id: int):
        db = SessionLocal()
        try:
            service = SchedulingService(SqlStorage(db), get_settings())
            start.wait()
            slot = service.create_schedule(
                class_id=class_id,
                room_id=room_id,
                day_of_week="Monday",
                start_time="08:00",
                end_time="09:30",
            )
            with guard:
                booked.append(slot.id)
        except ConflictError as exc:
            with guard:
                refused.append(exc)
        except Exception as exc:  # collected for the assertion below
            with guard:
                errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(class_id,)) for class_id in class_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    with SessionLocal() as db:
        slots = SchedulingService(SqlStorage(db), get_settings()).list_schedules(room_id=room_id)
        stored = [slot.id for slot in slots]
    engine.dispose()

    assert errors == []
    assert len(booked) == 1
    assert len(refused) == len(class_ids) - 1
    assert {exc.message for exc in refused} == {"Room is already booked at this time"}
    assert stored == booked
