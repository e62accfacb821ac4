from datetime import date

import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationError


@pytest.fixture()
def program(service):
    return service.create_program(name="Electrical Engineering", code="EE")


@pytest.fixture()
def academic_year(service):
    return service.create_academic_year(name="2024-2025")


def _semester(service, program, academic_year, start, end, **extra):
    fields = {
        "name": f"Term starting {start}",
        "semester_number": 1,
        "year_number": 1,
    }
    fields.update(extra)
    return service.create_semester(
        program_id=program.id,
        academic_year_id=academic_year.id,
        start_date=start,
        end_date=end,
        **fields,
    )


def test_overlapping_semester_is_rejected(service, program, academic_year):
    fall = _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))

    with pytest.raises(ConflictError, match="Electrical Engineering") as exc_info:
        _semester(service, program, academic_year, date(2024, 12, 1), date(2025, 5, 1), semester_number=2)
    assert exc_info.value.details["conflicting_semester_ids"] == [fall.id]


def test_shared_boundary_day_counts_as_overlap(service, program, academic_year):
    _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))

    with pytest.raises(ConflictError):
        _semester(service, program, academic_year, date(2024, 12, 15), date(2025, 5, 1), semester_number=2)


def test_following_day_is_accepted(service, program, academic_year):
    _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))
    spring = _semester(
        service, program, academic_year, date(2024, 12, 16), date(2025, 5, 1), semester_number=2
    )
    assert [item.id for item in service.list_semesters(program.id)][-1] == spring.id


def test_other_programs_do_not_conflict(service, program, academic_year):
    other = service.create_program(name="Mechanical Engineering", code="ME")
    _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))
    _semester(service, other, academic_year, date(2024, 9, 1), date(2024, 12, 15))


def test_end_must_follow_start(service, program, academic_year):
    with pytest.raises(ValidationError, match="End date must be after start date"):
        _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 9, 1))


def test_semester_number_range(service, program, academic_year):
    with pytest.raises(ValidationError, match="Semester number"):
        _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15), semester_number=4)


def test_unknown_program_is_not_found(service, academic_year):
    with pytest.raises(NotFoundError, match="not found or inactive"):
        service.create_semester(
            program_id=999,
            academic_year_id=academic_year.id,
            name="Ghost",
            semester_number=1,
            year_number=1,
            start_date=date(2024, 9, 1),
            end_date=date(2024, 12, 15),
        )


def test_update_excludes_itself(service, program, academic_year):
    fall = _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))

    updated = service.update_semester(fall.id, {"end_date": date(2024, 12, 20)})
    assert updated.end_date == date(2024, 12, 20)


def test_update_into_neighbour_is_rejected(service, program, academic_year):
    _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))
    spring = _semester(
        service, program, academic_year, date(2025, 1, 10), date(2025, 5, 1), semester_number=2
    )

    with pytest.raises(ConflictError):
        service.update_semester(spring.id, {"start_date": date(2024, 12, 10)})


def test_deactivated_semester_frees_range_and_restore_rechecks(service, program, academic_year):
    fall = _semester(service, program, academic_year, date(2024, 9, 1), date(2024, 12, 15))
    service.deactivate_semester(fall.id)

    _semester(service, program, academic_year, date(2024, 10, 1), date(2025, 1, 31), name="Replacement")

    with pytest.raises(ConflictError):
        service.restore_semester(fall.id)


def test_academic_year_format(service):
    with pytest.raises(ValidationError):
        service.create_academic_year(name="2024-2026")
    service.create_academic_year(name="2030-2031")
    with pytest.raises(ConflictError):
        service.create_academic_year(name="2030-2031")


def test_academic_calendar_scenario(service, program, academic_year):
    _semester(service, program, academic_year, date(2024, 8, 26), date(2024, 12, 15))

    with pytest.raises(ConflictError):
        _semester(service, program, academic_year, date(2024, 12, 10), date(2025, 5, 20), semester_number=2)

    spring = _semester(
        service, program, academic_year, date(2024, 12, 16), date(2025, 5, 20), semester_number=2
    )
    assert spring.is_active
