import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings
from app.core.exceptions import ConflictError, UniqueViolationError, ValidationError
from app.db.base import Base
from app.db.storage import SqlStorage
from app.models.staff import IssuedIdentifier, StaffRole
from app.services.identifiers import IdentifierAllocator
from app.services.scheduling import SchedulingService


def test_identifiers_are_dense_per_prefix_and_year(service):
    assert service.allocate_identifier("t", 2025) == "t20250001"
    assert service.allocate_identifier("t", 2025) == "t20250002"
    assert service.allocate_identifier("e", 2025) == "e20250001"
    assert service.allocate_identifier("t", 2026) == "t20260001"
    assert service.allocate_identifier("t", 2025) == "t20250003"


def test_next_identifier_follows_highest_sequence(storage):
    with storage.transaction():
        storage.create(IssuedIdentifier(code="h20250041", prefix="h", year=2025, sequence=41))

    allocator = IdentifierAllocator(storage)
    assert allocator.allocate("h", 2025) == "h20250042"


@pytest.mark.parametrize(
    ("prefix", "year"),
    [("T", 2025), ("tt", 2025), ("", 2025), ("1", 2025), ("t", 25), ("t", 20255)],
)
def test_invalid_prefix_or_year_is_rejected(service, prefix, year):
    with pytest.raises(ValidationError):
        service.allocate_identifier(prefix, year)


def test_exhausted_sequence_is_a_conflict(storage):
    with storage.transaction():
        storage.create(IssuedIdentifier(code="t20259999", prefix="t", year=2025, sequence=9999))

    with pytest.raises(ConflictError, match="exhausted"):
        IdentifierAllocator(storage).allocate("t", 2025)


def test_taken_candidate_is_retried(storage, monkeypatch):
    allocator = IdentifierAllocator(storage, max_attempts=3)
    with storage.transaction():
        storage.create(IssuedIdentifier(code="t20250001", prefix="t", year=2025, sequence=1))

    scans = iter([[], ["t20250001"]])
    monkeypatch.setattr(storage, "find_by_identifier_prefix", lambda prefix, year: next(scans))

    # First scan misses the existing row, the second sees it
    assert allocator.allocate("t", 2025) == "t20250002"


def test_allocation_gives_up_after_max_attempts(storage, monkeypatch):
    with storage.transaction():
        storage.create(IssuedIdentifier(code="t20250001", prefix="t", year=2025, sequence=1))
    monkeypatch.setattr(storage, "find_by_identifier_prefix", lambda prefix, year: [])

    with pytest.raises(ConflictError, match="after 3 attempts") as exc_info:
        IdentifierAllocator(storage, max_attempts=3).allocate("t", 2025)
    assert exc_info.value.details["attempts"] == 3


def test_unique_violation_is_retried(storage, monkeypatch):
    allocator = IdentifierAllocator(storage, max_attempts=3)
    real_create = storage.create
    calls = {"count": 0}

    def flaky_create(entity):
        calls["count"] += 1
        if calls["count"] == 1:
            raise UniqueViolationError()
        return real_create(entity)

    monkeypatch.setattr(storage, "create", flaky_create)

    assert allocator.allocate("e", 2025) == "e20250001"
    assert calls["count"] == 2


def test_staff_member_gets_role_prefixed_code_and_email(service):
    teacher = service.create_staff_member(role=StaffRole.teacher, full_name="Ada Lovelace", year=2025)
    head = service.create_staff_member(role="head_of_department", full_name="Alan Turing", year=2025)

    assert teacher.code == "t20250001"
    assert teacher.email == "t20250001@campus.edu"
    assert head.code == "h20250001"
    assert [member.code for member in service.list_staff()] == ["h20250001", "t20250001"]


def test_unknown_staff_role_is_a_validation_error(service):
    with pytest.raises(ValidationError, match="Invalid staff role") as exc_info:
        service.create_staff_member(role="janitor", full_name="Nobody", year=2025)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"role": "janitor"}
    # No identifier is consumed by the rejected call
    assert service.allocate_identifier("t", 2025) == "t20250001"


def test_concurrent_allocations_are_distinct(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'identifiers.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    issued: list[str] = []
    errors: list[Exception] = []
    guard = threading.Lock()
    start = threading.Barrier(8)

    def worker():
        db = SessionLocal()
        try:
            service = SchedulingService(SqlStorage(db), get_settings())
            start.wait()
            for _ in range(5):
                code = service.allocate_identifier("e", 2025)
                with guard:
                    issued.append(code)
        except Exception as exc:  # collected for the assertion below
            with guard:
                errors.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    engine.dispose()

    assert errors == []
    assert len(issued) == 40
    assert sorted(issued) == [f"e2025{sequence:04d}" for sequence in range(1, 41)]
