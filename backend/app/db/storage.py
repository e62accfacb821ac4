from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import UniqueViolationError
from app.db.base import Base
from app.db.locks import HeldLock, LockKey, acquire_advisory_locks, release_local_locks
from app.models.program import AcademicYear, Program
from app.models.room import Room
from app.models.schedule import DAY_ORDER, ClassSection, DayOfWeek, ScheduleSlot
from app.models.semester import Semester
from app.models.staff import IssuedIdentifier, StaffMember

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Storage(Protocol):
    """Persistence contract the scheduling core depends on."""

    def transaction(self): ...

    def lock(self, *keys: LockKey) -> None: ...

    def get(self, model: type[ModelT], entity_id: int) -> ModelT | None: ...

    def create(self, entity: ModelT) -> ModelT: ...

    def update(self, entity: ModelT, fields: dict) -> ModelT: ...

    def delete(self, entity: Base) -> None: ...

    def find_active_slots(
        self,
        day: DayOfWeek,
        *,
        room_id: int | None = None,
        class_id: int | None = None,
        exclude_id: int | None = None,
    ) -> list[ScheduleSlot]: ...

    def find_active_semesters(self, program_id: int, *, exclude_id: int | None = None) -> list[Semester]: ...

    def find_by_identifier_prefix(self, prefix: str, year: int) -> list[str]: ...

    def identifier_exists(self, code: str) -> bool: ...

    def list_rooms(self, *, min_capacity: int | None = None, building: str | None = None) -> list[Room]: ...


def _sort_slots(slots: list[ScheduleSlot]) -> list[ScheduleSlot]:
    return sorted(slots, key=lambda slot: (DAY_ORDER[slot.day_of_week], slot.start_time, slot.id))


class SqlStorage:
    def __init__(self, db: Session) -> None:
        self.db = db
        self._held_locks: list[HeldLock] = []
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit on success, roll back and re-raise on failure.

        Nested calls join the outermost transaction. Local advisory locks taken
        through `lock` are released only after the outermost commit/rollback.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info("Transaction rolled back on integrity error: %s", exc.orig)
            raise UniqueViolationError(details={"error": str(exc.orig)}) from exc
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._depth = 0
            release_local_locks(self._held_locks)

    def lock(self, *keys: LockKey) -> None:
        if not self._depth:
            raise RuntimeError("Advisory locks can only be taken inside a transaction")
        self._held_locks.extend(acquire_advisory_locks(self.db, keys))

    def get(self, model: type[ModelT], entity_id: int) -> ModelT | None:
        return self.db.get(model, entity_id)

    def create(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, entity: ModelT, fields: dict) -> ModelT:
        for key, value in fields.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity

    def delete(self, entity: Base) -> None:
        self.db.delete(entity)
        self.db.flush()

    def find_active_slots(
        self,
        day: DayOfWeek,
        *,
        room_id: int | None = None,
        class_id: int | None = None,
        exclude_id: int | None = None,
    ) -> list[ScheduleSlot]:
        query = select(ScheduleSlot).where(
            ScheduleSlot.day_of_week == day,
            ScheduleSlot.is_active.is_(True),
        )
        if room_id is not None:
            query = query.where(ScheduleSlot.room_id == room_id)
        if class_id is not None:
            query = query.where(ScheduleSlot.class_id == class_id)
        if exclude_id is not None:
            query = query.where(ScheduleSlot.id != exclude_id)
        return _sort_slots(list(self.db.execute(query).scalars()))

    def list_slots(
        self,
        *,
        room_id: int | None = None,
        class_id: int | None = None,
        day: DayOfWeek | None = None,
    ) -> list[ScheduleSlot]:
        query = select(ScheduleSlot).where(ScheduleSlot.is_active.is_(True))
        if room_id is not None:
            query = query.where(ScheduleSlot.room_id == room_id)
        if class_id is not None:
            query = query.where(ScheduleSlot.class_id == class_id)
        if day is not None:
            query = query.where(ScheduleSlot.day_of_week == day)
        return _sort_slots(list(self.db.execute(query).scalars()))

    def has_slots(self, *, room_id: int | None = None, class_id: int | None = None, active_only: bool) -> bool:
        query = select(ScheduleSlot.id)
        if room_id is not None:
            query = query.where(ScheduleSlot.room_id == room_id)
        if class_id is not None:
            query = query.where(ScheduleSlot.class_id == class_id)
        if active_only:
            query = query.where(ScheduleSlot.is_active.is_(True))
        return self.db.execute(query.limit(1)).first() is not None

    def find_active_semesters(self, program_id: int, *, exclude_id: int | None = None) -> list[Semester]:
        query = select(Semester).where(
            Semester.program_id == program_id,
            Semester.is_active.is_(True),
        )
        if exclude_id is not None:
            query = query.where(Semester.id != exclude_id)
        return list(self.db.execute(query.order_by(Semester.start_date.asc())).scalars())

    def list_semesters(self, program_id: int) -> list[Semester]:
        return list(
            self.db.execute(
                select(Semester)
                .where(Semester.program_id == program_id, Semester.is_active.is_(True))
                .order_by(Semester.year_number.asc(), Semester.semester_number.asc())
            ).scalars()
        )

    def find_by_identifier_prefix(self, prefix: str, year: int) -> list[str]:
        pattern = f"{prefix}{year}%"
        return list(self.db.execute(select(IssuedIdentifier.code).where(IssuedIdentifier.code.like(pattern))).scalars())

    def identifier_exists(self, code: str) -> bool:
        query = select(IssuedIdentifier.id).where(IssuedIdentifier.code == code)
        return self.db.execute(query.limit(1)).first() is not None

    def list_rooms(
        self,
        *,
        min_capacity: int | None = None,
        building: str | None = None,
        include_inactive: bool = False,
    ) -> list[Room]:
        query = select(Room)
        if not include_inactive:
            query = query.where(Room.is_active.is_(True))
        if min_capacity is not None:
            query = query.where(Room.capacity >= min_capacity)
        if building is not None:
            query = query.where(Room.building == building)
        return list(self.db.execute(query.order_by(Room.building.asc(), Room.code.asc())).scalars())

    def search_rooms(self, term: str) -> list[Room]:
        query = select(Room).where(
            Room.is_active.is_(True),
            or_(Room.code.icontains(term, autoescape=True), Room.building.icontains(term, autoescape=True)),
        )
        return list(self.db.execute(query.order_by(Room.building.asc(), Room.code.asc())).scalars())

    def count_rooms(self, *, active_only: bool = False) -> int:
        query = select(func.count(Room.id))
        if active_only:
            query = query.where(Room.is_active.is_(True))
        return self.db.execute(query).scalar_one()

    def count_rooms_by_building(self) -> list[tuple[str, int]]:
        query = select(Room.building, func.count(Room.id)).group_by(Room.building).order_by(Room.building.asc())
        return [(building, count) for building, count in self.db.execute(query)]

    def active_room_capacity_stats(self) -> tuple[float | None, int | None, int | None]:
        query = select(func.avg(Room.capacity), func.min(Room.capacity), func.max(Room.capacity)).where(
            Room.is_active.is_(True)
        )
        average, minimum, maximum = self.db.execute(query).one()
        return (float(average) if average is not None else None), minimum, maximum

    def find_room_by_code(self, code: str, *, exclude_id: int | None = None) -> Room | None:
        query = select(Room).where(Room.code == code)
        if exclude_id is not None:
            query = query.where(Room.id != exclude_id)
        return self.db.execute(query).scalar_one_or_none()

    def list_class_sections(
        self,
        *,
        subject_id: int | None = None,
        semester_id: int | None = None,
        include_inactive: bool = False,
    ) -> list[ClassSection]:
        query = select(ClassSection)
        if not include_inactive:
            query = query.where(ClassSection.is_active.is_(True))
        if subject_id is not None:
            query = query.where(ClassSection.subject_id == subject_id)
        if semester_id is not None:
            query = query.where(ClassSection.semester_id == semester_id)
        query = query.order_by(ClassSection.section_name.asc(), ClassSection.id.asc())
        return list(self.db.execute(query).scalars())

    def find_class_section(
        self,
        section_name: str,
        subject_id: int,
        semester_id: int,
        *,
        exclude_id: int | None = None,
    ) -> ClassSection | None:
        query = select(ClassSection).where(
            ClassSection.section_name == section_name,
            ClassSection.subject_id == subject_id,
            ClassSection.semester_id == semester_id,
        )
        if exclude_id is not None:
            query = query.where(ClassSection.id != exclude_id)
        return self.db.execute(query).scalar_one_or_none()

    def list_programs(self) -> list[Program]:
        query = select(Program).where(Program.is_active.is_(True)).order_by(Program.code.asc())
        return list(self.db.execute(query).scalars())

    def find_program_by_code(self, code: str) -> Program | None:
        return self.db.execute(select(Program).where(Program.code == code)).scalar_one_or_none()

    def list_academic_years(self) -> list[AcademicYear]:
        return list(self.db.execute(select(AcademicYear).order_by(AcademicYear.name.desc())).scalars())

    def find_academic_year_by_name(self, name: str) -> AcademicYear | None:
        return self.db.execute(select(AcademicYear).where(AcademicYear.name == name)).scalar_one_or_none()

    def list_staff(self) -> list[StaffMember]:
        query = select(StaffMember).where(StaffMember.is_active.is_(True)).order_by(StaffMember.code.asc())
        return list(self.db.execute(query).scalars())
