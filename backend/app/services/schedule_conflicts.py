from __future__ import annotations

import logging

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.db.storage import Storage
from app.models.room import Room
from app.models.schedule import ClassSection, DayOfWeek, ScheduleSlot
from app.services.intervals import parse_time_to_minutes, time_overlap, validate_slot_times

logger = logging.getLogger(__name__)

SCHEDULING_FIELDS = ("room_id", "class_id", "day_of_week", "start_time", "end_time")
UPDATABLE_FIELDS = SCHEDULING_FIELDS + ("is_recurring", "is_active")


def _coerce_day(value: DayOfWeek | str) -> DayOfWeek:
    try:
        return DayOfWeek(value)
    except ValueError as exc:
        raise ValidationError("Invalid day of week", details={"day_of_week": value}) from exc


class ScheduleConflictChecker:
    """Keeps active slots free of room/day and class/day time overlaps."""

    def __init__(self, storage: Storage, *, min_duration_minutes: int = 30, max_duration_minutes: int = 240) -> None:
        self.storage = storage
        self.min_duration_minutes = min_duration_minutes
        self.max_duration_minutes = max_duration_minutes

    def validate_times(self, start_time: str, end_time: str) -> tuple[int, int]:
        return validate_slot_times(
            start_time,
            end_time,
            min_minutes=self.min_duration_minutes,
            max_minutes=self.max_duration_minutes,
        )

    def require_active_room(self, room_id: int) -> Room:
        room = self.storage.get(Room, room_id)
        if room is None or not room.is_active:
            raise NotFoundError("Room", room_id, "Room not found or inactive")
        return room

    def require_active_class(self, class_id: int) -> ClassSection:
        class_section = self.storage.get(ClassSection, class_id)
        if class_section is None or not class_section.is_active:
            raise NotFoundError("Class", class_id, "Class not found or inactive")
        return class_section

    def require_slot(self, slot_id: int) -> ScheduleSlot:
        slot = self.storage.get(ScheduleSlot, slot_id)
        if slot is None:
            raise NotFoundError("Schedule", slot_id, f"Schedule with ID {slot_id} not found")
        return slot

    def _first_overlap(self, slots: list[ScheduleSlot], start: int, end: int) -> ScheduleSlot | None:
        for existing in slots:
            if time_overlap(start, end, parse_time_to_minutes(existing.start_time), parse_time_to_minutes(existing.end_time)):
                return existing
        return None

    def ensure_no_conflicts(
        self,
        *,
        room_id: int,
        class_id: int,
        day: DayOfWeek,
        start: int,
        end: int,
        exclude_id: int | None = None,
    ) -> None:
        self.storage.lock(("room", room_id, day), ("class", class_id, day))

        room_slots = self.storage.find_active_slots(day, room_id=room_id, exclude_id=exclude_id)
        clash = self._first_overlap(room_slots, start, end)
        if clash is not None:
            logger.info("Room %s already booked on %s by slot %s", room_id, day.value, clash.id)
            raise ConflictError(
                "Room is already booked at this time",
                details={"room_id": room_id, "day_of_week": day.value, "conflicting_slot_id": clash.id},
            )

        class_slots = self.storage.find_active_slots(day, class_id=class_id, exclude_id=exclude_id)
        clash = self._first_overlap(class_slots, start, end)
        if clash is not None:
            logger.info("Class %s already scheduled on %s by slot %s", class_id, day.value, clash.id)
            raise ConflictError(
                "Class already has a schedule at this time",
                details={"class_id": class_id, "day_of_week": day.value, "conflicting_slot_id": clash.id},
            )

    def create_slot(
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
        day = _coerce_day(day_of_week)
        start, end = self.validate_times(start_time, end_time)
        self.require_active_room(room_id)
        self.require_active_class(class_id)

        if is_active:
            self.ensure_no_conflicts(room_id=room_id, class_id=class_id, day=day, start=start, end=end)

        slot = ScheduleSlot(
            class_id=class_id,
            room_id=room_id,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            is_recurring=is_recurring,
            is_active=is_active,
        )
        return self.storage.create(slot)

    def update_slot(self, slot_id: int, fields: dict) -> ScheduleSlot:
        slot = self.require_slot(slot_id)
        changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS and value is not None}
        if "day_of_week" in changes:
            changes["day_of_week"] = _coerce_day(changes["day_of_week"])

        merged = {key: changes.get(key, getattr(slot, key)) for key in UPDATABLE_FIELDS}
        touched = any(merged[key] != getattr(slot, key) for key in SCHEDULING_FIELDS)
        reactivated = merged["is_active"] and not slot.is_active

        if merged["room_id"] != slot.room_id:
            self.require_active_room(merged["room_id"])
        if merged["class_id"] != slot.class_id:
            self.require_active_class(merged["class_id"])

        if touched or reactivated:
            start, end = self.validate_times(merged["start_time"], merged["end_time"])
            if merged["is_active"]:
                if reactivated:
                    self.require_active_room(merged["room_id"])
                    self.require_active_class(merged["class_id"])
                self.ensure_no_conflicts(
                    room_id=merged["room_id"],
                    class_id=merged["class_id"],
                    day=merged["day_of_week"],
                    start=start,
                    end=end,
                    exclude_id=slot.id,
                )

        return self.storage.update(slot, changes)

    def deactivate(self, slot_id: int) -> ScheduleSlot:
        slot = self.require_slot(slot_id)
        if not slot.is_active:
            return slot
        return self.storage.update(slot, {"is_active": False})

    def restore(self, slot_id: int) -> ScheduleSlot:
        return self.update_slot(slot_id, {"is_active": True})

    def hard_delete(self, slot_id: int) -> None:
        slot = self.require_slot(slot_id)
        if slot.is_active:
            raise ConflictError(
                "Deactivate the schedule before deleting it permanently",
                details={"schedule_id": slot_id},
            )
        self.storage.delete(slot)

    def find_available_rooms(
        self,
        day_of_week: DayOfWeek | str,
        start_time: str,
        end_time: str,
        min_capacity: int | None = None,
    ) -> list[Room]:
        day = _coerce_day(day_of_week)
        start = parse_time_to_minutes(start_time)
        end = parse_time_to_minutes(end_time)
        if start >= end:
            raise ValidationError(
                "Start time must be before end time",
                details={"start_time": start_time, "end_time": end_time},
            )

        busy_room_ids = {
            slot.room_id
            for slot in self.storage.find_active_slots(day)
            if time_overlap(start, end, parse_time_to_minutes(slot.start_time), parse_time_to_minutes(slot.end_time))
        }
        return [room for room in self.storage.list_rooms(min_capacity=min_capacity) if room.id not in busy_room_ids]
