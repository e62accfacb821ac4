from collections import defaultdict
from typing import Dict, List

from app.models.schedule import DAY_ORDER, ScheduleSlot
from app.schemas.conflict import ConflictDetail, ConflictReport, ResolutionAction
from app.services.intervals import parse_time_to_minutes, time_overlap

class ConflictService:
    """Audits a set of active slots for room/day and class/day overlaps.

    The write path already rejects these, so a non-empty report points at rows
    written around the service (manual SQL, imports, a missing lock).
    """

    def __init__(self, slots: List[ScheduleSlot], room_codes: Dict[int, str]):
        self.slots = [slot for slot in slots if slot.is_active]
        self.room_codes = room_codes

    def detect_conflicts(self) -> ConflictReport:
        conflicts: List[ConflictDetail] = []

        slots_by_day = defaultdict(list)
        for slot in self.slots:
            slots_by_day[slot.day_of_week].append(slot)

        for day in sorted(slots_by_day, key=DAY_ORDER.__getitem__):
            day_slots = sorted(slots_by_day[day], key=lambda slot: (slot.start_time, slot.id))
            n = len(day_slots)
            for i in range(n):
                s1 = day_slots[i]
                start1, end1 = parse_time_to_minutes(s1.start_time), parse_time_to_minutes(s1.end_time)

                for j in range(i + 1, n):
                    s2 = day_slots[j]
                    start2, end2 = parse_time_to_minutes(s2.start_time), parse_time_to_minutes(s2.end_time)
                    # Sorted by start, nothing later can overlap s1
                    if start2 >= end1:
                        break
                    if not time_overlap(start1, end1, start2, end2):
                        continue

                    if s1.room_id == s2.room_id:
                        room_code = self.room_codes.get(s1.room_id, str(s1.room_id))
                        conflicts.append(ConflictDetail(
                            id=f"room-{s1.id}-{s2.id}",
                            conflict_type="room_conflict",
                            description=(
                                f"Room overlap in {room_code} on {day.value}: "
                                f"{s1.start_time}-{s1.end_time} and {s2.start_time}-{s2.end_time}"
                            ),
                            day_of_week=day,
                            affected_slots=[s1.id, s2.id],
                        ))
                    if s1.class_id == s2.class_id:
                        conflicts.append(ConflictDetail(
                            id=f"class-{s1.id}-{s2.id}",
                            conflict_type="class_conflict",
                            description=(
                                f"Class {s1.class_id} double-booked on {day.value}: "
                                f"{s1.start_time}-{s1.end_time} and {s2.start_time}-{s2.end_time}"
                            ),
                            day_of_week=day,
                            affected_slots=[s1.id, s2.id],
                        ))

        return ConflictReport(slots_checked=len(self.slots), conflicts=conflicts, suggested_resolutions=[])

    def generate_resolutions(self, conflict: ConflictDetail) -> List[ResolutionAction]:
        # The later slot is the one to move.
        target = conflict.affected_slots[-1]
        if conflict.conflict_type == "room_conflict":
            return [ResolutionAction(
                action_type="change_room",
                description="Move the later booking to an available room",
                target_slot_id=target,
            )]
        return [ResolutionAction(
            action_type="move_slot",
            description="Move the later booking to a different time slot",
            target_slot_id=target,
        )]
