from pydantic import BaseModel
from typing import Literal, List

from app.models.schedule import DayOfWeek

class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal["room_conflict", "class_conflict"]
    description: str
    day_of_week: DayOfWeek
    affected_slots: List[int]  # Schedule slot IDs involved

class ResolutionAction(BaseModel):
    action_type: Literal["change_room", "move_slot"]
    description: str
    target_slot_id: int

class ConflictReport(BaseModel):
    slots_checked: int
    conflicts: List[ConflictDetail]
    suggested_resolutions: List[ResolutionAction]
