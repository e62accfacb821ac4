from pydantic import BaseModel, Field

from app.models.room import ROOM_MAX_CAPACITY, ROOM_MIN_CAPACITY


class RoomBase(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    building: str = Field(min_length=1, max_length=50)
    capacity: int = Field(ge=ROOM_MIN_CAPACITY, le=ROOM_MAX_CAPACITY)


class RoomCreate(RoomBase):
    is_active: bool = True


class RoomUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=20)
    building: str | None = Field(default=None, min_length=1, max_length=50)
    capacity: int | None = Field(default=None, ge=ROOM_MIN_CAPACITY, le=ROOM_MAX_CAPACITY)


class RoomOut(RoomBase):
    id: int
    is_active: bool

    model_config = {"from_attributes": True}


class BuildingRoomCount(BaseModel):
    building: str
    count: int


class CapacityStatistics(BaseModel):
    average: float | None = None
    minimum: int | None = None
    maximum: int | None = None


class RoomStatistics(BaseModel):
    total_rooms: int
    active_rooms: int
    inactive_rooms: int
    rooms_by_building: list[BuildingRoomCount]
    # Active rooms only; empty when none are active.
    capacity: CapacityStatistics
