from pydantic import BaseModel, Field, field_validator

from app.models.schedule import DayOfWeek
from app.services.intervals import TIME_PATTERN


def _check_time_format(value: str | None) -> str | None:
    if value is not None and not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


class ScheduleBase(BaseModel):
    class_id: int = Field(ge=1)
    room_id: int = Field(ge=1)
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_recurring: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return _check_time_format(value)


class ScheduleCreate(ScheduleBase):
    is_active: bool = True


class ScheduleUpdate(BaseModel):
    class_id: int | None = Field(default=None, ge=1)
    room_id: int | None = Field(default=None, ge=1)
    day_of_week: DayOfWeek | None = None
    start_time: str | None = None
    end_time: str | None = None
    is_recurring: bool | None = None
    is_active: bool | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        return _check_time_format(value)


class ScheduleOut(ScheduleBase):
    id: int
    is_active: bool

    model_config = {"from_attributes": True}
