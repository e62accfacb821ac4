from datetime import date

from pydantic import BaseModel, Field


class SemesterBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    academic_year_id: int = Field(ge=1)
    semester_number: int = Field(ge=1, le=3)
    year_number: int = Field(ge=1)
    start_date: date
    end_date: date


class SemesterCreate(SemesterBase):
    # program_id comes from the URL
    is_active: bool = True


class SemesterUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    program_id: int | None = Field(default=None, ge=1)
    academic_year_id: int | None = Field(default=None, ge=1)
    semester_number: int | None = Field(default=None, ge=1, le=3)
    year_number: int | None = Field(default=None, ge=1)
    start_date: date | None = None
    end_date: date | None = None
    is_active: bool | None = None


class SemesterOut(SemesterBase):
    id: int
    program_id: int
    is_active: bool

    model_config = {"from_attributes": True}
