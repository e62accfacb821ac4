from pydantic import BaseModel, Field


class ProgramCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)


class ProgramOut(ProgramCreate):
    id: int
    is_active: bool

    model_config = {"from_attributes": True}


class AcademicYearCreate(BaseModel):
    name: str = Field(pattern=r"^\d{4}-\d{4}$")
    is_current: bool = False


class AcademicYearOut(AcademicYearCreate):
    id: int

    model_config = {"from_attributes": True}
