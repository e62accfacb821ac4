from pydantic import BaseModel, Field


class ClassSectionCreate(BaseModel):
    section_name: str = Field(min_length=1, max_length=50)
    subject_id: int = Field(ge=1)
    semester_id: int = Field(ge=1)


class ClassSectionUpdate(BaseModel):
    section_name: str | None = Field(default=None, min_length=1, max_length=50)
    subject_id: int | None = Field(default=None, ge=1)
    semester_id: int | None = Field(default=None, ge=1)


class ClassSectionOut(ClassSectionCreate):
    id: int
    is_active: bool

    model_config = {"from_attributes": True}
