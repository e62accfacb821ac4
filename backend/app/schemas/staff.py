from pydantic import BaseModel, EmailStr, Field

from app.models.staff import StaffRole


class IdentifierRequest(BaseModel):
    prefix: str = Field(pattern=r"^[a-z]$")
    year: int | None = Field(default=None, ge=1000, le=9999)


class IdentifierOut(BaseModel):
    identifier: str


class StaffCreate(BaseModel):
    role: StaffRole
    full_name: str = Field(min_length=1, max_length=200)
    year: int | None = Field(default=None, ge=1000, le=9999)


class StaffOut(BaseModel):
    id: int
    code: str
    role: StaffRole
    full_name: str
    email: EmailStr
    is_active: bool

    model_config = {"from_attributes": True}
