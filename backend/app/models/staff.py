from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class StaffRole(str, Enum):
    teacher = "teacher"
    head_of_department = "head_of_department"
    student = "student"


ROLE_PREFIXES: dict[StaffRole, str] = {
    StaffRole.teacher: "t",
    StaffRole.head_of_department: "h",
    StaffRole.student: "e",
}


class IssuedIdentifier(Base):
    __tablename__ = "issued_identifiers"
    __table_args__ = (
        UniqueConstraint("prefix", "year", "sequence", name="uq_issued_identifiers_prefix_year_sequence"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(9), unique=True, index=True, nullable=False)
    prefix: Mapped[str] = mapped_column(String(1), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class StaffMember(Base):
    __tablename__ = "staff_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(9), unique=True, index=True, nullable=False)
    role: Mapped[StaffRole] = mapped_column(SAEnum(StaffRole, name="staff_role"), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
