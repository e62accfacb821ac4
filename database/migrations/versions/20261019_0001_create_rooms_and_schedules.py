"""create rooms and schedules

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


day_of_week_enum = sa.Enum("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", name="day_of_week")


def upgrade() -> None:
    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("building", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("capacity >= 1 AND capacity <= 500", name="ck_rooms_capacity_range"),
    )
    op.create_index("ix_rooms_code", "rooms", ["code"], unique=True)

    op.create_table(
        "class_sections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("section_name", sa.String(length=50), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("semester_id", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_class_sections_subject_id", "class_sections", ["subject_id"])
    op.create_index("ix_class_sections_semester_id", "class_sections", ["semester_id"])

    op.create_table(
        "schedule_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", day_of_week_enum, nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedule_slots_room_day", "schedule_slots", ["room_id", "day_of_week"])
    op.create_index("ix_schedule_slots_class_day", "schedule_slots", ["class_id", "day_of_week"])


def downgrade() -> None:
    op.drop_index("ix_schedule_slots_class_day", table_name="schedule_slots")
    op.drop_index("ix_schedule_slots_room_day", table_name="schedule_slots")
    op.drop_table("schedule_slots")
    op.drop_index("ix_class_sections_semester_id", table_name="class_sections")
    op.drop_index("ix_class_sections_subject_id", table_name="class_sections")
    op.drop_table("class_sections")
    op.drop_index("ix_rooms_code", table_name="rooms")
    op.drop_table("rooms")
    day_of_week_enum.drop(op.get_bind(), checkfirst=True)
