"""add class section uniqueness and foreign keys

Revision ID: 20261019_0004
Revises: 20261019_0003
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op

revision = "20261019_0004"
down_revision = "20261019_0003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("class_sections") as batch_op:
        batch_op.create_unique_constraint(
            "uq_class_sections_section_subject_semester",
            ["section_name", "subject_id", "semester_id"],
        )
        batch_op.create_foreign_key("fk_class_sections_semester_id", "semesters", ["semester_id"], ["id"])

    with op.batch_alter_table("schedule_slots") as batch_op:
        batch_op.create_foreign_key("fk_schedule_slots_class_id", "class_sections", ["class_id"], ["id"])
        batch_op.create_foreign_key("fk_schedule_slots_room_id", "rooms", ["room_id"], ["id"])

    with op.batch_alter_table("semesters") as batch_op:
        batch_op.create_foreign_key("fk_semesters_program_id", "programs", ["program_id"], ["id"])
        batch_op.create_foreign_key("fk_semesters_academic_year_id", "academic_years", ["academic_year_id"], ["id"])


def downgrade() -> None:
    with op.batch_alter_table("semesters") as batch_op:
        batch_op.drop_constraint("fk_semesters_academic_year_id", type_="foreignkey")
        batch_op.drop_constraint("fk_semesters_program_id", type_="foreignkey")

    with op.batch_alter_table("schedule_slots") as batch_op:
        batch_op.drop_constraint("fk_schedule_slots_room_id", type_="foreignkey")
        batch_op.drop_constraint("fk_schedule_slots_class_id", type_="foreignkey")

    with op.batch_alter_table("class_sections") as batch_op:
        batch_op.drop_constraint("fk_class_sections_semester_id", type_="foreignkey")
        batch_op.drop_constraint("uq_class_sections_section_subject_semester", type_="unique")
