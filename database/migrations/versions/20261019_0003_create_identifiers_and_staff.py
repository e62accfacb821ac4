"""create issued identifiers and staff members

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


staff_role_enum = sa.Enum("teacher", "head_of_department", "student", name="staff_role")


def upgrade() -> None:
    op.create_table(
        "issued_identifiers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=9), nullable=False),
        sa.Column("prefix", sa.String(length=1), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("prefix", "year", "sequence", name="uq_issued_identifiers_prefix_year_sequence"),
    )
    op.create_index("ix_issued_identifiers_code", "issued_identifiers", ["code"], unique=True)

    op.create_table(
        "staff_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=9), nullable=False),
        sa.Column("role", staff_role_enum, nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_staff_members_code", "staff_members", ["code"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_staff_members_code", table_name="staff_members")
    op.drop_table("staff_members")
    op.drop_index("ix_issued_identifiers_code", table_name="issued_identifiers")
    op.drop_table("issued_identifiers")
    staff_role_enum.drop(op.get_bind(), checkfirst=True)
