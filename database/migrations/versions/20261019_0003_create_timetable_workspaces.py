"""create timetable workspaces

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:20:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "timetable_workspaces",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_timetable_workspaces_user_id", "timetable_workspaces", ["user_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_timetable_workspaces_user_id", table_name="timetable_workspaces")
    op.drop_table("timetable_workspaces")
