"""create visits

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:10:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


# Created with the users table.
app_source_enum = postgresql.ENUM("timetablely", "docxiq", "linkshyft", name="app_source", create_type=False)


def upgrade() -> None:
    op.create_table(
        "visits",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("app_source", app_source_enum, nullable=False),
        sa.Column("path", sa.String(length=500), nullable=False),
        sa.Column("visit_referrer", sa.String(length=500), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("session_id", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_visits_created_at", "visits", ["created_at"])
    op.create_index("ix_visits_app_source_created_at", "visits", ["app_source", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_visits_app_source_created_at", table_name="visits")
    op.drop_index("ix_visits_created_at", table_name="visits")
    op.drop_table("visits")
    sa.Enum(name="app_source").drop(op.get_bind(), checkfirst=True)
