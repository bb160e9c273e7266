"""create users

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


app_source_enum = sa.Enum("timetablely", "docxiq", "linkshyft", name="app_source")
auth_provider_enum = sa.Enum("local", "google", "both", name="auth_provider")
user_role_enum = sa.Enum("admin", "user", name="user_role")
user_plan_enum = sa.Enum("free", "pro", "enterprise", name="user_plan")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("firstname", sa.String(length=100), nullable=True),
        sa.Column("lastname", sa.String(length=100), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=True),
        sa.Column("google_id", sa.String(length=64), nullable=True),
        sa.Column("avatar", sa.String(length=500), nullable=True),
        sa.Column("auth_provider", auth_provider_enum, nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("app_source", app_source_enum, nullable=False),
        sa.Column("registered_apps", sa.JSON(), nullable=False),
        sa.Column("plan", user_plan_enum, nullable=False),
        sa.Column("api_quota", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("used_quota", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("google_id", name="uq_users_google_id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    bind = op.get_bind()
    user_plan_enum.drop(bind, checkfirst=True)
    user_role_enum.drop(bind, checkfirst=True)
    auth_provider_enum.drop(bind, checkfirst=True)
