from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import geosoft.models  # noqa: F401
from geosoft.db.base import Base
from geosoft.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "username", "email", "app_source", "registered_apps", "api_quota", "used_quota"},
    "visits": {"id", "app_source", "path", "created_at"},
    "timetable_workspaces": {"id", "user_id", "payload"},
}


def _ensure_users_multi_app_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "users" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("users")}
        if "registered_apps" not in column_names:
            if connection.dialect.name == "postgresql":
                connection.execute(
                    text("ALTER TABLE users ADD COLUMN registered_apps JSONB NOT NULL DEFAULT '[]'::jsonb")
                )
            else:
                connection.execute(text("ALTER TABLE users ADD COLUMN registered_apps JSON NOT NULL DEFAULT '[]'"))
        if "api_quota" not in column_names:
            connection.execute(text("ALTER TABLE users ADD COLUMN api_quota INTEGER NOT NULL DEFAULT 100"))
        if "used_quota" not in column_names:
            connection.execute(text("ALTER TABLE users ADD COLUMN used_quota INTEGER NOT NULL DEFAULT 0"))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_users_multi_app_columns()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
