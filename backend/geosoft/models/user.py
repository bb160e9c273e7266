import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from geosoft.db.base import Base


class AppSource(str, Enum):
    timetablely = "timetablely"
    docxiq = "docxiq"
    linkshyft = "linkshyft"


class AuthProvider(str, Enum):
    local = "local"
    google = "google"
    both = "both"


class UserRole(str, Enum):
    admin = "admin"
    user = "user"


class UserPlan(str, Enum):
    free = "free"
    pro = "pro"
    enterprise = "enterprise"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    firstname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    lastname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    auth_provider: Mapped[AuthProvider] = mapped_column(
        SAEnum(AuthProvider, name="auth_provider"), nullable=False, default=AuthProvider.local
    )
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole, name="user_role"), nullable=False, default=UserRole.user)
    app_source: Mapped[AppSource] = mapped_column(SAEnum(AppSource, name="app_source"), nullable=False)
    registered_apps: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    plan: Mapped[UserPlan] = mapped_column(SAEnum(UserPlan, name="user_plan"), nullable=False, default=UserPlan.free)
    api_quota: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    used_quota: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    def register_app(self, app_source: AppSource) -> bool:
        apps = list(self.registered_apps or [])
        if app_source.value in apps:
            return False
        apps.append(app_source.value)
        self.registered_apps = apps
        return True
