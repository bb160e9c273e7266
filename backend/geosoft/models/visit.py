import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from geosoft.db.base import Base
from geosoft.models.user import AppSource


class Visit(Base):
    __tablename__ = "visits"
    __table_args__ = (Index("ix_visits_app_source_created_at", "app_source", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    app_source: Mapped[AppSource] = mapped_column(SAEnum(AppSource, name="app_source"), nullable=False)
    path: Mapped[str] = mapped_column(String(500), nullable=False)
    visit_referrer: Mapped[str | None] = mapped_column(String(500), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
