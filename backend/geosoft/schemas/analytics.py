from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from geosoft.models.user import AppSource


class VisitCreate(BaseModel):
    app_source: AppSource = Field(alias="appSource")
    path: str = Field(min_length=1, max_length=500)
    referrer: str | None = Field(default=None, max_length=500)
    session_id: str | None = Field(default=None, alias="sessionId", max_length=100)
    country: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("path")
    @classmethod
    def normalize_path(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Path is required")
        return trimmed


class VisitCreatedOut(BaseModel):
    id: str


class LabeledCount(BaseModel):
    label: str
    value: int


class AppPathCount(BaseModel):
    app: str
    path: str
    count: int


class DailyCountPoint(BaseModel):
    date: str
    value: int


class VisitStatsOut(BaseModel):
    total_visits: int = Field(alias="totalVisits")
    visits_by_app: list[LabeledCount] = Field(default_factory=list, alias="visitsByApp")
    visits_by_path: list[AppPathCount] = Field(default_factory=list, alias="visitsByPath")

    model_config = ConfigDict(populate_by_name=True)


class QuotaUsageOut(BaseModel):
    total_quota: int = Field(alias="totalQuota")
    total_used: int = Field(alias="totalUsed")
    exhausted_users: int = Field(alias="exhaustedUsers")

    model_config = ConfigDict(populate_by_name=True)


class AdminDashboardOut(BaseModel):
    generated_at: str = Field(alias="generatedAt")
    window_days: int = Field(alias="windowDays")
    users_total: int = Field(alias="usersTotal")
    users_by_app: list[LabeledCount] = Field(default_factory=list, alias="usersByApp")
    users_by_plan: list[LabeledCount] = Field(default_factory=list, alias="usersByPlan")
    users_by_provider: list[LabeledCount] = Field(default_factory=list, alias="usersByProvider")
    signups_by_day: list[DailyCountPoint] = Field(default_factory=list, alias="signupsByDay")
    visits_by_day: list[DailyCountPoint] = Field(default_factory=list, alias="visitsByDay")
    visits_last_window: int = Field(alias="visitsLastWindow")
    quota: QuotaUsageOut

    model_config = ConfigDict(populate_by_name=True)
