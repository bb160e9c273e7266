from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from geosoft.models.user import AppSource, AuthProvider, UserPlan, UserRole


class UserBase(BaseModel):
    username: str = Field(min_length=3, max_length=100, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    firstname: str | None = Field(default=None, max_length=100)
    lastname: str | None = Field(default=None, max_length=100)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("firstname", "lastname")
    @classmethod
    def normalize_names(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=72)
    app_source: AppSource


class UserLogin(BaseModel):
    identifier: str = Field(min_length=3, max_length=255, description="Email address or username")
    password: str = Field(min_length=8, max_length=72)
    app_source: AppSource | None = None

    @field_validator("identifier")
    @classmethod
    def normalize_identifier(cls, value: str) -> str:
        return value.strip().lower()


class UserOut(UserBase):
    id: str
    avatar: str | None = None
    role: UserRole
    auth_provider: AuthProvider
    app_source: AppSource
    registered_apps: list[str]
    plan: UserPlan
    api_quota: int
    used_quota: int
    is_email_verified: bool
    last_login: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut


class GoogleAuthUrlOut(BaseModel):
    auth_url: str
