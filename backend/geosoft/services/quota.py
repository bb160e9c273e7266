from __future__ import annotations

from sqlalchemy.orm import Session

from geosoft.core.exceptions import QuotaExceededError
from geosoft.models.user import User


def ensure_quota_available(user: User) -> None:
    if user.used_quota >= user.api_quota:
        raise QuotaExceededError(used=user.used_quota, quota=user.api_quota)


def consume_quota(db: Session, user: User, amount: int = 1) -> None:
    user.used_quota = (user.used_quota or 0) + amount
    db.commit()
