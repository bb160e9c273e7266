from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from geosoft.api.deps import get_db, get_optional_user, require_roles
from geosoft.core.config import get_settings
from geosoft.models.user import AppSource, AuthProvider, User, UserPlan, UserRole
from geosoft.models.visit import Visit
from geosoft.schemas.analytics import (
    AdminDashboardOut,
    AppPathCount,
    DailyCountPoint,
    LabeledCount,
    QuotaUsageOut,
    VisitCreate,
    VisitCreatedOut,
    VisitStatsOut,
)
from geosoft.services.rate_limit import client_ip, rate_limited

settings = get_settings()
router = APIRouter()


def _enum_label(value: object) -> str:
    if hasattr(value, "value"):
        return str(getattr(value, "value"))
    return str(value)


def _to_labeled_counts(counter: dict[str, int]) -> list[LabeledCount]:
    ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [LabeledCount(label=label, value=value) for label, value in ordered]


def _to_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _daily_series(values: list[datetime | None], start_date, window_days: int) -> list[DailyCountPoint]:
    buckets = {(start_date + timedelta(days=offset)).isoformat(): 0 for offset in range(window_days)}
    for value in values:
        created = _to_utc(value)
        if created is None:
            continue
        key = created.date().isoformat()
        if key in buckets:
            buckets[key] += 1
    return [DailyCountPoint(date=day, value=count) for day, count in sorted(buckets.items())]


@router.post(
    "/visit",
    response_model=VisitCreatedOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(
            rate_limited(
                "analytics.visit",
                limit=settings.visit_rate_limit_max_requests,
                window_seconds=settings.visit_rate_limit_window_seconds,
            )
        )
    ],
)
def track_visit(
    payload: VisitCreate,
    request: Request,
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> VisitCreatedOut:
    visit = Visit(
        app_source=payload.app_source,
        path=payload.path,
        visit_referrer=payload.referrer or request.headers.get("referer"),
        user_agent=request.headers.get("user-agent"),
        ip=client_ip(request),
        user_id=current_user.id if current_user is not None else None,
        session_id=payload.session_id,
        country=payload.country,
        city=payload.city,
    )
    db.add(visit)
    db.commit()
    return VisitCreatedOut(id=visit.id)


@router.get("/stats", response_model=VisitStatsOut)
def visit_stats(
    app_source: str | None = Query(default=None, alias="appSource"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
) -> VisitStatsOut:
    filters = []
    # Unknown app sources are ignored rather than rejected.
    if app_source in {item.value for item in AppSource}:
        filters.append(Visit.app_source == AppSource(app_source))
    if start_date is not None:
        filters.append(Visit.created_at >= start_date)
    if end_date is not None:
        filters.append(Visit.created_at <= end_date)

    total_visits = int(db.execute(select(func.count(Visit.id)).where(*filters)).scalar_one() or 0)

    by_app = {
        _enum_label(app): int(count)
        for app, count in db.execute(
            select(Visit.app_source, func.count(Visit.id)).where(*filters).group_by(Visit.app_source)
        ).all()
    }

    count_column = func.count(Visit.id).label("count")
    by_path = db.execute(
        select(Visit.app_source, Visit.path, count_column)
        .where(*filters)
        .group_by(Visit.app_source, Visit.path)
        .order_by(count_column.desc(), Visit.path)
        .limit(20)
    ).all()

    return VisitStatsOut(
        totalVisits=total_visits,
        visitsByApp=_to_labeled_counts(by_app),
        visitsByPath=[AppPathCount(app=_enum_label(app), path=path, count=int(count)) for app, path, count in by_path],
    )


@router.get("/admin/dashboard", response_model=AdminDashboardOut)
def admin_dashboard(
    days: int = Query(default=14, ge=1, le=90),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> AdminDashboardOut:
    now = datetime.now(timezone.utc)
    start_date = (now - timedelta(days=days - 1)).date()
    window_start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)

    users_total = int(db.execute(select(func.count(User.id))).scalar_one() or 0)

    users_by_plan = {item.value: 0 for item in UserPlan}
    for plan, count in db.execute(select(User.plan, func.count(User.id)).group_by(User.plan)).all():
        users_by_plan[_enum_label(plan)] = int(count)

    users_by_provider = {item.value: 0 for item in AuthProvider}
    for provider, count in db.execute(
        select(User.auth_provider, func.count(User.id)).group_by(User.auth_provider)
    ).all():
        users_by_provider[_enum_label(provider)] = int(count)

    # registered_apps is a JSON list, so count per app in Python.
    users_by_app = {item.value: 0 for item in AppSource}
    for apps in db.execute(select(User.registered_apps)).scalars():
        for app in apps or []:
            if app in users_by_app:
                users_by_app[app] += 1

    signup_times = list(db.execute(select(User.created_at).where(User.created_at >= window_start)).scalars())
    visit_times = list(db.execute(select(Visit.created_at).where(Visit.created_at >= window_start)).scalars())

    total_quota, total_used = db.execute(
        select(func.coalesce(func.sum(User.api_quota), 0), func.coalesce(func.sum(User.used_quota), 0))
    ).one()
    exhausted_users = int(
        db.execute(select(func.count(User.id)).where(User.used_quota >= User.api_quota)).scalar_one() or 0
    )

    return AdminDashboardOut(
        generatedAt=now.isoformat(),
        windowDays=days,
        usersTotal=users_total,
        usersByApp=_to_labeled_counts(users_by_app),
        usersByPlan=_to_labeled_counts(users_by_plan),
        usersByProvider=_to_labeled_counts(users_by_provider),
        signupsByDay=_daily_series(signup_times, start_date, days),
        visitsByDay=_daily_series(visit_times, start_date, days),
        visitsLastWindow=len(visit_times),
        quota=QuotaUsageOut(
            totalQuota=int(total_quota or 0),
            totalUsed=int(total_used or 0),
            exhaustedUsers=exhausted_users,
        ),
    )
