from datetime import datetime, timezone
import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from geosoft.api.deps import get_current_user, get_db
from geosoft.core.config import get_settings
from geosoft.core.security import create_access_token, get_password_hash, verify_password
from geosoft.models.user import AppSource, AuthProvider, User
from geosoft.schemas.user import GoogleAuthUrlOut, Token, UserCreate, UserLogin, UserOut
from geosoft.services import google_oauth
from geosoft.services.rate_limit import enforce_rate_limit

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)


def _issue_token(db: Session, user: User) -> Token:
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return Token(access_token=create_access_token(user.id), token_type="bearer", user=user)


def _unique_username(db: Session, email: str) -> str:
    base = re.sub(r"[^a-z0-9_.-]", "", email.split("@", 1)[0].lower())[:90]
    if len(base) < 3:
        base = f"{base}_user"
    candidate = base
    suffix = 1
    while db.execute(select(User.id).where(User.username == candidate)).first() is not None:
        suffix += 1
        candidate = f"{base}{suffix}"
    return candidate


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, request: Request, db: Session = Depends(get_db)) -> UserOut:
    enforce_rate_limit(
        request=request,
        scope="auth.register",
        limit=settings.auth_rate_limit_register_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.email,
    )
    existing = db.execute(
        select(User).where(or_(User.email == payload.email, User.username == payload.username))
    ).scalar_one_or_none()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or username already registered")

    user = User(
        username=payload.username,
        email=payload.email,
        firstname=payload.firstname,
        lastname=payload.lastname,
        hashed_password=get_password_hash(payload.password),
        auth_provider=AuthProvider.local,
        app_source=payload.app_source,
        registered_apps=[payload.app_source.value],
        api_quota=settings.default_api_quota,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or username already registered") from exc

    db.refresh(user)
    logger.info("Registered user %s from %s", user.id, payload.app_source.value)
    return user


@router.post("/login", response_model=Token)
def login(payload: UserLogin, request: Request, db: Session = Depends(get_db)) -> Token:
    enforce_rate_limit(
        request=request,
        scope="auth.login",
        limit=settings.auth_rate_limit_login_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        identity=payload.identifier,
    )
    user = db.execute(
        select(User).where(or_(User.email == payload.identifier, User.username == payload.identifier))
    ).scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    if payload.app_source is not None:
        user.register_app(payload.app_source)
    return _issue_token(db, user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)) -> dict:
    return {"success": True}


@router.get("/google", response_model=GoogleAuthUrlOut)
def init_google_auth(app_source: AppSource = Query(default=AppSource.timetablely, alias="appSource")) -> GoogleAuthUrlOut:
    return GoogleAuthUrlOut(auth_url=google_oauth.build_auth_url(state=app_source.value))


@router.get("/google/callback", response_model=Token)
def google_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> Token:
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Authorization code is required")

    try:
        profile = google_oauth.profile_from_code(code)
    except google_oauth.GoogleOAuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if not profile.email or not profile.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to get user info from Google")

    try:
        app_source = AppSource(state) if state else AppSource.timetablely
    except ValueError:
        app_source = AppSource.timetablely

    email = profile.email.strip().lower()
    user = db.execute(
        select(User).where(or_(User.google_id == profile.id, User.email == email))
    ).scalars().first()

    if user is None:
        user = User(
            username=_unique_username(db, email),
            email=email,
            firstname=profile.given_name,
            lastname=profile.family_name,
            google_id=profile.id,
            avatar=profile.picture,
            auth_provider=AuthProvider.google,
            app_source=app_source,
            registered_apps=[app_source.value],
            is_email_verified=profile.verified_email,
            api_quota=settings.default_api_quota,
        )
        db.add(user)
        logger.info("Created Google account for %s", email)
    else:
        if user.google_id is None:
            user.google_id = profile.id
        if user.auth_provider == AuthProvider.local:
            user.auth_provider = AuthProvider.both
        if not user.avatar and profile.picture:
            user.avatar = profile.picture
        user.is_email_verified = user.is_email_verified or profile.verified_email
        user.register_app(app_source)

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Account linking conflict") from exc
    return _issue_token(db, user)
