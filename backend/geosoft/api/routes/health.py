from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from geosoft.core.config import get_settings
from geosoft.db.session import engine

router = APIRouter()

settings = get_settings()


@router.get("/health-check")
def health_check() -> dict:
    return {"status": 200, "success": True, "message": settings.service_status_message}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    db_ok = True
    db_error: str | None = None
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    gemini_configured = bool(
        settings.gemini_api_key
        or settings.timetablely_gemini_api_key
        or settings.docxiq_gemini_api_key
        or settings.linkshyft_gemini_api_key
    )
    payload = {
        "status": "ok" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {"ok": db_ok, "error": db_error},
        "integrations": {
            "gemini_configured": gemini_configured,
            "google_oauth_configured": bool(settings.google_client_id and settings.google_client_secret),
        },
    }
    return JSONResponse(status_code=200 if db_ok else 503, content=payload)
