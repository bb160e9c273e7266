import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from geosoft.api.deps import get_current_user, get_db
from geosoft.models.timetable_workspace import TimetableWorkspace
from geosoft.models.user import AppSource, User
from geosoft.schemas.ai import AppInfoOut, PromptRequest, PromptResponse
from geosoft.schemas.timetable import AIScheduleOut, AIScheduleRequest, TimetableDatabase
from geosoft.services import ai_timetable, gemini
from geosoft.services.prompts import (
    build_prompt,
    get_app_api_key,
    get_app_capabilities,
    get_app_context,
    get_app_instructions,
)
from geosoft.services.quota import consume_quota, ensure_quota_available

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/prompt", response_model=PromptResponse)
def send_prompt(
    payload: PromptRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PromptResponse:
    ensure_quota_available(current_user)
    api_key = get_app_api_key(payload.app_type)
    prompt = build_prompt(
        app_type=payload.app_type,
        user_prompt=payload.user_prompt,
        additional_context=payload.additional_context,
        include_capabilities=payload.include_capabilities,
    )
    text = gemini.generate_text(prompt, api_key=api_key)
    consume_quota(db, current_user)
    return PromptResponse(response=text, appType=payload.app_type)


@router.get("/apps/{app_type}", response_model=AppInfoOut)
def app_info(app_type: AppSource) -> AppInfoOut:
    return AppInfoOut(
        appType=app_type,
        instructions=get_app_instructions(app_type),
        context=get_app_context(app_type),
        capabilities=get_app_capabilities(app_type),
    )


@router.post("/timetable/generate", response_model=AIScheduleOut)
def generate_timetable(
    payload: AIScheduleRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AIScheduleOut:
    ensure_quota_available(current_user)
    workspace = db.execute(
        select(TimetableWorkspace).where(TimetableWorkspace.user_id == current_user.id)
    ).scalar_one_or_none()
    reference = TimetableDatabase.model_validate(workspace.payload if workspace is not None else {})

    result = ai_timetable.generate_ai_timetable(
        api_key=get_app_api_key(AppSource.timetablely),
        reference=reference,
        grid=payload.grid,
        session_id=payload.session_id,
    )
    consume_quota(db, current_user)
    logger.info(
        "AI filled %s cells for user %s (%s discarded)",
        len(result.filled_cells),
        current_user.id,
        result.discarded,
    )
    return AIScheduleOut(
        cellContents=result.cell_contents,
        filledCells=result.filled_cells,
        discarded=result.discarded,
    )
