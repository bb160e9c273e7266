import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from geosoft.api.deps import get_current_user, get_db
from geosoft.core.exceptions import ResourceNotFoundError
from geosoft.models.timetable_workspace import TimetableWorkspace
from geosoft.models.user import User
from geosoft.schemas.timetable import (
    AppliedTemplateOut,
    CellSelection,
    GridState,
    MergeCheckOut,
    MergeOut,
    MergeRequest,
    TemplateCreate,
    TemplateUpdate,
    TimeLabelsOut,
    TimeLabelsRequest,
    TimetableDatabase,
    TimetableEntriesOut,
    TimetableReferenceData,
    TimetableTemplate,
)
from geosoft.services.grid import merge_region, merge_selection, time_labels
from geosoft.services.templates import (
    apply_template,
    extract_timetable,
    get_template,
    list_templates,
    persist_template,
    remove_template,
    save_grid_as_template,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_workspace(db: Session, user: User) -> tuple[TimetableWorkspace | None, TimetableDatabase]:
    workspace = db.execute(
        select(TimetableWorkspace).where(TimetableWorkspace.user_id == user.id)
    ).scalar_one_or_none()
    if workspace is None:
        return None, TimetableDatabase()
    return workspace, TimetableDatabase.model_validate(workspace.payload or {})


def _save_workspace(
    db: Session,
    user: User,
    workspace: TimetableWorkspace | None,
    database: TimetableDatabase,
) -> TimetableDatabase:
    payload = database.model_dump(mode="json", by_alias=True)
    if workspace is None:
        workspace = TimetableWorkspace(user_id=user.id, payload=payload)
        db.add(workspace)
    else:
        workspace.payload = payload
    db.commit()
    return database


def _require_template(template_id: str, database: TimetableDatabase) -> TimetableTemplate:
    template = get_template(template_id, database)
    if template is None:
        raise ResourceNotFoundError("Template", template_id)
    return template


@router.get("/workspace", response_model=TimetableDatabase)
def read_workspace(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableDatabase:
    _, database = _load_workspace(db, current_user)
    return database


@router.put("/workspace", response_model=TimetableDatabase)
def replace_workspace(
    payload: TimetableReferenceData,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableDatabase:
    workspace, existing = _load_workspace(db, current_user)
    # Templates have their own endpoints and survive a reference-data replace.
    database = TimetableDatabase(**payload.model_dump(), templates=existing.templates)
    return _save_workspace(db, current_user, workspace, database)


@router.post("/grid/time-labels", response_model=TimeLabelsOut)
def grid_time_labels(payload: TimeLabelsRequest) -> TimeLabelsOut:
    labels = time_labels(
        payload.column_count,
        payload.column_durations,
        payload.default_slot_duration,
        payload.day_start,
    )
    return TimeLabelsOut(labels=labels)


@router.post("/grid/can-merge", response_model=MergeCheckOut)
def grid_can_merge(payload: CellSelection) -> MergeCheckOut:
    region = merge_region(payload.selected_cells)
    if region is None:
        return MergeCheckOut(canMerge=False)
    anchor, info = region
    return MergeCheckOut(canMerge=True, anchor=anchor, rowSpan=info.row_span, colSpan=info.col_span)


@router.post("/grid/merge", response_model=MergeOut)
def grid_merge(payload: MergeRequest) -> MergeOut:
    anchor, merged, hidden, displaced = merge_selection(
        payload.selected_cells,
        payload.grid.merged_cells,
        payload.grid.hidden_cells,
        payload.grid.cell_contents,
        column_count=payload.grid.column_count,
    )
    return MergeOut(
        anchor=anchor,
        mergedCells=merged,
        hiddenCells=sorted(hidden),
        displacedContents=displaced,
    )


@router.post("/grid/extract", response_model=TimetableEntriesOut)
def grid_extract(payload: GridState) -> TimetableEntriesOut:
    entries = extract_timetable(
        payload.cell_contents,
        payload.hidden_cells,
        payload.column_count,
        payload.column_durations,
        payload.default_slot_duration,
    )
    return TimetableEntriesOut(count=len(entries), entries=entries)


@router.get("/templates", response_model=list[TimetableTemplate])
def read_templates(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TimetableTemplate]:
    _, database = _load_workspace(db, current_user)
    return list_templates(database)


@router.get("/templates/{template_id}", response_model=TimetableTemplate)
def read_template(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableTemplate:
    _, database = _load_workspace(db, current_user)
    return _require_template(template_id, database)


@router.post(
    "/templates",
    response_model=TimetableTemplate,
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    payload: TemplateCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableTemplate:
    workspace, database = _load_workspace(db, current_user)
    template = save_grid_as_template(payload.name, payload.grid, description=payload.description)
    _save_workspace(db, current_user, workspace, persist_template(template, database))
    logger.info("Saved template %s for user %s", template.id, current_user.id)
    return template


@router.put("/templates/{template_id}", response_model=TimetableTemplate)
def replace_template(
    template_id: str,
    payload: TemplateUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableTemplate:
    workspace, database = _load_workspace(db, current_user)
    _require_template(template_id, database)
    template = TimetableTemplate.model_validate({**payload.model_dump(), "id": template_id})
    _save_workspace(db, current_user, workspace, persist_template(template, database))
    return template


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    workspace, database = _load_workspace(db, current_user)
    _require_template(template_id, database)
    _save_workspace(db, current_user, workspace, remove_template(template_id, database))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/templates/{template_id}/apply",
    response_model=AppliedTemplateOut,
)
def apply_saved_template(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppliedTemplateOut:
    _, database = _load_workspace(db, current_user)
    template = _require_template(template_id, database)
    return AppliedTemplateOut(templateId=template.id, grid=apply_template(template))
