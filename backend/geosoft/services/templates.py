from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
import uuid

from geosoft.schemas.timetable import (
    CellContent,
    GridState,
    MergeInfo,
    TimetableDatabase,
    TimetableEntry,
    TimetableTemplate,
)
from geosoft.services.grid import DAY_LABELS, DAY_START_MINUTES, cell_key, time_labels


def extract_timetable(
    cell_contents: Mapping[str, CellContent],
    hidden_cells: Iterable[str],
    column_count: int,
    column_durations: Mapping[int, int],
    default_duration: int,
    *,
    day_labels: tuple[str, ...] = DAY_LABELS,
    day_start: int = DAY_START_MINUTES,
) -> list[TimetableEntry]:
    """Project the grid into row-major entries, skipping cells hidden by merges."""
    hidden = set(hidden_cells)
    labels = time_labels(column_count, column_durations, default_duration, day_start)
    entries: list[TimetableEntry] = []

    for row, day in enumerate(day_labels):
        for col in range(column_count):
            key = cell_key(row, col)
            if key in hidden:
                continue
            content = cell_contents.get(key)
            entries.append(
                TimetableEntry(
                    row=row,
                    col=col,
                    cell_key=key,
                    day=day,
                    time_slot=labels[col],
                    custom_text=content.text if content is not None else None,
                    is_vertical=content.is_vertical if content is not None else None,
                    alignment=content.alignment if content is not None else None,
                    background_color=content.background_color if content is not None else None,
                )
            )
    return entries


def save_as_template(
    name: str,
    cell_contents: Mapping[str, CellContent],
    merged_cells: Mapping[str, MergeInfo],
    hidden_cells: Iterable[str],
    column_count: int,
    column_durations: Mapping[int, int],
    default_duration: int,
    *,
    description: str | None = None,
) -> TimetableTemplate:
    hidden = list(dict.fromkeys(hidden_cells))
    entries = extract_timetable(cell_contents, hidden, column_count, column_durations, default_duration)
    return TimetableTemplate(
        id=str(uuid.uuid4()),
        name=name,
        created_at=datetime.now(timezone.utc).isoformat(),
        description=description,
        entries=entries,
        column_count=column_count,
        column_durations=dict(column_durations),
        default_slot_duration=default_duration,
        merged_cells_data={key: info.model_copy() for key, info in merged_cells.items()},
        hidden_cells_array=hidden,
    )


def save_grid_as_template(name: str, grid: GridState, *, description: str | None = None) -> TimetableTemplate:
    return save_as_template(
        name,
        grid.cell_contents,
        grid.merged_cells,
        grid.hidden_cells,
        grid.column_count,
        grid.column_durations,
        grid.default_slot_duration,
        description=description,
    )


def persist_template(template: TimetableTemplate, database: TimetableDatabase) -> TimetableDatabase:
    """Return a copy of the store with the template replaced by id in place, or appended."""
    templates = list(database.templates)
    for index, existing in enumerate(templates):
        if existing.id == template.id:
            templates[index] = template
            break
    else:
        templates.append(template)
    return database.model_copy(update={"templates": templates})


def remove_template(template_id: str, database: TimetableDatabase) -> TimetableDatabase:
    templates = [item for item in database.templates if item.id != template_id]
    return database.model_copy(update={"templates": templates})


def list_templates(database: TimetableDatabase) -> list[TimetableTemplate]:
    return list(database.templates)


def get_template(template_id: str, database: TimetableDatabase) -> TimetableTemplate | None:
    return next((item for item in database.templates if item.id == template_id), None)


def apply_template(template: TimetableTemplate) -> GridState:
    """Rebuild grid state from a stored template.

    Entries without text are not restored, and missing formatting falls back
    to upright, centred text. Background colours and the original content of
    empty-text cells are therefore not guaranteed to survive a round trip.
    """
    cell_contents: dict[str, CellContent] = {}
    for entry in template.entries:
        if not entry.custom_text:
            continue
        cell_contents[entry.cell_key] = CellContent(
            text=entry.custom_text,
            is_vertical=entry.is_vertical if entry.is_vertical is not None else False,
            alignment=entry.alignment or "center",
            class_name=entry.session.id if entry.session is not None else None,
        )

    return GridState(
        column_count=template.column_count,
        column_durations=dict(template.column_durations),
        default_slot_duration=template.default_slot_duration,
        cell_contents=cell_contents,
        merged_cells={key: info.model_copy() for key, info in template.merged_cells_data.items()},
        hidden_cells=list(template.hidden_cells_array),
    )
