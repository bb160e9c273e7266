from __future__ import annotations

import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CELL_KEY_PATTERN = re.compile(r"^\d+-\d+$")

Alignment = Literal["left", "center", "right"]

DEFAULT_BLOCKED_TEXTS = [
    "break",
    "short break",
    "devotion",
    "assembly",
    "lunch",
    "recess",
    "morning devotion",
    "closing",
    "games",
    "sports",
    "free period",
]


def _validate_cell_keys(keys) -> None:
    invalid = [key for key in keys if not CELL_KEY_PATTERN.match(key)]
    if invalid:
        raise ValueError(f"Invalid cell key(s): {', '.join(sorted(invalid))}. Expected '<row>-<col>'")


def _validate_column_durations(value: dict[int, int]) -> dict[int, int]:
    for column, minutes in value.items():
        if column < 0:
            raise ValueError("Column index cannot be negative")
        if minutes <= 0:
            raise ValueError(f"Duration for column {column} must be a positive number of minutes")
    return value


class _DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Tutor(_DocumentModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    email: str | None = None
    subjects: list[str] = Field(default_factory=list)
    max_periods_per_day: int | None = Field(default=None, alias="maxPeriodsPerDay", ge=1, le=24)
    unavailable_slots: list[str] | None = Field(default=None, alias="unavailableSlots")

    @field_validator("unavailable_slots")
    @classmethod
    def validate_unavailable_slots(cls, value: list[str] | None) -> list[str] | None:
        if value is not None:
            _validate_cell_keys(value)
        return value


class Course(_DocumentModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    teacher_id: str = Field(alias="teacherId")
    periods_per_week: int = Field(alias="periodsPerWeek", ge=0, le=60)
    priority: Priority = Priority.MEDIUM
    duration: int | None = Field(default=None, ge=1)
    preferred_slots: list[str] | None = Field(default=None, alias="preferredSlots")
    avoid_consecutive: bool | None = Field(default=None, alias="avoidConsecutive")


class ClassSession(_DocumentModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    subjects: list[str] = Field(default_factory=list)


class CellContent(_DocumentModel):
    text: str = ""
    is_vertical: bool = Field(default=False, alias="isVertical")
    alignment: Alignment = "center"
    class_name: str | None = Field(default=None, alias="className")
    background_color: str | None = Field(default=None, alias="backgroundColor")


class MergeInfo(_DocumentModel):
    row_span: int = Field(alias="rowSpan", ge=1)
    col_span: int = Field(alias="colSpan", ge=1)


class TimetableEntry(_DocumentModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    day: str
    cell_key: str = Field(alias="cellKey")
    time_slot: str = Field(alias="timeSlot")
    teacher: Tutor | None = None
    subject: Course | None = None
    session: ClassSession | None = None
    custom_text: str | None = Field(default=None, alias="customText")
    is_vertical: bool | None = Field(default=None, alias="isVertical")
    alignment: Alignment | None = None
    background_color: str | None = Field(default=None, alias="backgroundColor")


class TemplateUpdate(_DocumentModel):
    """Stored template fields. Layout limits match GridState so any stored template can be applied."""

    name: str = Field(min_length=1, max_length=200)
    created_at: str | None = Field(default=None, alias="createdAt")
    description: str | None = None
    column_count: int = Field(alias="columnCount", ge=1, le=48)
    entries: list[TimetableEntry] = Field(default_factory=list)
    default_slot_duration: int = Field(alias="defaultSlotDuration", ge=1, le=24 * 60)
    hidden_cells_array: list[str] = Field(default_factory=list, alias="hiddenCellsArray")
    merged_cells_data: dict[str, MergeInfo] = Field(default_factory=dict, alias="mergedCellsData")
    column_durations: dict[int, int] = Field(default_factory=dict, alias="columnDurations")

    @field_validator("column_durations")
    @classmethod
    def validate_column_durations(cls, value: dict[int, int]) -> dict[int, int]:
        return _validate_column_durations(value)

    @field_validator("hidden_cells_array")
    @classmethod
    def validate_hidden_cells(cls, value: list[str]) -> list[str]:
        _validate_cell_keys(value)
        return value

    @field_validator("merged_cells_data")
    @classmethod
    def validate_merged_cells(cls, value: dict[str, MergeInfo]) -> dict[str, MergeInfo]:
        _validate_cell_keys(value.keys())
        return value

    @field_validator("entries")
    @classmethod
    def validate_entry_keys(cls, value: list[TimetableEntry]) -> list[TimetableEntry]:
        _validate_cell_keys([entry.cell_key for entry in value])
        return value


class TimetableTemplate(TemplateUpdate):
    id: str


class TimetableReferenceData(_DocumentModel):
    tutors: list[Tutor] = Field(default_factory=list)
    courses: list[Course] = Field(default_factory=list)
    sessions: list[ClassSession] = Field(default_factory=list)
    blocked_slots: list[str] = Field(default_factory=list, alias="blockedSlots")
    blocked_texts: list[str] = Field(default_factory=lambda: list(DEFAULT_BLOCKED_TEXTS), alias="blockedTexts")

    @field_validator("blocked_slots")
    @classmethod
    def validate_blocked_slots(cls, value: list[str]) -> list[str]:
        _validate_cell_keys(value)
        return value


class TimetableDatabase(TimetableReferenceData):
    templates: list[TimetableTemplate] = Field(default_factory=list)


class GridState(_DocumentModel):
    column_count: int = Field(alias="columnCount", ge=1, le=48)
    column_durations: dict[int, int] = Field(default_factory=dict, alias="columnDurations")
    default_slot_duration: int = Field(default=60, alias="defaultSlotDuration", ge=1, le=24 * 60)
    cell_contents: dict[str, CellContent] = Field(default_factory=dict, alias="cellContents")
    merged_cells: dict[str, MergeInfo] = Field(default_factory=dict, alias="mergedCells")
    hidden_cells: list[str] = Field(default_factory=list, alias="hiddenCells")

    @field_validator("column_durations")
    @classmethod
    def validate_column_durations(cls, value: dict[int, int]) -> dict[int, int]:
        return _validate_column_durations(value)

    @field_validator("cell_contents", "merged_cells")
    @classmethod
    def validate_keyed_tables(cls, value: dict) -> dict:
        _validate_cell_keys(value.keys())
        return value

    @field_validator("hidden_cells")
    @classmethod
    def validate_hidden_cells(cls, value: list[str]) -> list[str]:
        _validate_cell_keys(value)
        return list(dict.fromkeys(value))


class TimeLabelsRequest(_DocumentModel):
    column_count: int = Field(alias="columnCount", ge=0, le=48)
    column_durations: dict[int, int] = Field(default_factory=dict, alias="columnDurations")
    default_slot_duration: int = Field(default=60, alias="defaultSlotDuration", ge=1, le=24 * 60)
    day_start: int = Field(default=8 * 60, alias="dayStart", ge=0, lt=24 * 60)


class TimeLabelsOut(_DocumentModel):
    labels: list[str]


class CellSelection(_DocumentModel):
    selected_cells: list[str] = Field(alias="selectedCells")

    @field_validator("selected_cells")
    @classmethod
    def validate_selected_cells(cls, value: list[str]) -> list[str]:
        _validate_cell_keys(value)
        return value


class MergeCheckOut(_DocumentModel):
    can_merge: bool = Field(alias="canMerge")
    anchor: str | None = None
    row_span: int | None = Field(default=None, alias="rowSpan")
    col_span: int | None = Field(default=None, alias="colSpan")


class MergeRequest(CellSelection):
    grid: GridState


class MergeOut(_DocumentModel):
    anchor: str
    merged_cells: dict[str, MergeInfo] = Field(alias="mergedCells")
    hidden_cells: list[str] = Field(alias="hiddenCells")
    displaced_contents: dict[str, CellContent] = Field(default_factory=dict, alias="displacedContents")


class TimetableEntriesOut(_DocumentModel):
    count: int
    entries: list[TimetableEntry]


class TemplateCreate(_DocumentModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    grid: GridState

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Template name cannot be empty")
        return trimmed


class AppliedTemplateOut(_DocumentModel):
    template_id: str = Field(alias="templateId")
    grid: GridState


class AIScheduleRequest(_DocumentModel):
    grid: GridState
    session_id: str | None = Field(default=None, alias="sessionId")


class AIScheduleOut(_DocumentModel):
    cell_contents: dict[str, CellContent] = Field(alias="cellContents")
    filled_cells: list[str] = Field(default_factory=list, alias="filledCells")
    discarded: int = 0
