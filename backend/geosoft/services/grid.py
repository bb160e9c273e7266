"""Weekly grid geometry and merge-region helpers.

The grid has one row per weekday and a caller-chosen number of time columns.
Column start times are derived from the running sum of the preceding column
durations, so nothing here stores wall-clock times.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from geosoft.core.exceptions import GridMergeError
from geosoft.schemas.timetable import CellContent, MergeInfo

DAY_LABELS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
DAY_START_MINUTES = 8 * 60


@dataclass(frozen=True)
class ColumnInterval:
    start: int
    end: int
    duration: int


def cell_key(row: int, col: int) -> str:
    return f"{row}-{col}"


def parse_cell_key(key: str) -> tuple[int, int]:
    row, col = key.split("-", 1)
    return int(row), int(col)


def minutes_to_time_string(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    hours %= 24
    period = "PM" if hours >= 12 else "AM"
    if hours > 12:
        display_hour = hours - 12
    elif hours == 0:
        display_hour = 12
    else:
        display_hour = hours
    return f"{display_hour}:{mins:02d} {period}"


def column_duration(column: int, column_durations: Mapping[int, int], default_duration: int) -> int:
    # Zero counts as "not overridden".
    return column_durations.get(column) or default_duration


def column_interval(
    column: int,
    column_durations: Mapping[int, int],
    default_duration: int,
    day_start: int = DAY_START_MINUTES,
) -> ColumnInterval:
    start = day_start
    for previous in range(column):
        start += column_duration(previous, column_durations, default_duration)
    duration = column_duration(column, column_durations, default_duration)
    return ColumnInterval(start=start, end=start + duration, duration=duration)


def time_labels(
    count: int,
    column_durations: Mapping[int, int],
    default_duration: int,
    day_start: int = DAY_START_MINUTES,
) -> list[str]:
    labels: list[str] = []
    for column in range(count):
        interval = column_interval(column, column_durations, default_duration, day_start)
        labels.append(f"{minutes_to_time_string(interval.start)} - {minutes_to_time_string(interval.end)}")
    return labels


def _bounding_box(cells: Iterable[tuple[int, int]]) -> tuple[int, int, int, int]:
    rows = [row for row, _ in cells]
    cols = [col for _, col in cells]
    return min(rows), max(rows), min(cols), max(cols)


def can_merge(selected_cells: Iterable[str]) -> bool:
    selected = set(selected_cells)
    if len(selected) < 2:
        return False

    min_row, max_row, min_col, max_col = _bounding_box([parse_cell_key(key) for key in selected])
    expected_count = (max_row - min_row + 1) * (max_col - min_col + 1)
    if len(selected) != expected_count:
        return False

    for row in range(min_row, max_row + 1):
        for col in range(min_col, max_col + 1):
            if cell_key(row, col) not in selected:
                return False
    return True


def merge_region(selected_cells: Iterable[str]) -> tuple[str, MergeInfo] | None:
    """Return the top-left anchor and span of a mergeable selection, else None."""
    selected = set(selected_cells)
    if not can_merge(selected):
        return None
    min_row, max_row, min_col, max_col = _bounding_box([parse_cell_key(key) for key in selected])
    return cell_key(min_row, min_col), MergeInfo(row_span=max_row - min_row + 1, col_span=max_col - min_col + 1)


def region_cells(anchor: str, info: MergeInfo) -> set[str]:
    row, col = parse_cell_key(anchor)
    return {
        cell_key(r, c)
        for r in range(row, row + info.row_span)
        for c in range(col, col + info.col_span)
    }


def merge_selection(
    selected_cells: Iterable[str],
    merged_cells: Mapping[str, MergeInfo],
    hidden_cells: Iterable[str],
    cell_contents: Mapping[str, CellContent] | None = None,
    *,
    column_count: int,
    row_count: int = len(DAY_LABELS),
) -> tuple[str, dict[str, MergeInfo], set[str], dict[str, CellContent]]:
    """Apply a merge over the selection.

    Returns the anchor, new merge and hidden-cell tables, and the contents of
    cells that just became hidden. The inputs are left untouched.
    """
    selected = set(selected_cells)
    region = merge_region(selected)
    if region is None:
        raise GridMergeError(
            "Selected cells must form a filled rectangle of at least two cells",
            details={"selected_cells": sorted(selected)},
        )
    anchor, info = region

    cells = {key: parse_cell_key(key) for key in selected}
    outside = sorted(
        key for key, (row, col) in cells.items() if not (0 <= row < row_count and 0 <= col < column_count)
    )
    if outside:
        raise GridMergeError(
            "Selected cells fall outside the grid",
            details={"outside_cells": outside, "row_count": row_count, "column_count": column_count},
        )

    hidden = set(hidden_cells)
    overlapping = sorted(
        existing
        for existing, existing_info in merged_cells.items()
        if region_cells(existing, existing_info) & selected
    )
    if overlapping or selected & hidden:
        raise GridMergeError(
            "Selection overlaps an existing merged region",
            details={"overlapping_anchors": overlapping},
        )

    newly_hidden = selected - {anchor}
    contents = cell_contents or {}
    displaced = {key: contents[key] for key in sorted(newly_hidden) if key in contents and contents[key].text}

    new_merged = dict(merged_cells)
    new_merged[anchor] = info
    return anchor, new_merged, hidden | newly_hidden, displaced
