import pytest

from geosoft.core.exceptions import GridMergeError
from geosoft.schemas.timetable import CellContent, MergeInfo
from geosoft.services.grid import (
    can_merge,
    cell_key,
    column_interval,
    merge_region,
    merge_selection,
    minutes_to_time_string,
    parse_cell_key,
    region_cells,
    time_labels,
)


def test_cell_key_round_trip():
    assert cell_key(3, 11) == "3-11"
    assert parse_cell_key("3-11") == (3, 11)


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0, "12:00 AM"),
        (480, "8:00 AM"),
        (725, "12:05 PM"),
        (780, "1:00 PM"),
        (1439, "11:59 PM"),
        (1440, "12:00 AM"),
        (1500, "1:00 AM"),
    ],
)
def test_minutes_to_time_string(minutes, expected):
    assert minutes_to_time_string(minutes) == expected


def test_time_labels_default_durations():
    assert time_labels(3, {}, 60) == [
        "8:00 AM - 9:00 AM",
        "9:00 AM - 10:00 AM",
        "10:00 AM - 11:00 AM",
    ]
    assert time_labels(0, {}, 60) == []


def test_time_labels_with_overrides_are_contiguous():
    durations = {0: 30, 2: 45}
    labels = time_labels(4, durations, 60, day_start=7 * 60 + 30)
    assert labels == [
        "7:30 AM - 8:00 AM",
        "8:00 AM - 9:00 AM",
        "9:00 AM - 9:45 AM",
        "9:45 AM - 10:45 AM",
    ]
    for col in range(1, 4):
        previous = column_interval(col - 1, durations, 60)
        current = column_interval(col, durations, 60)
        assert current.start == previous.end


def test_zero_override_falls_back_to_default():
    interval = column_interval(0, {0: 0}, 50)
    assert interval.duration == 50
    assert interval.end == 480 + 50


def test_can_merge_rectangles():
    assert can_merge({"0-0", "0-1", "1-0", "1-1"}) is True
    assert can_merge({"2-3", "3-3", "4-3"}) is True
    assert can_merge(["0-0", "0-1", "0-1"]) is True


def test_can_merge_rejects_gaps_and_small_selections():
    assert can_merge({"0-0", "0-1", "1-0"}) is False
    assert can_merge({"0-0", "0-2"}) is False
    assert can_merge({"1-1"}) is False
    assert can_merge(set()) is False


def test_merge_region_anchor_is_top_left():
    anchor, info = merge_region({"2-4", "1-3", "1-4", "2-3"})
    assert anchor == "1-3"
    assert info == MergeInfo(row_span=2, col_span=2)
    assert merge_region({"0-0", "1-1"}) is None


def test_merge_selection_hides_everything_but_anchor():
    contents = {
        "0-0": CellContent(text="Maths"),
        "0-1": CellContent(text="Physics"),
        "1-0": CellContent(text=""),
    }
    anchor, merged, hidden, displaced = merge_selection(
        {"0-0", "0-1", "1-0", "1-1"},
        {},
        [],
        contents,
        column_count=4,
    )
    assert anchor == "0-0"
    assert merged == {"0-0": MergeInfo(row_span=2, col_span=2)}
    assert hidden == {"0-1", "1-0", "1-1"}
    assert region_cells(anchor, merged[anchor]) - {anchor} == hidden
    assert list(displaced) == ["0-1"]
    assert "0-0" not in hidden


def test_merge_selection_leaves_inputs_untouched():
    existing = {"3-0": MergeInfo(row_span=1, col_span=2)}
    hidden_before = ["3-1"]
    _, merged, hidden, _ = merge_selection({"0-0", "0-1"}, existing, hidden_before, column_count=4)
    assert existing == {"3-0": MergeInfo(row_span=1, col_span=2)}
    assert hidden_before == ["3-1"]
    assert set(merged) == {"3-0", "0-0"}
    assert hidden == {"3-1", "0-1"}


def test_merge_selection_rejects_non_rectangle():
    with pytest.raises(GridMergeError) as exc_info:
        merge_selection({"0-0", "0-1", "1-0"}, {}, [], column_count=4)
    assert exc_info.value.status_code == 400


def test_merge_selection_rejects_overlap_with_existing_region():
    existing = {"0-0": MergeInfo(row_span=1, col_span=2)}
    with pytest.raises(GridMergeError) as exc_info:
        merge_selection({"0-1", "0-2"}, existing, ["0-1"], column_count=4)
    assert exc_info.value.details["overlapping_anchors"] == ["0-0"]


def test_merge_selection_rejects_cells_outside_the_grid():
    with pytest.raises(GridMergeError) as exc_info:
        merge_selection({"0-1", "0-2"}, {}, [], column_count=2)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["outside_cells"] == ["0-2"]

    with pytest.raises(GridMergeError):
        merge_selection({"4-0", "5-0"}, {}, [], column_count=2)

    anchor, _, hidden, _ = merge_selection({"4-0", "4-1"}, {}, [], column_count=2)
    assert anchor == "4-0"
    assert hidden == {"4-1"}


def test_grid_endpoints(client):
    labels = client.post(
        "/api/v1/timetable/grid/time-labels",
        json={"columnCount": 2, "columnDurations": {"1": 90}, "defaultSlotDuration": 60},
    )
    assert labels.status_code == 200
    assert labels.json()["labels"] == ["8:00 AM - 9:00 AM", "9:00 AM - 10:30 AM"]

    check = client.post("/api/v1/timetable/grid/can-merge", json={"selectedCells": ["0-0", "0-1", "1-0", "1-1"]})
    assert check.json() == {"canMerge": True, "anchor": "0-0", "rowSpan": 2, "colSpan": 2}

    broken = client.post("/api/v1/timetable/grid/can-merge", json={"selectedCells": ["0-0", "0-1", "1-0"]})
    assert broken.json()["canMerge"] is False

    merged = client.post(
        "/api/v1/timetable/grid/merge",
        json={
            "selectedCells": ["1-1", "1-2"],
            "grid": {"columnCount": 4, "cellContents": {"1-2": {"text": "Chemistry"}}},
        },
    )
    assert merged.status_code == 200
    body = merged.json()
    assert body["anchor"] == "1-1"
    assert body["mergedCells"] == {"1-1": {"rowSpan": 1, "colSpan": 2}}
    assert body["hiddenCells"] == ["1-2"]
    assert body["displacedContents"]["1-2"]["text"] == "Chemistry"

    rejected = client.post(
        "/api/v1/timetable/grid/merge",
        json={"selectedCells": ["0-0", "1-1"], "grid": {"columnCount": 4}},
    )
    assert rejected.status_code == 400
    assert rejected.json()["message"].startswith("Selected cells must form")


def test_grid_rejects_malformed_keys(client):
    response = client.post("/api/v1/timetable/grid/can-merge", json={"selectedCells": ["a-b"]})
    assert response.status_code == 422

    negative = client.post(
        "/api/v1/timetable/grid/extract",
        json={"columnCount": 2, "columnDurations": {"0": -5}},
    )
    assert negative.status_code == 422


def test_grid_merge_endpoint_rejects_cells_outside_the_grid(client):
    response = client.post(
        "/api/v1/timetable/grid/merge",
        json={"selectedCells": ["7-10", "7-11"], "grid": {"columnCount": 2}},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Selected cells fall outside the grid"
    assert body["details"]["outside_cells"] == ["7-10", "7-11"]


def test_time_labels_wrap_past_midnight():
    assert time_labels(2, {}, 60, day_start=23 * 60) == [
        "11:00 PM - 12:00 AM",
        "12:00 AM - 1:00 AM",
    ]
