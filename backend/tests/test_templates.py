import pytest
from pydantic import ValidationError

from geosoft.schemas.timetable import CellContent, GridState, MergeInfo, TimetableDatabase, TimetableTemplate
from geosoft.services.templates import (
    apply_template,
    extract_timetable,
    get_template,
    list_templates,
    persist_template,
    remove_template,
    save_as_template,
    save_grid_as_template,
)


def _sample_grid() -> GridState:
    return GridState(
        column_count=3,
        column_durations={1: 30},
        default_slot_duration=60,
        cell_contents={
            "0-0": CellContent(text="Maths", is_vertical=True, alignment="left", class_name="jss1"),
            "1-2": CellContent(text="Break", background_color="#ffeeaa"),
            "2-1": CellContent(text=""),
        },
        merged_cells={"3-0": MergeInfo(row_span=1, col_span=2)},
        hidden_cells=["3-1"],
    )


def test_extract_timetable_is_row_major_and_skips_hidden():
    grid = _sample_grid()
    entries = extract_timetable(
        grid.cell_contents,
        grid.hidden_cells,
        grid.column_count,
        grid.column_durations,
        grid.default_slot_duration,
    )

    assert len(entries) == 5 * 3 - 1
    assert [entry.cell_key for entry in entries[:4]] == ["0-0", "0-1", "0-2", "1-0"]
    assert "3-1" not in {entry.cell_key for entry in entries}

    first = entries[0]
    assert first.day == "Monday"
    assert first.time_slot == "8:00 AM - 9:00 AM"
    assert first.custom_text == "Maths"
    assert first.is_vertical is True
    assert first.alignment == "left"

    empty = next(entry for entry in entries if entry.cell_key == "0-1")
    assert empty.time_slot == "9:00 AM - 9:30 AM"
    assert empty.custom_text is None
    assert empty.is_vertical is None

    assert entries[-1].day == "Friday"


def test_save_as_template_copies_layout():
    grid = _sample_grid()
    template = save_as_template(
        "Term 1",
        grid.cell_contents,
        grid.merged_cells,
        ["3-1", "3-1"],
        grid.column_count,
        grid.column_durations,
        grid.default_slot_duration,
        description="First term",
    )

    assert template.id
    assert template.created_at
    assert template.description == "First term"
    assert template.hidden_cells_array == ["3-1"]
    assert template.merged_cells_data == {"3-0": MergeInfo(row_span=1, col_span=2)}
    assert template.column_durations == {1: 30}
    assert len(template.entries) == 14

    other = save_grid_as_template("Term 1", grid)
    assert other.id != template.id


def test_apply_template_restores_text_and_layout():
    grid = _sample_grid()
    restored = apply_template(save_grid_as_template("Term 1", grid))

    assert restored.column_count == grid.column_count
    assert restored.column_durations == grid.column_durations
    assert restored.default_slot_duration == grid.default_slot_duration
    assert restored.merged_cells == grid.merged_cells
    assert restored.hidden_cells == grid.hidden_cells

    maths = restored.cell_contents["0-0"]
    assert maths.text == "Maths"
    assert maths.is_vertical is True
    assert maths.alignment == "left"


def test_apply_template_round_trip_is_lossy_for_empty_cells_and_colours():
    restored = apply_template(save_grid_as_template("Term 1", _sample_grid()))

    assert "2-1" not in restored.cell_contents
    assert restored.cell_contents["1-2"].text == "Break"
    assert restored.cell_contents["1-2"].background_color is None
    assert restored.cell_contents["1-2"].alignment == "center"


def test_persist_template_replaces_by_id():
    database = TimetableDatabase()
    template = save_grid_as_template("Term 1", _sample_grid())

    database = persist_template(template, database)
    database = persist_template(template, database)
    assert [item.id for item in list_templates(database)] == [template.id]

    renamed = template.model_copy(update={"name": "Term 1 (final)"})
    second = save_grid_as_template("Term 2", _sample_grid())
    database = persist_template(second, database)
    database = persist_template(renamed, database)

    assert [item.name for item in list_templates(database)] == ["Term 1 (final)", "Term 2"]
    assert get_template(template.id, database).name == "Term 1 (final)"


def test_remove_template_is_a_noop_for_unknown_ids():
    template = save_grid_as_template("Term 1", _sample_grid())
    database = persist_template(template, TimetableDatabase())

    assert remove_template("missing", database).templates == database.templates
    assert remove_template(template.id, database).templates == []
    assert get_template("missing", database) is None


@pytest.mark.parametrize("column_count", [1, 4, 12])
def test_extract_without_hidden_cells_yields_every_cell_in_row_major_order(column_count):
    entries = extract_timetable({}, [], column_count, {}, 60)

    assert len(entries) == 5 * column_count
    assert [(entry.row, entry.col) for entry in entries] == [
        (row, col) for row in range(5) for col in range(column_count)
    ]


def test_apply_template_round_trip_with_every_cell_formatted():
    contents = {}
    for row in range(5):
        for col in range(4):
            text = "" if (row + col) % 3 == 0 else f"Lesson {row}.{col}"
            contents[f"{row}-{col}"] = CellContent(
                text=text,
                is_vertical=True,
                alignment="right",
                background_color="#c0ffee",
            )
    grid = GridState(column_count=4, default_slot_duration=45, cell_contents=contents)

    restored = apply_template(save_grid_as_template("Formatted", grid))

    non_empty = {key for key, content in contents.items() if content.text}
    assert set(restored.cell_contents) == non_empty
    for key in non_empty:
        assert restored.cell_contents[key].text == contents[key].text
        assert restored.cell_contents[key].is_vertical is True
        assert restored.cell_contents[key].alignment == "right"


@pytest.mark.parametrize(
    "override",
    [
        {"columnCount": 60},
        {"defaultSlotDuration": 0},
        {"columnDurations": {0: 0}},
        {"hiddenCellsArray": ["0:1"]},
        {"mergedCellsData": {"first": {"rowSpan": 1, "colSpan": 2}}},
    ],
)
def test_template_rejects_layouts_grid_state_cannot_hold(override):
    with pytest.raises(ValidationError):
        TimetableTemplate.model_validate(
            {"id": "t", "name": "wide", "columnCount": 4, "defaultSlotDuration": 30, **override}
        )


def test_every_valid_template_can_be_applied():
    template = TimetableTemplate(
        id="t",
        name="widest",
        columnCount=48,
        defaultSlotDuration=30,
        columnDurations={0: 15},
        hiddenCellsArray=["0-1"],
        mergedCellsData={"0-0": {"rowSpan": 1, "colSpan": 2}},
    )
    grid = apply_template(template)
    assert grid.column_count == 48
    assert grid.hidden_cells == ["0-1"]
