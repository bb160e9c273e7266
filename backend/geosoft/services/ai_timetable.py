from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import json
import logging

from geosoft.core.exceptions import AIResponseFormatError
from geosoft.schemas.timetable import CellContent, Course, GridState, TimetableReferenceData, Tutor
from geosoft.services import gemini
from geosoft.services.grid import DAY_LABELS, cell_key, time_labels

logger = logging.getLogger(__name__)

DEFAULT_MAX_PERIODS_PER_DAY = 3


@dataclass(frozen=True)
class ScheduleSuggestion:
    day: int
    slot: int
    subject_id: str


@dataclass
class ScheduleFillResult:
    cell_contents: dict[str, CellContent]
    filled_cells: list[str] = field(default_factory=list)
    discarded: int = 0


def resolve_candidates(
    reference: TimetableReferenceData,
    session_id: str | None,
) -> tuple[list[Course], str]:
    """Return the subjects the filler may place and the session name ("" when unfiltered)."""
    if session_id:
        session = next((item for item in reference.sessions if item.id == session_id), None)
        if session is not None:
            wanted = set(session.subjects)
            return [course for course in reference.courses if course.id in wanted], session.name
    return list(reference.courses), ""


def collect_blocked_slots(
    cell_contents: Mapping[str, CellContent],
    hidden_cells: Iterable[str],
    column_count: int,
    *,
    row_count: int = len(DAY_LABELS),
) -> list[str]:
    hidden = set(hidden_cells)
    blocked: list[str] = []
    for row in range(row_count):
        for col in range(column_count):
            key = cell_key(row, col)
            if key in hidden:
                blocked.append(key)
                continue
            content = cell_contents.get(key)
            if content is not None and content.text:
                blocked.append(key)
    return blocked


def _tutor_name(tutors: list[Tutor], tutor_id: str) -> str | None:
    tutor = next((item for item in tutors if item.id == tutor_id), None)
    return tutor.name if tutor is not None else None


def build_schedule_prompt(
    *,
    labels: list[str],
    subjects: list[Course],
    tutors: list[Tutor],
    blocked_slots: list[str],
    column_count: int,
    day_labels: tuple[str, ...] = DAY_LABELS,
) -> str:
    slot_lines = "\n".join(f"Slot {index}: {label}" for index, label in enumerate(labels))
    day_lines = "\n".join(f"Day {index}: {day}" for index, day in enumerate(day_labels))
    subject_lines = "\n".join(
        f"- {subject.name} (ID: {subject.id}): {subject.periods_per_week} periods/week, "
        f"Priority: {subject.priority.value}, Teacher: {_tutor_name(tutors, subject.teacher_id) or 'Unknown'}"
        for subject in subjects
    )
    tutor_lines = "\n".join(
        f"- {tutor.name} (ID: {tutor.id}): Max {tutor.max_periods_per_day or DEFAULT_MAX_PERIODS_PER_DAY} periods/day"
        + (f", Unavailable: {', '.join(tutor.unavailable_slots)}" if tutor.unavailable_slots else "")
        for tutor in tutors
    )
    blocked_line = ", ".join(blocked_slots) if blocked_slots else "None"

    return f"""You are an expert timetable scheduler. Generate an optimal weekly timetable based on the following constraints:

**Time Slots:**
{slot_lines}

**Days:**
{day_lines}

**Subjects:**
{subject_lines}

**Teachers:**
{tutor_lines}

**Blocked Slots (already occupied or breaks):**
{blocked_line}

**Constraints:**
1. Each subject must be scheduled for exactly the specified periods per week
2. Teachers cannot exceed their max periods per day
3. Avoid scheduling teachers in their unavailable slots
4. High priority subjects should get better time slots (morning preferred)
5. Distribute subjects evenly across the week
6. Avoid consecutive periods for the same subject when possible
7. Do not use blocked slots

**Output Format:**
Return ONLY a valid JSON array with this exact structure (no markdown, no explanation):
[
  {{"day": 0, "slot": 0, "subjectId": "subject-id"}},
  {{"day": 1, "slot": 2, "subjectId": "subject-id"}}
]

Where:
- day: 0-{len(day_labels) - 1} ({day_labels[0]} to {day_labels[-1]})
- slot: 0-{column_count - 1}
- subjectId: the ID of the subject to schedule

Generate the optimal timetable now:"""


def extract_json_span(text: str) -> str:
    """Return the text from the first '[' to the last ']'."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        logger.error("Failed to parse AI response: %s", text)
        raise AIResponseFormatError("No JSON array found in response")
    return text[start : end + 1]


def parse_schedule(span: str) -> list[ScheduleSuggestion]:
    try:
        raw = json.loads(span)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse AI response: %s", span)
        raise AIResponseFormatError(f"Response is not valid JSON: {exc.msg}") from exc
    if not isinstance(raw, list):
        raise AIResponseFormatError("Response JSON is not an array")
    if not raw:
        raise AIResponseFormatError("Response array is empty")

    suggestions: list[ScheduleSuggestion] = []
    for item in raw:
        if not isinstance(item, dict):
            logger.warning("Invalid schedule entry: %r", item)
            continue
        try:
            suggestions.append(
                ScheduleSuggestion(day=int(item["day"]), slot=int(item["slot"]), subject_id=str(item["subjectId"]))
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Invalid schedule entry: %r", item)
    return suggestions


def reconcile_schedule(
    suggestions: Iterable[ScheduleSuggestion],
    *,
    existing: Mapping[str, CellContent],
    blocked_slots: Iterable[str],
    subjects: list[Course],
    tutors: list[Tutor],
    column_count: int,
    session_id: str | None = None,
    session_name: str = "",
    row_count: int = len(DAY_LABELS),
) -> ScheduleFillResult:
    """Merge valid suggestions into a copy of ``existing``.

    Entries out of range, on a blocked cell or naming an unknown subject are
    dropped and logged; this never raises per entry.
    """
    blocked = set(blocked_slots)
    subjects_by_id = {subject.id: subject for subject in subjects}
    result = ScheduleFillResult(cell_contents=dict(existing))

    for suggestion in suggestions:
        if not (0 <= suggestion.day < row_count and 0 <= suggestion.slot < column_count):
            logger.warning("Invalid schedule entry: day=%s, slot=%s", suggestion.day, suggestion.slot)
            result.discarded += 1
            continue

        key = cell_key(suggestion.day, suggestion.slot)
        if key in blocked:
            logger.info("Skipping blocked slot %s", key)
            result.discarded += 1
            continue

        subject = subjects_by_id.get(suggestion.subject_id)
        if subject is None:
            logger.warning("Subject not found: %s", suggestion.subject_id)
            result.discarded += 1
            continue

        teacher_name = _tutor_name(tutors, subject.teacher_id)
        text = f"{subject.name}\n({teacher_name})" if teacher_name else subject.name
        if session_name:
            text = f"{text}\n({session_name})"

        result.cell_contents[key] = CellContent(
            text=text,
            is_vertical=False,
            alignment="center",
            class_name=session_id,
        )
        if key not in result.filled_cells:
            result.filled_cells.append(key)

    return result


def generate_ai_timetable(
    *,
    api_key: str | None,
    reference: TimetableReferenceData,
    grid: GridState,
    session_id: str | None = None,
    model: str | None = None,
) -> ScheduleFillResult:
    """Ask the model to fill free cells and reconcile its answer against the grid."""
    subjects, session_name = resolve_candidates(reference, session_id)
    labels = time_labels(grid.column_count, grid.column_durations, grid.default_slot_duration)
    blocked = collect_blocked_slots(grid.cell_contents, grid.hidden_cells, grid.column_count)
    # Workspace-level breaks are blocked even when the grid cell is still empty.
    blocked += [key for key in reference.blocked_slots if key not in blocked]

    prompt = build_schedule_prompt(
        labels=labels,
        subjects=subjects,
        tutors=reference.tutors,
        blocked_slots=blocked,
        column_count=grid.column_count,
    )
    text = gemini.generate_text(prompt, api_key=api_key, model=model)

    suggestions = parse_schedule(extract_json_span(text))
    return reconcile_schedule(
        suggestions,
        existing=grid.cell_contents,
        blocked_slots=blocked,
        subjects=subjects,
        tutors=reference.tutors,
        column_count=grid.column_count,
        session_id=session_id,
        session_name=session_name,
    )
