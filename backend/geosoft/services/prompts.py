from __future__ import annotations

from geosoft.core.config import get_settings
from geosoft.core.exceptions import MissingAPIKeyError
from geosoft.models.user import AppSource

APP_INSTRUCTIONS: dict[AppSource, str] = {
    AppSource.timetablely: (
        "You are the assistant inside Timetablely, a weekly school timetable builder. "
        "Help users organise subjects, teachers, classes and time slots. "
        "Prefer concise, practical answers and respect breaks and teacher availability."
    ),
    AppSource.docxiq: (
        "You are the assistant inside DocxIQ, a document and equation helper. "
        "Help users write, translate and reason about academic documents and mathematics. "
        "Use precise notation and explain steps when asked."
    ),
    AppSource.linkshyft: (
        "You are the assistant inside LinkShyft, a link management tool. "
        "Help users name, describe and organise links and campaigns. "
        "Keep suggestions short and URL-safe."
    ),
}

APP_CONTEXT: dict[AppSource, str] = {
    AppSource.timetablely: (
        "Timetables are grids of five weekdays (Monday to Friday) by configurable time columns. "
        "Cells can be merged and carry subject, teacher and class names."
    ),
    AppSource.docxiq: (
        "Documents may contain equations in LaTeX, MathML, AsciiMath, Unicode math or plain text, "
        "and text in any of the supported translation languages."
    ),
    AppSource.linkshyft: "Links have a destination URL, an optional custom slug and optional tags.",
}

APP_CAPABILITIES: dict[AppSource, list[str]] = {
    AppSource.timetablely: [
        "Suggest subject placements for free slots",
        "Explain scheduling conflicts",
        "Propose break and period layouts",
    ],
    AppSource.docxiq: [
        "Parse, convert, solve, simplify and validate equations",
        "Translate text and detect languages",
        "Summarise and restructure documents",
    ],
    AppSource.linkshyft: [
        "Suggest memorable slugs",
        "Write link descriptions",
        "Group links into campaigns",
    ],
}


def get_app_instructions(app_type: AppSource) -> str:
    return APP_INSTRUCTIONS[app_type]


def get_app_context(app_type: AppSource) -> str:
    return APP_CONTEXT[app_type]


def get_app_capabilities(app_type: AppSource) -> list[str]:
    return list(APP_CAPABILITIES[app_type])


def get_app_api_key(app_type: AppSource) -> str:
    settings = get_settings()
    per_app = {
        AppSource.timetablely: settings.timetablely_gemini_api_key,
        AppSource.docxiq: settings.docxiq_gemini_api_key,
        AppSource.linkshyft: settings.linkshyft_gemini_api_key,
    }
    api_key = per_app[app_type] or settings.gemini_api_key
    if not api_key:
        raise MissingAPIKeyError(f"No Gemini API key configured for {app_type.value}")
    return api_key


def build_prompt(
    *,
    app_type: AppSource,
    user_prompt: str,
    additional_context: str | None = None,
    include_capabilities: bool = False,
) -> str:
    sections = [
        get_app_instructions(app_type),
        f"Context:\n{get_app_context(app_type)}",
    ]
    if include_capabilities:
        capabilities = "\n".join(f"- {item}" for item in get_app_capabilities(app_type))
        sections.append(f"Capabilities:\n{capabilities}")
    if additional_context:
        sections.append(f"Additional context:\n{additional_context.strip()}")
    sections.append(f"User request:\n{user_prompt.strip()}")
    return "\n\n".join(sections)
