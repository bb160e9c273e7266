from __future__ import annotations

from geosoft.core.exceptions import AIServiceError
from geosoft.services import gemini

SUPPORTED_LANGUAGES: list[dict[str, str]] = [
    {"code": "en", "name": "English"},
    {"code": "es", "name": "Spanish"},
    {"code": "fr", "name": "French"},
    {"code": "de", "name": "German"},
    {"code": "it", "name": "Italian"},
    {"code": "pt", "name": "Portuguese"},
    {"code": "nl", "name": "Dutch"},
    {"code": "ru", "name": "Russian"},
    {"code": "ja", "name": "Japanese"},
    {"code": "ko", "name": "Korean"},
    {"code": "zh", "name": "Chinese"},
    {"code": "ar", "name": "Arabic"},
    {"code": "hi", "name": "Hindi"},
    {"code": "tr", "name": "Turkish"},
    {"code": "pl", "name": "Polish"},
    {"code": "uk", "name": "Ukrainian"},
    {"code": "vi", "name": "Vietnamese"},
    {"code": "th", "name": "Thai"},
    {"code": "id", "name": "Indonesian"},
    {"code": "ms", "name": "Malay"},
]

_NAMES_BY_CODE = {item["code"]: item["name"] for item in SUPPORTED_LANGUAGES}


def language_name(code: str) -> str:
    return _NAMES_BY_CODE.get(code, code)


def translate(text: str, source_language: str, target_language: str, *, api_key: str) -> str:
    prompt = (
        f"Translate the following text from {language_name(source_language)} to {language_name(target_language)}. "
        "Only return the translated text, nothing else.\n\n"
        f'Text to translate: "{text}"'
    )
    translated = gemini.generate_text(prompt, api_key=api_key)
    if not translated:
        raise AIServiceError("Failed to generate translation")
    return translated.strip()


def detect_language(text: str, *, api_key: str) -> str:
    prompt = (
        "Detect the language of the following text. "
        'Return only the ISO 639-1 language code (e.g., "en", "es", "fr").\n\n'
        f'Text: "{text}"'
    )
    detected = gemini.generate_text(prompt, api_key=api_key)
    if not detected:
        raise AIServiceError("Failed to detect language")
    code = detected.strip().lower()
    return code if code in _NAMES_BY_CODE else "unknown"


def get_supported_languages() -> list[dict[str, str]]:
    return [dict(item) for item in SUPPORTED_LANGUAGES]
