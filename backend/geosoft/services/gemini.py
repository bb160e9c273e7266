from __future__ import annotations

import logging

from google import genai
from google.genai import errors as genai_errors

from geosoft.core.config import get_settings
from geosoft.core.exceptions import MissingAPIKeyError, UpstreamModelError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "Rate limit exceeded. Please wait a moment and try again. Free tier has limited requests per minute."
)
MODEL_UNAVAILABLE_MESSAGE = "Model not available. Please check your API key or try again later."
INVALID_KEY_MESSAGE = "Invalid API key. Please check your API key and try again."


def friendly_model_error(message: str) -> tuple[str, int] | None:
    """Map a raw upstream error message to user-facing text and an HTTP status.

    Returns None when the failure is not one we recognise.
    """
    if "429" in message or "quota" in message:
        return RATE_LIMIT_MESSAGE, 429
    if "404" in message or "not found" in message:
        return MODEL_UNAVAILABLE_MESSAGE, 502
    if "401" in message or "API key" in message:
        return INVALID_KEY_MESSAGE, 502
    return None


def generate_text(prompt: str, *, api_key: str | None, model: str | None = None) -> str:
    """Send one prompt to Gemini and return the completion text ("" when empty)."""
    if not api_key:
        raise MissingAPIKeyError()

    settings = get_settings()
    client = genai.Client(api_key=api_key, http_options={"timeout": settings.gemini_timeout_ms})
    try:
        response = client.models.generate_content(
            model=model or settings.gemini_model,
            contents=prompt,
        )
    except genai_errors.APIError as exc:
        logger.exception("Gemini request failed")
        friendly = friendly_model_error(str(exc))
        if friendly is None:
            raise
        message, status_code = friendly
        raise UpstreamModelError(message, status_code=status_code, details={"upstream": str(exc)}) from exc
    return response.text or ""
