"""Thin client for the Gemini REST API with retry on overload."""
import base64
import logging
import time

import requests
from flask import current_app

from lp_builder.domain.ai_costs import IMAGE_MODEL, TEXT_MODEL
from lp_builder.errors import ServiceUnavailable
from lp_builder.utils.encryption import decrypt

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta"
RETRYABLE_STATUSES = {429, 503}
REQUEST_TIMEOUT = 120


class GeminiError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def fetch_with_retry(method, url, max_retries=3, initial_delay=2.0, **kwargs):
    """
    Send a request, retrying on 429/503 and network errors with
    exponential backoff (initial_delay * 2 ** (attempt - 1) seconds).

    Any other non-2xx status raises GeminiError immediately.
    """
    kwargs.setdefault("timeout", REQUEST_TIMEOUT)
    last_error = None

    for attempt in range(1, max_retries + 1):
        logger.info("Gemini attempt %d/%d", attempt, max_retries)
        try:
            response = requests.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.error("Gemini attempt %d network error: %s", attempt, exc)
            last_error = exc
        else:
            if response.ok:
                logger.info("Gemini success on attempt %d", attempt)
                return response

            if response.status_code not in RETRYABLE_STATUSES:
                logger.error("Gemini API error %d: %s", response.status_code, response.text)
                raise GeminiError(
                    f"Gemini API error: {response.status_code} - {response.text}",
                    status_code=response.status_code,
                )

            logger.warning(
                "Gemini attempt %d failed with %d: %s",
                attempt, response.status_code, response.text,
            )
            last_error = GeminiError(
                f"Gemini API error: {response.status_code}",
                status_code=response.status_code,
            )

        if attempt < max_retries:
            wait = initial_delay * 2 ** (attempt - 1)
            logger.info("Retrying Gemini in %.1fs", wait)
            time.sleep(wait)

    raise last_error or GeminiError("Gemini API request failed after retries")


def resolve_api_key(user_settings=None):
    """
    Return (api_key, uses_own_key). The caller's own key wins over the
    platform key; with neither configured the service is unavailable.
    """
    if user_settings is not None and user_settings.google_api_key:
        return decrypt(user_settings.google_api_key), True

    platform_key = current_app.config.get("GOOGLE_GENERATIVE_AI_API_KEY")
    if platform_key:
        return platform_key, False

    raise ServiceUnavailable("Google API key is not configured")


def _generate_content(model, payload, api_key):
    try:
        response = fetch_with_retry(
            "POST",
            f"{API_BASE}/models/{model}:generateContent",
            max_retries=current_app.config["GEMINI_MAX_RETRIES"],
            initial_delay=current_app.config["GEMINI_INITIAL_DELAY"],
            params={"key": api_key},
            json=payload,
        )
    except requests.RequestException as exc:
        raise GeminiError(f"Gemini request failed: {exc}") from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise GeminiError("Gemini returned a non-JSON response") from exc
    if not isinstance(data, dict):
        raise GeminiError("Gemini returned an unexpected response")

    candidates = data.get("candidates") or []
    if not candidates:
        raise GeminiError("Gemini returned no candidates")

    return data, candidates[0].get("content", {}).get("parts", [])


def generate_text(prompt, model=TEXT_MODEL, api_key=None):
    """Returns (text, usage) where usage holds token counts when reported."""
    data, parts = _generate_content(
        model,
        {"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
        api_key,
    )
    text = "".join(part.get("text", "") for part in parts)
    if not text:
        raise GeminiError("Gemini returned an empty response")

    meta = data.get("usageMetadata") or {}
    usage = {
        "input_tokens": meta.get("promptTokenCount"),
        "output_tokens": meta.get("candidatesTokenCount"),
    }
    return text, usage


def generate_image(prompt, aspect_ratio="1:1", api_key=None, model=IMAGE_MODEL):
    """Returns (image_bytes, mime_type)."""
    _, parts = _generate_content(
        model,
        {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseModalities": ["TEXT", "IMAGE"],
                "imageConfig": {"aspectRatio": aspect_ratio},
            },
        },
        api_key,
    )

    for part in parts:
        inline = part.get("inlineData")
        if inline and inline.get("data"):
            return base64.b64decode(inline["data"]), inline.get("mimeType", "image/png")

    raise GeminiError("Gemini returned no image data")
