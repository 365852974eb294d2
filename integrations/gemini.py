"""
Google Gemini integration for generating marketing text.

Calls the generateContent REST endpoint and returns the plain text of the
first candidate.
"""

from typing import Optional

import requests
import structlog

from config import settings

logger = structlog.get_logger(__name__)


GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiError(Exception):
    """Gemini API error."""
    pass


def generate_text(
    prompt: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    temperature: float = 0.8,
    timeout: float = 30
) -> str:
    """
    Generate text from a prompt.

    Args:
        prompt: Full prompt text
        api_key: Overrides GEMINI_API_KEY
        model: Overrides GEMINI_MODEL
        temperature: Sampling temperature

    Returns:
        Generated text

    Raises:
        GeminiError: Not configured, request failed or no content returned
    """
    api_key = api_key or settings.gemini_api_key
    model = model or settings.gemini_model

    if not api_key:
        raise GeminiError("Gemini API key not configured")

    url = f"{GEMINI_API_BASE}/{model}:generateContent"
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": temperature},
    }

    try:
        logger.info("gemini_request", model=model, prompt_chars=len(prompt))

        response = requests.post(
            url,
            params={"key": api_key},
            json=payload,
            timeout=timeout
        )
        response.raise_for_status()
        result = response.json()

    except requests.RequestException as e:
        logger.error("gemini_request_failed", model=model, error=str(e))
        raise GeminiError(f"Gemini request failed: {e}") from e
    except ValueError as e:
        raise GeminiError("Gemini returned invalid JSON") from e

    try:
        parts = result["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts).strip()
    except (KeyError, IndexError, TypeError):
        text = ""

    if not text:
        raise GeminiError("Invalid response from Gemini API - no content generated")

    logger.info("gemini_response", model=model, chars=len(text))
    return text
