"""Google Translate pass-through."""

import logging

import requests

from .config import Config

logger = logging.getLogger(__name__)


def translate_text(
    text: str,
    target_language: str,
    api_key: str = None,
    session: requests.Session = None,
) -> str:
    """Translate text, returning it unchanged on any failure.

    Args:
        text: Text to translate
        target_language: Target language code, e.g. "fr"
        api_key: Google API key (defaults to Config.GOOGLE_TRANSLATE_API_KEY)
        session: HTTP session to use

    Returns:
        Translated text, or the original text
    """
    api_key = api_key or Config.GOOGLE_TRANSLATE_API_KEY
    if not api_key:
        logger.warning("Translation skipped: GOOGLE_TRANSLATE_API_KEY not set")
        return text

    http = session or requests
    try:
        resp = http.post(
            Config.TRANSLATE_URL,
            params={"key": api_key},
            json={"q": text, "target": target_language},
            timeout=Config.HTTP_TIMEOUT,
        )
        resp.raise_for_status()
        return resp.json()["data"]["translations"][0]["translatedText"]
    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning("Error translating text: %s", e)
        return text
