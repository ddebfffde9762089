"""Plant.id client with secondary-key fallback."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .exceptions import IdentificationError

logger = logging.getLogger(__name__)


@dataclass
class Identification:
    """Top recognition suggestion."""

    name: str
    confidence: Optional[float] = None


def top_suggestion(payload: Dict[str, Any]) -> Optional[Identification]:
    """Pick the first suggestion out of a Plant.id v2 response."""
    if not isinstance(payload, dict):
        return None

    suggestions = payload.get("suggestions") or []
    if not suggestions or not isinstance(suggestions[0], dict):
        return None

    best = suggestions[0]
    name = best.get("plant_name") or (best.get("plant_details") or {}).get("scientific_name")
    if not name:
        return None

    probability = best.get("probability")
    return Identification(
        name=name,
        confidence=float(probability) if probability is not None else None,
    )


class PlantIdClient:
    """Client for the Plant.id identify endpoint."""

    def __init__(
        self,
        api_keys: List[str] = None,
        url: str = None,
        session: requests.Session = None,
        timeout: float = None,
    ):
        """Initialize Plant.id client.

        Args:
            api_keys: Keys to try in order (defaults to Config.plant_id_keys())
            url: Identify endpoint (defaults to Config.PLANT_ID_URL)
            session: HTTP session (a new requests.Session if omitted)
            timeout: Per-request timeout in seconds
        """
        self.api_keys = list(api_keys) if api_keys is not None else Config.plant_id_keys()
        self.url = url or Config.PLANT_ID_URL
        self.session = session or requests.Session()
        self.timeout = timeout or Config.HTTP_TIMEOUT

        self.api_calls = 0
        self.fallbacks = 0

    @property
    def configured(self) -> bool:
        return bool(self.api_keys)

    def _post(
        self, api_key: str, image: bytes, filename: str, content_type: str
    ) -> Dict[str, Any]:
        self.api_calls += 1
        resp = self.session.post(
            self.url,
            headers={"Api-Key": api_key},
            files={"images": (filename, image, content_type)},
            timeout=self.timeout,
        )
        if not resp.ok:
            raise IdentificationError(
                f"Plant.id responded {resp.status_code} {resp.reason}"
            )
        return resp.json()

    def identify(
        self,
        image: bytes,
        filename: str = "upload.jpg",
        content_type: str = "image/jpeg",
    ) -> Dict[str, Any]:
        """Identify a plant image.

        The primary key is tried first; if that request raises or returns a
        non-success status, the secondary key is tried once.

        Args:
            image: Raw image bytes
            filename: File name sent with the multipart upload
            content_type: MIME type of the image

        Returns:
            Plant.id JSON response, unmodified

        Raises:
            IdentificationError: No key configured, or every key failed
        """
        if not self.api_keys:
            raise IdentificationError("Plant.id API key not configured")

        last_error = None
        for index, api_key in enumerate(self.api_keys):
            if index:
                self.fallbacks += 1
                logger.warning("Retrying Plant.id with secondary key")
            try:
                return self._post(api_key, image, filename, content_type)
            except (requests.RequestException, ValueError, IdentificationError) as e:
                logger.warning("Plant.id request failed: %s", e)
                last_error = e

        raise IdentificationError("Failed to identify plant") from last_error

    def get_stats(self) -> Dict[str, int]:
        return {"api_calls": self.api_calls, "fallbacks": self.fallbacks}
