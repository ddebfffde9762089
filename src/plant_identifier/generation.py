"""Plant descriptions and facts generated with Groq."""

import json
import logging
import re
from typing import Any, Dict, List

from groq import Groq, GroqError

from .config import Config
from .exceptions import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a botanist helping people identify plants and look after them.

Your communication style:
- Plain, accurate and concise
- Every answer uses the exact labels you are asked for, one "Label: value" per line
- No extra headings, tables or closing remarks
- If you are unsure about a detail, say so in the value rather than inventing one"""

DESCRIPTION_FIELDS = (
    "Common name",
    "Scientific name",
    "Family",
    "Description",
    "Flower characteristics",
    "Leaf characteristics",
    "Plant height",
    "Blooming season",
    "Sunlight requirements",
    "Water needs",
    "Soil type",
    "Growth rate",
    "Hardiness zones",
    "Native region",
    "Potential uses",
    "Care tips",
    "Interesting facts",
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def _labels(fields) -> str:
    return "\n".join(f"{field}:" for field in fields)


class PlantInfoGenerator:
    """Generator for labelled plant descriptions."""

    def __init__(self, api_key: str = None, model: str = None, client: Any = None):
        """Initialize generator.

        Args:
            api_key: Groq API key (defaults to Config.GROQ_API_KEY)
            model: Model name (defaults to Config.GROQ_MODEL)
            client: Pre-built chat client, mainly for tests
        """
        self.api_key = api_key or Config.GROQ_API_KEY
        self.model = model or Config.GROQ_MODEL
        if client is not None:
            self.client = client
        else:
            self.client = Groq(api_key=self.api_key) if self.api_key else None
        self.call_count = 0

    @property
    def configured(self) -> bool:
        return self.client is not None

    def complete(self, user_content: str) -> str:
        """Send one prompt and return the stripped reply text.

        Raises:
            GenerationError: Key missing or the API call failed
        """
        if not self.client:
            raise GenerationError("Groq API key is not set")

        self.call_count += 1
        try:
            response = self.client.chat.completions.create(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_content},
                ],
                model=self.model,
                max_completion_tokens=Config.GROQ_MAX_TOKENS,
                temperature=Config.GROQ_TEMPERATURE,
            )
        except GroqError as e:
            raise GenerationError(f"Groq request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip()

    def describe(self, term: str) -> str:
        """Labelled description of the plant named term."""
        return self.complete(
            f'Identify this plant "{term}" and provide the following information '
            f"in a structured format with labels:\n{_labels(DESCRIPTION_FIELDS)}"
        )

    def check_species(self, term: str) -> str:
        """Ask whether term covers several species.

        The reply either contains "No multiple species" or lists blank-line
        separated blocks with common name, scientific name and description.
        """
        return self.complete(
            f'Does the plant "{term}" have multiple species? If yes, list all species '
            "with their common names, scientific names, and a brief description in a "
            "structured format, one block per species separated by a blank line:\n"
            "Common name:\n"
            "Scientific name (by which they are available on wikipedia):\n"
            "Description:\n"
            'If no, just say "No multiple species".'
        )

    def species_details(self, common_name: str, scientific_name: str) -> str:
        """The remaining labelled fields for an already chosen species."""
        return self.complete(
            f'Provide the following additional information for the plant "{common_name}" '
            f"({scientific_name}) in a structured format with labels:\n"
            f"{_labels(DESCRIPTION_FIELDS[2:3] + DESCRIPTION_FIELDS[4:])}"
        )

    def plant_facts(self, count: int) -> List[Dict[str, str]]:
        """Generate count facts about specific plant species.

        Args:
            count: Number of facts to ask for

        Returns:
            List of {"plantName", "fact"} dicts; empty if the reply is not a JSON list
        """
        text = self.complete(
            f"Generate {count} unique plant facts. Each fact should be about a specific "
            "plant species (not a category or family). Include the plant's scientific "
            "name if possible. Focus on interesting features, uses, or characteristics "
            "of the plant. Output only a JSON array of objects with 'plantName' and "
            "'fact' keys."
        )
        try:
            data = json.loads(_FENCE_RE.sub("", text))
        except ValueError:
            logger.warning("Fact reply was not valid JSON: %.80s", text)
            return []

        if isinstance(data, dict):
            data = data.get("facts")
        if not isinstance(data, list):
            logger.warning("Unexpected fact reply format from model")
            return []

        return [
            {"plantName": str(item["plantName"]), "fact": str(item["fact"])}
            for item in data
            if isinstance(item, dict) and item.get("plantName") and item.get("fact")
        ]

    def get_stats(self) -> Dict[str, int]:
        """Get generator statistics.

        Returns:
            Dictionary with call_count
        """
        return {"call_count": self.call_count}
