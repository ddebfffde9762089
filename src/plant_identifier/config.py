"""Configuration management for Plant Identifier."""

import os
from typing import List


class Config:
    """Configuration settings for the identification service."""

    # API Keys
    PLANT_ID_API_KEY: str = os.environ.get("PLANT_ID_API_KEY", "")
    PLANT_ID_API_KEY_SECONDARY: str = os.environ.get("PLANT_ID_API_KEY_SECONDARY", "")
    GROQ_API_KEY: str = os.environ.get("GROQ_API_KEY", "")
    GOOGLE_TRANSLATE_API_KEY: str = os.environ.get("GOOGLE_TRANSLATE_API_KEY", "")

    # Plant.id Configuration
    PLANT_ID_URL: str = "https://api.plant.id/v2/identify"

    # Groq LLM Configuration
    GROQ_MODEL: str = os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile")
    GROQ_MAX_TOKENS: int = 1024
    GROQ_TEMPERATURE: float = 0.4

    # Wikipedia Configuration
    WIKIPEDIA_API_URL: str = "https://en.wikipedia.org/w/api.php"
    WIKIPEDIA_REST_URL: str = "https://en.wikipedia.org/api/rest_v1"
    WIKIPEDIA_WIKI_URL: str = "https://en.wikipedia.org/wiki/"
    WIKIPEDIA_SEARCH_URL: str = "https://en.wikipedia.org/w/index.php?search="
    USER_AGENT: str = os.environ.get(
        "PLANT_IDENTIFIER_USER_AGENT", "PlantIdentifier/1.0 (plant identification service)"
    )

    # Google Translate
    TRANSLATE_URL: str = "https://translation.googleapis.com/language/translate/v2"

    # HTTP
    HTTP_TIMEOUT: float = float(os.environ.get("PLANT_IDENTIFIER_HTTP_TIMEOUT", "30"))

    # Description retry loop
    DESCRIPTION_MAX_ATTEMPTS: int = 5
    DESCRIPTION_RETRY_DELAY: float = 1.0
    REQUIRED_FIELDS = ("Common name", "Scientific name", "Description")

    # Images
    MIN_IMAGE_WIDTH: int = 100
    MAX_ADDITIONAL_IMAGES: int = 10
    MAX_EXTRACT_PARAGRAPHS: int = 10
    SPECIES_PLACEHOLDER_IMAGE: str = "/placeholder-plant.jpg"
    FACT_PLACEHOLDER_IMAGE: str = "/placeholder-image.jpg"

    # Random facts
    FACT_ATTEMPTS: int = 3
    DEFAULT_FACT_COUNT: int = 5
    PLANT_CATEGORIES = (
        "Flowering_plants", "Trees", "Shrubs", "Herbs", "Vegetables", "Fruits",
        "Grasses", "Ferns", "Mosses", "Succulents", "Vines", "Aquatic_plants",
        "Conifers", "Palms", "Orchids", "Cacti", "Bamboos", "Bromeliads",
        "Carnivorous_plants", "Epiphytes", "Medicinal_plants", "Poisonous_plants",
        "Edible_plants", "Ornamental_plants", "Tropical_plants", "Desert_plants",
        "Alpine_plants", "Rainforest_plants", "Mangroves", "Seagrasses",
    )

    # Fan-out for per-species image lookups
    MAX_WORKERS: int = 8

    @classmethod
    def plant_id_keys(cls) -> List[str]:
        """Return the configured Plant.id keys, primary first."""
        return [k for k in (cls.PLANT_ID_API_KEY, cls.PLANT_ID_API_KEY_SECONDARY) if k]

    @classmethod
    def missing_keys(cls, require_plant_id: bool = True) -> List[str]:
        """Names of required environment variables that are not set."""
        missing = []
        if require_plant_id and not cls.plant_id_keys():
            missing.append("PLANT_ID_API_KEY")
        if not cls.GROQ_API_KEY:
            missing.append("GROQ_API_KEY")
        return missing

    @classmethod
    def validate(cls, require_plant_id: bool = True) -> bool:
        """Validate that required configuration is present.

        Args:
            require_plant_id: Whether a Plant.id key is needed (name search alone does not use one)
        """
        missing = cls.missing_keys(require_plant_id)
        if missing:
            raise ValueError(f"{', '.join(missing)} environment variable not set")
        return True
