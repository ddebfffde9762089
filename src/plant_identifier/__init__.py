"""Plant Identifier - identify plants from photos or names using Plant.id, Groq and Wikipedia."""

__version__ = "1.0.0"

from .pipeline import identify, search, select_species, plant_details, PlantResult, SearchResult
from .parsing import parse_plant_record, SpeciesCandidate
from .facts import random_facts, Fact
from .config import Config

__all__ = [
    "identify",
    "search",
    "select_species",
    "plant_details",
    "PlantResult",
    "SearchResult",
    "parse_plant_record",
    "SpeciesCandidate",
    "random_facts",
    "Fact",
    "Config",
]
