"""Identify and search pipelines."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import Config
from .exceptions import GenerationError, IdentificationError
from .generation import PlantInfoGenerator
from .parsing import (
    SpeciesCandidate,
    clean_scientific_name,
    display_fields,
    has_required_fields,
    mentions_single_species,
    parse_plant_record,
    parse_species_blocks,
)
from .plant_id import Identification, PlantIdClient, top_suggestion
from .wikipedia import WikipediaClient

logger = logging.getLogger(__name__)

# User-facing error messages
ERROR_IDENTIFY_FAILED = "Failed to identify plant"
ERROR_NO_SUGGESTION = "The image could not be matched to any plant."
ERROR_EMPTY_TERM = "Please enter a plant name."
ERROR_INCOMPLETE = (
    "Unable to fetch plant information. "
    "Please try again later or search with the scientific name."
)
ERROR_SEARCH = "An error occurred while searching for the plant: {}"
ERROR_DETAILS = "An error occurred while fetching plant details."

_HEADLINE_KEYS = ("Common name", "Scientific name", "Description", "imageUrl")


@dataclass
class PlantResult:
    """A single described plant, or the reason there is none."""

    error: Optional[str] = None
    info: str = ""
    record: Dict[str, str] = field(default_factory=dict)
    image_url: Optional[str] = None
    identification: Optional[Identification] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.error}
        if self.error is None:
            data.update(display_fields(self.record))
            data.update(info=self.info, record=self.record, image_url=self.image_url)
        if self.identification is not None:
            data["identification"] = {
                "name": self.identification.name,
                "confidence": self.identification.confidence,
            }
        return data


@dataclass
class SearchResult:
    """Outcome of a name search: one plant, several species, or an error."""

    error: Optional[str] = None
    plant: Optional[PlantResult] = None
    species: List[SpeciesCandidate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "plant": self.plant.to_dict() if self.plant else None,
            "species": [s.to_dict() for s in self.species],
        }


@dataclass
class PlantDetails:
    """Everything the details page shows for a record."""

    record: Dict[str, str]
    main_image_url: str
    additional_images: List[str] = field(default_factory=list)
    extract: str = ""

    def to_dict(self) -> Dict[str, Any]:
        attributes = {k: v for k, v in self.record.items() if k not in _HEADLINE_KEYS}
        return {
            **display_fields(self.record),
            "main_image_url": self.main_image_url,
            "additional_images": self.additional_images,
            "extract": self.extract,
            "attributes": attributes,
        }


def fetch_complete_description(
    generator: PlantInfoGenerator,
    term: str,
    max_attempts: int = None,
    delay: float = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[str]:
    """Ask for a description until it has every required label.

    Args:
        generator: Text generator
        term: Plant name to describe
        max_attempts: Number of generator calls before giving up
        delay: Fixed pause in seconds between attempts
        sleep: Sleep function, replaceable in tests

    Returns:
        The first complete description, or None after max_attempts
    """
    if max_attempts is None:
        max_attempts = Config.DESCRIPTION_MAX_ATTEMPTS
    if delay is None:
        delay = Config.DESCRIPTION_RETRY_DELAY

    for attempt in range(1, max_attempts + 1):
        text = generator.describe(term)
        if has_required_fields(parse_plant_record(text)):
            return text

        logger.info("Incomplete description for %r (attempt %d/%d)", term, attempt, max_attempts)
        if attempt < max_attempts:
            sleep(delay)

    return None


def _described_plant(text: str, wiki: WikipediaClient) -> PlantResult:
    record = parse_plant_record(text)
    scientific_name = record.get("Scientific name")
    image_url = wiki.resolve_image(scientific_name) if scientific_name else None
    return PlantResult(info=text, record=record, image_url=image_url)


def resolve_species_images(
    species: List[SpeciesCandidate],
    wiki: WikipediaClient,
    max_workers: int = None,
) -> List[SpeciesCandidate]:
    """Fill in image_url for every candidate, looking them up in parallel."""
    if not species:
        return species

    workers = min(max_workers or Config.MAX_WORKERS, len(species))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        images = pool.map(
            lambda s: wiki.resolve_species_image(s.scientific_name, s.common_name),
            species,
        )
        for candidate, image_url in zip(species, images):
            candidate.image_url = image_url
    return species


def check_multiple_species(
    term: str,
    generator: Optional[PlantInfoGenerator] = None,
    wiki: Optional[WikipediaClient] = None,
) -> List[SpeciesCandidate]:
    """Species covered by term, with images; empty when there is only one."""
    generator = generator or PlantInfoGenerator()
    wiki = wiki or WikipediaClient()

    reply = generator.check_species(term)
    if mentions_single_species(reply):
        return []
    return resolve_species_images(parse_species_blocks(reply), wiki)


def search(
    term: str,
    generator: Optional[PlantInfoGenerator] = None,
    wiki: Optional[WikipediaClient] = None,
    max_attempts: int = None,
    delay: float = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SearchResult:
    """Search for a plant by name.

    Args:
        term: Name typed by the user
        generator: Text generator (creates new if None)
        wiki: Wikipedia client (creates new if None)
        max_attempts: Attempts for the description retry loop
        delay: Pause between attempts
        sleep: Sleep function, replaceable in tests

    Returns:
        SearchResult holding one plant, several species, or an error
    """
    term = (term or "").strip()
    if not term:
        return SearchResult(error=ERROR_EMPTY_TERM)

    # Initialize clients if not provided
    generator = generator or PlantInfoGenerator()
    wiki = wiki or WikipediaClient()

    try:
        # Step 1: One species or several?
        species = check_multiple_species(term, generator=generator, wiki=wiki)
        if species:
            return SearchResult(species=species)

        # Step 2: Retry until the description is complete
        text = fetch_complete_description(
            generator, term, max_attempts=max_attempts, delay=delay, sleep=sleep
        )
        if text is None:
            return SearchResult(error=ERROR_INCOMPLETE)

        # Step 3: Parse and find an image
        return SearchResult(plant=_described_plant(text, wiki))
    except Exception as e:
        logger.exception("Search for %r failed", term)
        return SearchResult(error=ERROR_SEARCH.format(e))


def identify(
    image: bytes,
    filename: str = "upload.jpg",
    content_type: str = "image/jpeg",
    plant_id: Optional[PlantIdClient] = None,
    generator: Optional[PlantInfoGenerator] = None,
    wiki: Optional[WikipediaClient] = None,
    max_attempts: int = None,
    delay: float = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PlantResult:
    """Identify a plant from an image and describe it.

    Args:
        image: Raw image bytes
        filename: Upload file name
        content_type: Upload MIME type
        plant_id: Recognition client (creates new if None)
        generator: Text generator (creates new if None)
        wiki: Wikipedia client (creates new if None)
        max_attempts: Attempts for the description retry loop
        delay: Pause between attempts
        sleep: Sleep function, replaceable in tests

    Returns:
        PlantResult with the description, or an error message
    """
    plant_id = plant_id or PlantIdClient()
    generator = generator or PlantInfoGenerator()
    wiki = wiki or WikipediaClient()

    # Step 1: Recognise the image
    try:
        payload = plant_id.identify(image, filename=filename, content_type=content_type)
    except IdentificationError as e:
        logger.error("Identification failed: %s", e)
        return PlantResult(error=ERROR_IDENTIFY_FAILED)

    identification = top_suggestion(payload)
    if identification is None:
        return PlantResult(error=ERROR_NO_SUGGESTION)

    # Step 2: Describe the suggested plant
    try:
        text = fetch_complete_description(
            generator, identification.name, max_attempts=max_attempts, delay=delay, sleep=sleep
        )
    except GenerationError as e:
        logger.error("Description of %r failed: %s", identification.name, e)
        return PlantResult(error=f"Error identifying plant: {e}", identification=identification)

    if text is None:
        return PlantResult(error=ERROR_INCOMPLETE, identification=identification)

    # Step 3: Parse and find an image
    result = _described_plant(text, wiki)
    result.identification = identification
    return result


def select_species(
    candidate: SpeciesCandidate,
    generator: Optional[PlantInfoGenerator] = None,
    wiki: Optional[WikipediaClient] = None,
) -> PlantResult:
    """Describe one species picked from a multi-species search."""
    generator = generator or PlantInfoGenerator()
    wiki = wiki or WikipediaClient()

    try:
        additional = generator.species_details(candidate.common_name, candidate.scientific_name)
        info = (
            f"Common name: {candidate.common_name}\n"
            f"Scientific name: {candidate.scientific_name}\n"
            f"Description: {candidate.description}\n"
            f"{additional}"
        )
        record = parse_plant_record(info)

        image_url = candidate.image_url
        if not image_url or image_url == Config.SPECIES_PLACEHOLDER_IMAGE:
            scientific_name = record.get("Scientific name")
            image_url = wiki.resolve_image(scientific_name) if scientific_name else None
    except Exception:
        logger.exception("Details for %r failed", candidate.common_name)
        return PlantResult(error=ERROR_DETAILS)

    return PlantResult(info=info, record=record, image_url=image_url)


def plant_details(
    record: Dict[str, str], wiki: Optional[WikipediaClient] = None
) -> PlantDetails:
    """Enrich a record with Wikipedia images and text for the details page."""
    wiki = wiki or WikipediaClient()
    fallback_image = record.get("imageUrl") or Config.SPECIES_PLACEHOLDER_IMAGE

    scientific_name = record.get("Scientific name")
    if not scientific_name:
        return PlantDetails(record=record, main_image_url=fallback_image)

    page = wiki.page_details(
        clean_scientific_name(scientific_name), record.get("Common name", "")
    )
    return PlantDetails(
        record=record,
        main_image_url=page.main_image_url or fallback_image,
        additional_images=page.images,
        extract="\n\n".join(page.paragraphs),
    )
