"""Random plant fact cards from the language model and Wikipedia."""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from .config import Config
from .generation import PlantInfoGenerator
from .wikipedia import WikipediaClient

logger = logging.getLogger(__name__)

SOURCE_MODEL = "Groq"
SOURCE_WIKIPEDIA = "Wikipedia"


@dataclass
class Fact:
    """A single display card."""

    text: str
    image_url: str
    source: str
    plant_name: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _snippet(extract: str) -> str:
    """First two sentences of a summary extract."""
    if not extract:
        return "No description available."
    sentences = extract.split(". ")[:2]
    return ". ".join(sentences).rstrip(".") + "."


def wikipedia_fact(
    wiki: WikipediaClient, rng: random.Random = None, attempts: int = None
) -> Optional[Fact]:
    """A fact about a random plant article, or None after repeated misses.

    Disambiguation pages and failed lookups count as misses.
    """
    attempts = attempts or Config.FACT_ATTEMPTS
    for _ in range(attempts):
        title = wiki.random_plant_title(rng)
        if not title:
            continue

        data = wiki.summary(title)
        if not data or data.get("type") == "disambiguation":
            logger.info("Skipping %r for a fact card", title)
            continue

        name = data.get("title") or title
        return Fact(
            text=f"{name}: {_snippet(data.get('extract', ''))}",
            image_url=(data.get("thumbnail") or {}).get("source")
            or Config.FACT_PLACEHOLDER_IMAGE,
            source=SOURCE_WIKIPEDIA,
            plant_name=name,
        )

    logger.warning("No Wikipedia plant fact after %d attempts", attempts)
    return None


def model_facts(
    generator: PlantInfoGenerator, wiki: WikipediaClient, count: int
) -> List[Fact]:
    """Generated facts, each paired with a Wikipedia thumbnail."""
    items = generator.plant_facts(count)
    return [
        Fact(
            text=f"{item['plantName']}: {item['fact']}",
            image_url=wiki.thumbnail(item["plantName"]),
            source=SOURCE_MODEL,
            plant_name=item["plantName"],
        )
        for item in items
    ]


def random_facts(
    count: int = None,
    generator: Optional[PlantInfoGenerator] = None,
    wiki: Optional[WikipediaClient] = None,
    rng: random.Random = None,
) -> List[Fact]:
    """Mixed, shuffled fact cards.

    Model facts (twice the requested count) and Wikipedia facts are fetched
    concurrently. A failing source contributes nothing.

    Args:
        count: Number of cards to return
        generator: Text generator (creates new if None)
        wiki: Wikipedia client (creates new if None)
        rng: Random source for category choice and shuffling

    Returns:
        At most count Fact objects
    """
    if count is None:
        count = Config.DEFAULT_FACT_COUNT
    if count <= 0:
        return []

    generator = generator or PlantInfoGenerator()
    wiki = wiki or WikipediaClient()
    rng = rng or random.Random()

    def from_model() -> List[Fact]:
        try:
            return model_facts(generator, wiki, count * 2)
        except Exception as e:
            logger.error("Error fetching model facts: %s", e)
            return []

    def from_wikipedia() -> List[Fact]:
        facts = []
        for _ in range(count):
            fact = wikipedia_fact(wiki, rng)
            if fact is not None:
                facts.append(fact)
        return facts

    with ThreadPoolExecutor(max_workers=2) as pool:
        model_future = pool.submit(from_model)
        wiki_future = pool.submit(from_wikipedia)
        facts = model_future.result() + wiki_future.result()

    rng.shuffle(facts)
    return facts[:count]
