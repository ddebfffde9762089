"""Scraping labelled plant descriptions out of generated text."""

import re
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List

from .config import Config

UNKNOWN_COMMON_NAME = "Unknown Plant"
UNKNOWN_SCIENTIFIC_NAME = "Species unknown"
NO_DESCRIPTION = "No description available."

_BULLET_RE = re.compile(r"^(?:-\s+|•\s*)+")
_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")
_NAME_STOP_RE = re.compile(r"[(\[{/'\"]")


@dataclass
class SpeciesCandidate:
    """One species offered when a search term covers several."""

    common_name: str
    scientific_name: str
    description: str
    image_url: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _clean_line(line: str) -> str:
    """Drop markup asterisks and list bullets from a line."""
    line = line.replace("*", "").strip()
    return _BULLET_RE.sub("", line).strip()


def parse_plant_record(text: str) -> Dict[str, str]:
    """Parse "Label: value" lines into an ordered label -> value mapping.

    A line with a colon starts a new label (split on the first colon). Any
    other non-blank line continues the value of the previous label. Lines
    before the first label are dropped.

    Args:
        text: Free text produced by the language model

    Returns:
        Mapping from label to value, in order of first appearance
    """
    record: Dict[str, str] = {}
    current = None

    for raw_line in (text or "").splitlines():
        line = _clean_line(raw_line)
        if not line:
            continue

        label, sep, value = line.partition(":")
        label = label.strip()
        if sep and label:
            current = label
            record[current] = value.strip()
        elif current is not None:
            previous = record[current]
            record[current] = f"{previous} {line}" if previous else line

    return record


def has_required_fields(
    record: Dict[str, str], fields: Iterable[str] = Config.REQUIRED_FIELDS
) -> bool:
    """Check that every required label is present with a non-empty value."""
    return all(record.get(field) for field in fields)


def display_fields(record: Dict[str, str]) -> Dict[str, str]:
    """Headline fields of a record, with fallbacks for missing labels."""
    return {
        "common_name": record.get("Common name") or UNKNOWN_COMMON_NAME,
        "scientific_name": record.get("Scientific name") or UNKNOWN_SCIENTIFIC_NAME,
        "description": record.get("Description") or NO_DESCRIPTION,
    }


def mentions_single_species(text: str) -> bool:
    return "no multiple species" in (text or "").lower()


def _labelled_value(lines: List[str], label: str) -> str:
    for line in lines:
        if label in line.lower():
            _, sep, value = line.partition(":")
            if sep:
                return value.replace("*", "").strip()
    return ""


def parse_species_blocks(text: str) -> List[SpeciesCandidate]:
    """Parse a multi-species answer into candidates.

    The answer is split into blank-line separated blocks. Blocks missing a
    common name, scientific name or description are skipped.

    Args:
        text: Language model answer listing several species

    Returns:
        List of SpeciesCandidate, image_url left empty
    """
    candidates: List[SpeciesCandidate] = []
    for block in _BLOCK_SPLIT_RE.split(text or ""):
        lines = [line for line in block.splitlines() if line.strip()]
        if not lines:
            continue

        common_name = _labelled_value(lines, "common name")
        scientific_name = _labelled_value(lines, "scientific name")
        description = _labelled_value(lines, "description")
        if common_name and scientific_name and description:
            candidates.append(
                SpeciesCandidate(
                    common_name=common_name,
                    scientific_name=scientific_name,
                    description=description,
                )
            )
    return candidates


def clean_scientific_name(name: str) -> str:
    """Reduce a scientific name to something Wikipedia has a page for.

    Italic markers, parenthesised text and "spp." are removed. A name that
    mentions "genus" is cut down to its first word.
    """
    name = re.sub(r"[_*]", "", name or "")
    name = re.sub(r"\s*\([^)]*\)", "", name)
    name = re.sub(r"\s*spp\.?", "", name, count=1, flags=re.IGNORECASE).strip()

    if "genus" in name.lower():
        return name.split(" ")[0]
    return name


def search_variants(name: str) -> List[str]:
    """Ordered, de-duplicated Wikipedia query variants for a plant name.

    Variants: the raw name, the text before the first apostrophe, the text
    before the first bracket, slash or quote, and the genus alone.
    """
    raw = (name or "").strip()
    variants = [
        raw,
        raw.split("'")[0].strip(),
        _NAME_STOP_RE.split(raw, maxsplit=1)[0].strip(),
    ]
    shortest = variants[-1]
    if " " in shortest:
        variants.append(shortest.split()[0])

    unique: List[str] = []
    for variant in variants:
        if variant and variant not in unique:
            unique.append(variant)
    return unique
