"""Tests for the text-to-record parser and name helpers."""
import pytest

from plant_identifier.parsing import (
    clean_scientific_name,
    display_fields,
    has_required_fields,
    mentions_single_species,
    parse_plant_record,
    parse_species_blocks,
    search_variants,
)

PLAIN = """Common name: Garden Rose
Scientific name: Rosa gallica
Description: A woody perennial.
It has thorns.
Care tips: Prune in spring: before buds open."""

EXPECTED = {
    "Common name": "Garden Rose",
    "Scientific name": "Rosa gallica",
    "Description": "A woody perennial. It has thorns.",
    "Care tips": "Prune in spring: before buds open.",
}


class TestParsePlantRecord:
    """Test label/value scraping."""

    def test_plain_text(self):
        assert parse_plant_record(PLAIN) == EXPECTED

    def test_keeps_label_order(self):
        assert list(parse_plant_record(PLAIN)) == list(EXPECTED)

    @pytest.mark.parametrize(
        "text",
        [
            PLAIN.replace("\n", "\n\n"),
            "\n\n" + PLAIN + "\n\n\n",
            PLAIN.replace("Common name:", "**Common name:**"),
            PLAIN.replace("Rosa gallica", "*Rosa gallica*"),
            "\n".join(f"* **{line}**" if ":" in line else line for line in PLAIN.splitlines()),
            PLAIN.replace("It has thorns.", "\n**It has thorns.**\n"),
        ],
    )
    def test_blank_lines_and_asterisks_do_not_change_mapping(self, text):
        assert parse_plant_record(text) == EXPECTED

    def test_lines_before_first_label_are_dropped(self):
        text = "Here is the information you asked for\n" + PLAIN
        assert parse_plant_record(text) == EXPECTED

    def test_empty_value_filled_by_continuation(self):
        record = parse_plant_record("Description:\nA tall tree.")
        assert record == {"Description": "A tall tree."}

    def test_splits_on_first_colon_only(self):
        record = parse_plant_record("Image URL: https://example.org/rose.jpg")
        assert record["Image URL"] == "https://example.org/rose.jpg"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Hardiness zones:\n-10 to -5 degrees C", "-10 to -5 degrees C"),
            ("Hardiness zones:\n- -10°F", "-10°F"),
            ("Minimum temperature: -7°C", "-7°C"),
        ],
    )
    def test_negative_numbers_keep_their_sign(self, text, expected):
        assert list(parse_plant_record(text).values()) == [expected]

    def test_dash_and_dot_bullets_are_stripped(self):
        text = "- Common name: Garden Rose\n• Family: Rosaceae\n•Soil type: Loam"
        assert parse_plant_record(text) == {
            "Common name": "Garden Rose",
            "Family": "Rosaceae",
            "Soil type": "Loam",
        }

    def test_empty_text(self):
        assert parse_plant_record("") == {}
        assert parse_plant_record(None) == {}


class TestRequiredFields:
    def test_all_present(self):
        assert has_required_fields(EXPECTED)

    def test_missing_description(self):
        record = dict(EXPECTED)
        del record["Description"]
        assert not has_required_fields(record)

    def test_empty_value_counts_as_missing(self):
        assert not has_required_fields({**EXPECTED, "Scientific name": ""})


def test_display_fields_fallbacks():
    assert display_fields({}) == {
        "common_name": "Unknown Plant",
        "scientific_name": "Species unknown",
        "description": "No description available.",
    }


def test_mentions_single_species():
    assert mentions_single_species("No multiple species.")
    assert mentions_single_species("Answer: no MULTIPLE species")
    assert not mentions_single_species("Common name: Pink lily")


class TestSpeciesBlocks:
    """Test parsing of multi-species answers."""

    REPLY = """Yes, lilies have many species.

**Common name:** Easter lily
**Scientific name:** Lilium longiflorum
**Description:** White trumpet flowers.

Common name: Tiger lily
Scientific name: Lilium lancifolium
Description: Orange flowers: spotted with black.

Common name: Mystery lily
Description: Not enough information."""

    def test_keeps_complete_blocks(self):
        species = parse_species_blocks(self.REPLY)
        assert [s.common_name for s in species] == ["Easter lily", "Tiger lily"]
        assert species[0].scientific_name == "Lilium longiflorum"
        assert species[0].image_url == ""

    def test_value_keeps_later_colons(self):
        species = parse_species_blocks(self.REPLY)
        assert species[1].description == "Orange flowers: spotted with black."

    def test_no_blocks(self):
        assert parse_species_blocks("No multiple species") == []


@pytest.mark.parametrize(
    "raw, cleaned",
    [
        ("*Rosa gallica*", "Rosa gallica"),
        ("_Ficus elastica_ (rubber plant)", "Ficus elastica"),
        ("Rosa spp.", "Rosa"),
        ("Lilium genus", "Lilium"),
    ],
)
def test_clean_scientific_name(raw, cleaned):
    assert clean_scientific_name(raw) == cleaned


class TestSearchVariants:
    def test_binomial(self):
        assert search_variants("Rosa gallica") == ["Rosa gallica", "Rosa"]

    def test_cultivar_in_quotes(self):
        assert search_variants("Ficus lyrata 'Bambino'") == [
            "Ficus lyrata 'Bambino'",
            "Ficus lyrata",
            "Ficus",
        ]

    def test_parenthesis(self):
        assert search_variants("Monstera deliciosa (Swiss cheese plant)") == [
            "Monstera deliciosa (Swiss cheese plant)",
            "Monstera deliciosa",
            "Monstera",
        ]

    def test_single_word(self):
        assert search_variants("Lavender") == ["Lavender"]

    def test_blank(self):
        assert search_variants("  ") == []
