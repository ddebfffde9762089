#!/usr/bin/env python3
"""Command-line interface for Plant Identifier."""

import logging
import sys

from tqdm import tqdm

from plant_identifier import search
from plant_identifier.config import Config
from plant_identifier.generation import PlantInfoGenerator
from plant_identifier.wikipedia import WikipediaClient


def main():
    """Look up plant names given on the command line."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    # Validate configuration
    try:
        Config.validate(require_plant_id=False)
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        print("\nPlease ensure:")
        print("  1. GROQ_API_KEY environment variable is set")
        sys.exit(1)

    names = sys.argv[1:] or ["Rose", "Monstera deliciosa", "Lavender"]

    # Initialize shared clients
    generator = PlantInfoGenerator()
    wiki = WikipediaClient()

    print("🌿 Plant Identifier")
    print("=" * 80)
    print(f"Model: {Config.GROQ_MODEL}")
    print(f"Max attempts per description: {Config.DESCRIPTION_MAX_ATTEMPTS}")
    print("=" * 80)

    results = []
    for name in tqdm(names, desc="🔎 Searching"):
        result = search(name, generator=generator, wiki=wiki)
        results.append((name, result))

        print(f"\n{'🚫 FAILED' if result.error else '✅ FOUND'}: {name}")
        print("-" * 80)
        if result.error:
            print(result.error)
        elif result.species:
            print("Multiple species found:")
            for species in result.species:
                print(f"  • {species.common_name} ({species.scientific_name})")
                print(f"    {species.description}")
        else:
            fields = result.plant.to_dict()
            print(f"{fields['common_name']} ({fields['scientific_name']})")
            print(fields["description"])
            if result.plant.image_url:
                print(f"\n🖼  {result.plant.image_url}")

    # Display summary
    found = sum(1 for _, r in results if not r.error)
    print("\n" + "=" * 80)
    print(f"✅ Found: {found}/{len(results)}")
    print(f"🤖 Groq Calls: {generator.get_stats()['call_count']}")
    wiki_stats = wiki.get_stats()
    print(f"📚 Wikipedia Calls: {wiki_stats['api_calls']} ({wiki_stats['failures']} failed)")
    print("=" * 80)


if __name__ == "__main__":
    main()
