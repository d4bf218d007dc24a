#!/usr/bin/env python3
"""
Pipeline demo - Slide Spec
==========================

Renders the sample documents in this folder without calling a model:

* ``launch_deck.json``       layout-typed deck, one slide per archetype
* ``quarterly_intent.json``  coordinate-free intent document

Each document is normalized, validated, laid out and written to
``output/`` as PPTX plus an HTML preview.  Pass ``--prompt`` to request a
deck from the configured Azure OpenAI deployment instead.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add the project root to the path so we can import our modules
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from slide_spec import DocumentKind, SlideSpecError, SlideSpecGenerator

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
logger = logging.getLogger(__name__)

SAMPLES = {
    "launch_deck.json": DocumentKind.DECK,
    "quarterly_intent.json": DocumentKind.INTENT,
}


def render_samples(generator: SlideSpecGenerator):
    here = Path(__file__).parent
    for name, kind in SAMPLES.items():
        data = json.loads((here / name).read_text(encoding="utf-8"))
        document = generator.load_document(kind, data)
        stem = Path(name).stem
        output = generator.render(generator.to_positioned(document), f"{stem}.pptx", f"{stem}.html")
        logger.info("✅ %s -> %s", name, output)


def main():
    parser = argparse.ArgumentParser(description="Render the sample slide documents")
    parser.add_argument("--prompt", help="Ask the producer for a deck instead of using the samples")
    args = parser.parse_args()

    generator = SlideSpecGenerator(output_dir="output")
    try:
        if args.prompt:
            output = generator.generate(DocumentKind.DECK, [{"role": "user", "content": args.prompt}], "prompted.pptx")
            logger.info("✅ Generated %s", output)
        else:
            render_samples(generator)
    except SlideSpecError as exc:
        logger.error("❌ %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
