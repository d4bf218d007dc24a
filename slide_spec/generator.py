#!/usr/bin/env python3
"""
Main slide spec module that ties together the producer, layout engines and renderers.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from pydantic import BaseModel

from .config import ProducerSettings, debug_enabled, debug_history_size
from .deck_layout import DeckLayoutEngine
from .errors import InvalidDocumentError, ProducerNotConfiguredError, SlideSpecError
from .html_page import generate_html
from .layout_engine import IntentLayoutEngine
from .models import DeckSpec, DocumentKind, IntentSpec, PositionedSpec
from .normalizer import normalize
from .orchestrator import generate_document
from .pptx_renderer import PPTXRenderer
from .preview import render_preview_html
from .producer import AzureOpenAIProducer, DebugRecorder, Message, Producer, safe_json_parse
from .validator import validate_document

logger = logging.getLogger(__name__)

HTML_MODE = "html"


class SlideSpecGenerator:
    """
    Main class for turning conversations (or saved documents) into PowerPoint slides.
    """

    def __init__(
        self,
        *,
        producer: Optional[Producer] = None,
        output_dir: Union[str, Path, None] = None,
        debug: bool = False,
    ):
        """Create a new :class:`SlideSpecGenerator`.

        Parameters
        ----------
        producer
            Object with a ``complete(messages, temperature)`` method.  When
            omitted, an Azure OpenAI producer is built from the environment
            the first time one is needed.
        output_dir
            Directory for bare output filenames.  Defaults to ``output``.
        debug
            Enable verbose logging and keep a record of producer exchanges.
        """
        self.debug = debug or debug_enabled()
        self.output_dir = Path(output_dir) if output_dir else Path("output")
        self.recorder = DebugRecorder(debug_history_size()) if self.debug else None
        self._producer = producer

        self.intent_engine = IntentLayoutEngine()
        self.deck_engine = DeckLayoutEngine()
        self.pptx_renderer = PPTXRenderer()

    @property
    def producer(self) -> Producer:
        if self._producer is None:
            settings = ProducerSettings.from_env()
            if settings is None:
                raise ProducerNotConfiguredError(ProducerSettings.missing_vars())
            self._producer = AzureOpenAIProducer(settings, recorder=self.recorder)
        return self._producer

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def request_document(
        self,
        kind: Union[DocumentKind, str],
        conversation: Sequence[Message],
        current_html: Optional[str] = None,
    ) -> BaseModel:
        """Ask the producer for a validated document of the given kind."""
        return generate_document(DocumentKind(kind), self.producer, conversation, current_html)

    def request_html(self, conversation: Sequence[Message], current_html: Optional[str] = None) -> str:
        """Ask the producer for the HTML page described by the conversation."""
        return generate_html(self.producer, conversation, current_html)

    def write_html(
        self,
        conversation: Sequence[Message],
        output_path: Union[str, Path] = "page.html",
        current_html: Optional[str] = None,
    ) -> str:
        """Generate the HTML page and write it to ``output_path``; return the path."""
        html_path = self._resolve_output(output_path, ".html")
        html_path.write_text(self.request_html(conversation, current_html), encoding="utf-8")
        logger.info("HTML page written to %s", html_path)
        return str(html_path)

    @staticmethod
    def load_document(kind: Union[DocumentKind, str], data: Any) -> BaseModel:
        """Normalize and validate an already-parsed document (e.g. a saved JSON file).

        Raises:
            InvalidDocumentError: the document does not match the schema
        """
        kind = DocumentKind(kind)
        result = validate_document(kind, normalize(kind, data))
        if not result.ok:
            raise InvalidDocumentError(kind.value, result.flatten())
        return result.value

    def to_positioned(self, document: BaseModel) -> PositionedSpec:
        """Convert any validated document into a positioned spec."""
        if isinstance(document, PositionedSpec):
            return document
        if isinstance(document, IntentSpec):
            return self.intent_engine.build(document)
        if isinstance(document, DeckSpec):
            return self.deck_engine.build(document)
        raise TypeError(f"Unsupported document type: {type(document).__name__}")

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _resolve_output(self, output_path: Union[str, Path], suffix: str) -> Path:
        path = Path(output_path)
        if path.suffix != suffix:
            path = path.with_name(path.name + suffix)
        if not path.is_absolute() and len(path.parts) == 1:
            # If it's just a filename, put it in the output directory
            path = self.output_dir / path
        os.makedirs(path.parent, exist_ok=True)
        return path

    def render(
        self,
        spec: PositionedSpec,
        output_path: Union[str, Path] = "presentation.pptx",
        preview_path: Union[str, Path, None] = None,
    ) -> str:
        """
        Write a positioned spec to PPTX (and optionally an HTML preview).

        Args:
            spec: Positioned spec to render
            output_path: Destination PPTX path
            preview_path: Optional destination for the HTML preview

        Returns:
            str: Path to the generated PPTX file
        """
        pptx_path = self._resolve_output(output_path, ".pptx")
        self.pptx_renderer.render(spec, str(pptx_path))

        if preview_path is not None:
            html_path = self._resolve_output(preview_path, ".html")
            html_path.write_text(render_preview_html(spec), encoding="utf-8")
            logger.info("Preview written to %s", html_path)

        if self.debug:
            logger.debug("Total slides: %d", len(spec.slides))
        return str(pptx_path)

    def generate(
        self,
        kind: Union[DocumentKind, str],
        conversation: Sequence[Message],
        output_path: Union[str, Path] = "presentation.pptx",
        *,
        current_html: Optional[str] = None,
        preview_path: Union[str, Path, None] = None,
    ) -> str:
        """Run the whole pipeline: producer -> validation -> layout -> PPTX."""
        document = self.request_document(kind, conversation, current_html)
        return self.render(self.to_positioned(document), output_path, preview_path)

    def debug_entries(self) -> List[dict]:
        return [entry.to_dict() for entry in self.recorder.entries()] if self.recorder else []


def main(argv: Optional[Sequence[str]] = None):
    """Command-line entry point for the slide spec generator."""
    import argparse
    import sys

    def _build_parser() -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(prog="slidespec", description="Turn a prompt or a saved document into a PPTX presentation.")
        p.add_argument("--mode", "-m", choices=[k.value for k in DocumentKind] + [HTML_MODE], default=DocumentKind.DECK.value, help="Document variant to request or load; 'html' asks for the HTML page instead")
        source = p.add_mutually_exclusive_group(required=True)
        source.add_argument("--prompt", "-p", help="User request sent to the producer")
        source.add_argument("--input", "-i", type=Path, help="Saved JSON document (skips the producer)")
        p.add_argument("--html", type=Path, help="Current HTML page passed to the producer as context")
        p.add_argument("--output", "-o", type=Path, default=Path("output/presentation.pptx"), help="Destination PPTX path")
        p.add_argument("--preview", type=Path, help="Also write an HTML preview to this path")
        p.add_argument("--spec-json", type=Path, help="Also write the positioned spec as JSON to this path")
        p.add_argument("--debug", action="store_true", help="Enable verbose logging and record producer exchanges")
        p.add_argument("--debug-log", type=Path, help="Write recorded producer exchanges to this JSON file")
        return p

    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.mode == HTML_MODE and args.input is not None:
        parser.error("--mode html requires --prompt")
    debug = args.debug or debug_enabled()

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format="%(levelname)s  %(message)s")

    generator = SlideSpecGenerator(output_dir=args.output.parent, debug=debug or args.debug_log is not None)
    try:
        if args.input is not None:
            if not args.input.exists():
                logger.error("Input file '%s' not found", args.input)
                sys.exit(1)
            document = generator.load_document(args.mode, safe_json_parse(args.input.read_text(encoding="utf-8")))
        else:
            current_html = args.html.read_text(encoding="utf-8") if args.html else None
            conversation = [{"role": "user", "content": args.prompt}]
            if args.mode == HTML_MODE:
                # The HTML page replaces the presentation output
                generator.write_html(conversation, args.output.with_suffix(".html"), current_html)
                return
            document = generator.request_document(args.mode, conversation, current_html)

        spec = generator.to_positioned(document)
        if args.spec_json is not None:
            args.spec_json.parent.mkdir(parents=True, exist_ok=True)
            args.spec_json.write_text(spec.model_dump_json(indent=2, exclude_none=True), encoding="utf-8")

        output_path = generator.render(spec, args.output, args.preview)
        logger.info("Presentation written to %s", output_path)
    except SlideSpecError as exc:
        if debug:
            logger.exception("Generation failed")
        raise SystemExit(str(exc))
    finally:
        if args.debug_log is not None:
            args.debug_log.parent.mkdir(parents=True, exist_ok=True)
            args.debug_log.write_text(json.dumps(generator.debug_entries(), indent=2, ensure_ascii=False), encoding="utf-8")


if __name__ == "__main__":
    main()
