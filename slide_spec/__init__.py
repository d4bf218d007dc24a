"""
Slide Spec Package

Turns loosely structured model output into validated, fully positioned slide
specs and renders them to PowerPoint or an HTML preview.
"""

from .deck_layout import DeckLayoutEngine, build_positioned_from_deck
from .errors import (
    InvalidConversationError,
    InvalidDocumentError,
    ProducerNotConfiguredError,
    SlideSpecError,
    UpstreamError,
)
from .generator import SlideSpecGenerator
from .html_page import generate_html, normalize_html
from .layout_engine import IntentLayoutEngine, build_positioned_from_intent
from .models import DeckSpec, DocumentKind, IntentSpec, PositionedSpec
from .normalizer import normalize
from .orchestrator import generate_document
from .pptx_renderer import PPTXRenderer
from .preview import render_preview_html, render_slide_html
from .validator import validate_document

__all__ = [
    "SlideSpecGenerator",
    "DocumentKind",
    "PositionedSpec",
    "IntentSpec",
    "DeckSpec",
    "normalize",
    "validate_document",
    "generate_document",
    "generate_html",
    "normalize_html",
    "IntentLayoutEngine",
    "DeckLayoutEngine",
    "build_positioned_from_intent",
    "build_positioned_from_deck",
    "PPTXRenderer",
    "render_slide_html",
    "render_preview_html",
    "SlideSpecError",
    "InvalidDocumentError",
    "InvalidConversationError",
    "UpstreamError",
    "ProducerNotConfiguredError",
]
