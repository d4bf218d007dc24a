"""
Deck layout engine: layout-typed DeckSpec -> PositionedSpec.

Every deck slide names one of a fixed set of archetypes.  Each archetype has
its own renderer, and ``RENDERERS`` dispatches on ``layout_type``.
"""
import logging
import re
from typing import Callable, Dict, List, Optional

from .geometry import Box, Canvas, clamp
from .layout_engine import TITLE_GAP, TITLE_HEIGHT, placeholder_object
from .models import (
    BulletsObject,
    ChartObject,
    ChartOptions,
    ChartSeries,
    DeckBullet,
    DeckImageRef,
    DeckSlide,
    DeckSpec,
    ImageObject,
    PositionedSlide,
    PositionedSpec,
    SlideBox,
    SpecMeta,
    TableObject,
    TableOptions,
    TextObject,
    TextOptions,
)

logger = logging.getLogger(__name__)

TWO_COLUMN_RATIO = 0.5
COLUMN_GUTTER = 0.35
HEADING_HEIGHT = 0.32
HEADING_GAP = 0.1
SUBTITLE_HEIGHT = 0.6
OVERLAY_SUBTITLE_HEIGHT = 0.5
MAX_BULLET_LEVEL = 4

# Overlay text sits on top of a full-bleed image
OVERLAY_TEXT_COLOR = "FFFFFF"

_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)


def bullets_to_lines(bullets: Optional[List[DeckBullet]]) -> List[str]:
    """Flatten leveled bullets into lines indented two spaces per level.

    Blank bullets are skipped and levels are clamped to ``[0, 4]``.
    """
    lines = []
    for bullet in bullets or []:
        text = bullet.text.strip()
        if not text:
            continue
        level = int(clamp(0, bullet.level or 0, MAX_BULLET_LEVEL))
        lines.append("  " * level + text)
    return lines


def _classify_source(src: Optional[str]) -> Optional[Dict[str, str]]:
    src = (src or "").strip()
    if not src:
        return None
    if src.startswith("data:"):
        return {"dataUrl": src}
    if _HTTP_URL.match(src):
        return {"url": src}
    # Local paths are not resolved; positioned images carry data or URLs only
    return None


def resolve_image_src(deck: DeckSpec, image: Optional[DeckImageRef]) -> Optional[Dict[str, str]]:
    """Resolve a slide's image reference to ``{"dataUrl": ...}`` or ``{"url": ...}``.

    A direct ``src`` takes precedence over ``asset_id``; when ``src`` is set
    but unusable, the asset table is not consulted.
    """
    if image is None:
        return None
    if (image.src or "").strip():
        return _classify_source(image.src)

    asset_id = (image.asset_id or "").strip()
    if not asset_id:
        return None
    images = deck.assets.images if deck.assets and deck.assets.images else []
    for asset in images:
        if asset.id == asset_id:
            return _classify_source(asset.src)
    return None


class DeckFrame:
    """Drawing state for one deck, shared by the archetype renderers."""

    def __init__(self, deck: DeckSpec, canvas: Canvas):
        self.deck = deck
        self.canvas = canvas
        self.x = canvas.content_left
        self.w = canvas.content_width
        self.top = canvas.content_top
        self.bottom = canvas.content_bottom
        colors = deck.theme.colors
        self.text_color = colors.text if colors else None
        self.background = colors.bg if colors else None

    def text(self, text: str, box: Box, **options) -> TextObject:
        options = {k: v for k, v in options.items() if v is not None}
        return TextObject(
            text=text,
            box=SlideBox(**box.to_dict()),
            options=TextOptions(**options) if options else None,
        )

    def bullets(self, lines: List[str], box: Box, font_size: float) -> BulletsObject:
        return BulletsObject(items=lines, box=SlideBox(**box.to_dict()), options=TextOptions(fontSize=font_size))

    def image_or_placeholder(self, image: Optional[DeckImageRef], box: Box, fallback_box: Optional[Box] = None):
        """Image object for ``image`` in ``box``, or an italic label in ``fallback_box``."""
        resolved = resolve_image_src(self.deck, image)
        if resolved:
            return ImageObject(box=SlideBox(**box.to_dict()), **resolved)
        logger.debug("Unresolved deck image %r degraded to a text placeholder", image)
        label = f"Image: {image.asset_id}" if image is not None and image.asset_id else "Image"
        return self.text(label, fallback_box or box, fontSize=14, italic=True)

    def title(self, slide: DeckSlide) -> TextObject:
        return self.text(
            slide.title,
            Box(self.x, self.top, self.w, TITLE_HEIGHT),
            fontSize=28,
            bold=True,
            color=self.text_color,
        )


# ---------------------------------------------------------------------------
# Archetype renderers.  Each receives the y where its content starts.
# ---------------------------------------------------------------------------

Renderer = Callable[[DeckFrame, DeckSlide, float], list]


def render_title(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    if not slide.subtitle:
        return []
    return [
        frame.text(
            slide.subtitle,
            Box(frame.x, y, frame.w, SUBTITLE_HEIGHT),
            fontSize=18,
            color=frame.text_color,
        )
    ]


def render_title_bullets(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    lines = bullets_to_lines(slide.bullets)
    if not lines:
        return []
    return [frame.bullets(lines, Box(frame.x, y, frame.w, frame.bottom - y), 18)]


def render_two_column_bullets(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    objects = []
    columns = frame.canvas.split_columns(TWO_COLUMN_RATIO, COLUMN_GUTTER)
    for column, content in zip(columns, (slide.left, slide.right)):
        col_y = y
        if content is not None and content.heading:
            objects.append(
                frame.text(content.heading, Box(column.x, col_y, column.w, HEADING_HEIGHT), fontSize=14, bold=True)
            )
            col_y += HEADING_HEIGHT + HEADING_GAP
        lines = bullets_to_lines(content.bullets if content is not None else None)
        if lines:
            objects.append(frame.bullets(lines, Box(column.x, col_y, column.w, frame.bottom - col_y), 14))
    return objects


def render_image_left_bullets_right(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    left, right = frame.canvas.split_columns(TWO_COLUMN_RATIO, COLUMN_GUTTER)
    height = frame.bottom - y
    objects = [frame.image_or_placeholder(slide.image, Box(left.x, y, left.w, height))]
    lines = bullets_to_lines(slide.bullets)
    if lines:
        objects.append(frame.bullets(lines, Box(right.x, y, right.w, height), 16))
    return objects


def render_table(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    rows: List[List[str]] = []
    if slide.table is not None:
        rows.append(list(slide.table.columns))
        rows.extend([str(cell) for cell in row] for row in slide.table.rows)
    return [
        TableObject(
            rows=rows or [[""]],
            box=SlideBox(**Box(frame.x, y, frame.w, frame.bottom - y).to_dict()),
            options=TableOptions(fontSize=12, autoPage=True, autoPageRepeatHeader=True, autoPageHeaderRows=1),
        )
    ]


def render_chart(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    box = Box(frame.x, y, frame.w, frame.bottom - y)
    chart = slide.chart
    if chart is None:
        logger.debug("Chart slide %r has no chart; using a text placeholder", slide.id)
        return [frame.text("Chart", box, fontSize=14, italic=True)]

    longest = max(len(series.values) for series in chart.series)
    labels = list(chart.categories) if chart.categories else [str(i + 1) for i in range(longest)]
    data = [ChartSeries(name=series.name, labels=labels, values=series.values) for series in chart.series]
    return [
        ChartObject(
            chartType=chart.chart_type,
            data=data,
            box=SlideBox(**box.to_dict()),
            options=ChartOptions(showLegend=True),
        )
    ]


def render_image_full_bleed(frame: DeckFrame, slide: DeckSlide, y: float) -> list:
    # Drawn without the shared title band; the title is overlaid on the image
    canvas = frame.canvas
    color = frame.text_color or OVERLAY_TEXT_COLOR
    title_box = Box(frame.x, frame.top, frame.w, TITLE_HEIGHT)
    objects = [
        frame.image_or_placeholder(slide.image, Box(0, 0, canvas.width, canvas.height), fallback_box=title_box),
        frame.text(slide.title, title_box, fontSize=28, bold=True, color=color),
    ]
    if slide.subtitle:
        objects.append(
            frame.text(
                slide.subtitle,
                Box(frame.x, frame.top + TITLE_HEIGHT, frame.w, OVERLAY_SUBTITLE_HEIGHT),
                fontSize=16,
                color=color,
            )
        )
    return objects


# Layouts that skip the shared title band
UNTITLED_LAYOUTS = frozenset({"image_full_bleed"})

RENDERERS: Dict[str, Renderer] = {
    "title": render_title,
    "title_bullets": render_title_bullets,
    "two_column_bullets": render_two_column_bullets,
    "image_left_bullets_right": render_image_left_bullets_right,
    "image_full_bleed": render_image_full_bleed,
    "table": render_table,
    "chart": render_chart,
}


class DeckLayoutEngine:
    """Turns a validated DeckSpec into a PositionedSpec, one slide per deck slide."""

    def __init__(self, canvas: Optional[Canvas] = None):
        self.canvas = canvas or Canvas.for_layout("LAYOUT_WIDE")

    def build(self, deck: DeckSpec) -> PositionedSpec:
        frame = DeckFrame(deck, self.canvas)
        slides = [self.layout_slide(frame, slide) for slide in deck.slides]
        return PositionedSpec(meta=SpecMeta(title=deck.meta.title, layout=deck.theme.layout), slides=slides)

    def layout_slide(self, frame: DeckFrame, slide: DeckSlide) -> PositionedSlide:
        render = RENDERERS[slide.layout_type]
        if slide.layout_type in UNTITLED_LAYOUTS:
            objects = render(frame, slide, frame.top)
        else:
            objects = [frame.title(slide)]
            objects.extend(render(frame, slide, frame.top + TITLE_HEIGHT + TITLE_GAP))

        if slide.speaker_notes:
            logger.debug("Speaker notes on deck slide %r are not carried into the positioned spec", slide.id)
        if not objects:
            objects.append(placeholder_object())

        return PositionedSlide(title=slide.title, backgroundColor=frame.background, objects=objects)


def build_positioned_from_deck(deck: DeckSpec, canvas: Optional[Canvas] = None) -> PositionedSpec:
    return DeckLayoutEngine(canvas).build(deck)
