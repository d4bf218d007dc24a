#!/usr/bin/env python3
"""
Intent layout engine: coordinate-free IntentSpec -> PositionedSpec.

Each slide is laid out top-down on the canvas:

* an optional title band across the full content width;
* a left column stacking the content blocks (bullets, tables, charts,
  images) in equal shares of the remaining height;
* when bullet sections exist, a narrower right column stacking the sections
  the same way.

Blocks never shrink below a fixed floor.  When the floor pushes a block past
the bottom edge, that block and every later block in the same column are
dropped.  Every emitted box stays inside the canvas, and every slide keeps
at least one object.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .geometry import EPSILON, PLACEHOLDER_BOX, Box, Canvas, Column, clamp
from .models import (
    BulletSection,
    BulletsObject,
    ChartObject,
    ChartOptions,
    ImageObject,
    IntentChart,
    IntentImage,
    IntentSlide,
    IntentSpec,
    IntentTable,
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

# Title band
TITLE_HEIGHT = 0.7
TITLE_GAP = 0.2
TITLE_FONT_SIZE = 28

# Columns
SECTION_COLUMN_RATIO = 0.62
COLUMN_GUTTER = 0.35

# Block stacking
BLOCK_GAP = 0.25
BLOCK_FLOOR = 0.9
MIN_REMAINING = 1.0

# Captions above tables/images and section headings
CAPTION_HEIGHT = 0.35
CAPTION_GAP = 0.1
SECTION_TITLE_HEIGHT = 0.32
SECTION_TITLE_GAP = 0.08
MIN_CAPTIONED_BODY = 0.7
MIN_SECTION_BODY = 0.4

BULLET_FONT_SIZE = 18
SECTION_FONT_SIZE = 14

ContentBlock = Union[List[str], IntentTable, IntentChart, IntentImage]


@dataclass(frozen=True)
class Share:
    """Height budget for one stacked block."""
    height: float
    remaining: float


def block_share(count: int, top: float, bottom: float) -> Share:
    """Split the space between ``top`` and ``bottom`` into ``count`` equal shares.

    The usable height is clamped to at least ``MIN_REMAINING`` and each share
    to at least ``BLOCK_FLOOR``.
    """
    remaining = clamp(MIN_REMAINING, bottom - top, bottom)
    per_block = (remaining - BLOCK_GAP * (count - 1)) / count if count else 0.0
    return Share(height=clamp(BLOCK_FLOOR, per_block, remaining), remaining=remaining)


def overflows(y: float, h: float, bottom: float) -> bool:
    return y + h > bottom + EPSILON


def _slide_box(box: Box) -> SlideBox:
    return SlideBox(**box.to_dict())


def _text(text: str, box: Box, **options) -> TextObject:
    return TextObject(text=text, box=_slide_box(box), options=TextOptions(**options) if options else None)


def placeholder_object() -> TextObject:
    """Degenerate empty text object used when a slide would otherwise be empty."""
    return TextObject(text="", box=_slide_box(PLACEHOLDER_BOX))


class IntentLayoutEngine:
    """
    Places intent content onto the fixed canvas.
    """

    def __init__(self, canvas: Optional[Canvas] = None):
        self.canvas = canvas or Canvas()

    def build(self, intent: IntentSpec) -> PositionedSpec:
        """
        Lay out every slide of ``intent``.

        Args:
            intent: Validated intent document

        Returns:
            PositionedSpec: one positioned slide per intent slide, in order
        """
        meta = intent.meta
        spec_meta = SpecMeta(
            title=meta.title if meta else None,
            author=meta.author if meta else None,
            layout=meta.layout if meta else "LAYOUT_WIDE",
        )
        slides = [self.layout_slide(slide) for slide in intent.slides]
        return PositionedSpec(meta=spec_meta, slides=slides)

    def layout_slide(self, slide: IntentSlide) -> PositionedSlide:
        canvas = self.canvas
        objects = []

        header = 0.0
        if slide.title:
            objects.append(
                _text(
                    slide.title,
                    Box(canvas.content_left, canvas.content_top, canvas.content_width, TITLE_HEIGHT),
                    fontSize=TITLE_FONT_SIZE,
                    bold=True,
                )
            )
            header = TITLE_HEIGHT + TITLE_GAP

        area = canvas.content_area(header)
        sections = slide.bulletSections or []
        if sections:
            left, right = canvas.split_columns(SECTION_COLUMN_RATIO, COLUMN_GUTTER)
        else:
            left, right = Column(canvas.content_left, canvas.content_width), None

        objects.extend(self._stack_blocks(self._collect_blocks(slide), left, area.y, area.bottom))
        if right is not None:
            objects.extend(self._stack_sections(sections, right, area.y, area.bottom))

        if slide.speakerNotes:
            logger.debug("Speaker notes on slide %r are not carried into the positioned spec", slide.title)

        if not objects:
            objects.append(placeholder_object())

        return PositionedSlide(title=slide.title, backgroundColor=slide.backgroundColor, objects=objects)

    # ------------------------------------------------------------------
    # Left column
    # ------------------------------------------------------------------

    @staticmethod
    def _collect_blocks(slide: IntentSlide) -> List[ContentBlock]:
        blocks: List[ContentBlock] = []
        if slide.bullets:
            blocks.append(list(slide.bullets))
        blocks.extend(slide.tables or [])
        blocks.extend(slide.charts or [])
        blocks.extend(slide.images or [])
        return blocks

    def _stack_blocks(self, blocks: List[ContentBlock], column: Column, top: float, bottom: float) -> list:
        objects = []
        share = block_share(len(blocks), top, bottom)
        y = top
        for index, block in enumerate(blocks):
            h = share.height
            if overflows(y, h, bottom):
                logger.debug("Dropping %d block(s) that do not fit the left column", len(blocks) - index)
                break
            box = Box(column.x, y, column.w, h)
            if isinstance(block, list):
                objects.append(
                    BulletsObject(items=block, box=_slide_box(box), options=TextOptions(fontSize=BULLET_FONT_SIZE))
                )
            elif isinstance(block, IntentTable):
                objects.extend(self._table(block, box, bottom))
            elif isinstance(block, IntentChart):
                objects.append(self._chart(block, box))
            else:
                objects.extend(self._image(block, box, bottom))
            y += h + BLOCK_GAP
        return objects

    @staticmethod
    def _caption(title: Optional[str], box: Box, bottom: float):
        """Reserve a caption band at the top of ``box``; return (objects, body box)."""
        if not title:
            return [], box
        caption = _text(
            title, Box(box.x, box.y, box.w, CAPTION_HEIGHT), fontSize=SECTION_FONT_SIZE, bold=True
        )
        body_y = box.y + CAPTION_HEIGHT + CAPTION_GAP
        body_h = min(max(MIN_CAPTIONED_BODY, box.bottom - body_y), bottom - body_y)
        return [caption], Box(box.x, body_y, box.w, body_h)

    def _table(self, table: IntentTable, box: Box, bottom: float) -> list:
        objects, body = self._caption(table.title, box, bottom)
        rows = [list(row) if row else [""] for row in table.rows] or [[""]]
        options = None
        if table.options is not None and table.options.headerRows is not None:
            options = TableOptions(autoPageHeaderRows=table.options.headerRows)
        objects.append(TableObject(rows=rows, box=_slide_box(body), options=options))
        return objects

    @staticmethod
    def _chart(chart: IntentChart, box: Box) -> ChartObject:
        extra = chart.options.model_dump(exclude_none=True) if chart.options else {}
        if chart.title:
            extra.update(title=chart.title, showTitle=True)
        return ChartObject(
            chartType=chart.chartType,
            data=chart.data,
            box=_slide_box(box),
            options=ChartOptions(**extra) if extra else None,
        )

    def _image(self, image: IntentImage, box: Box, bottom: float) -> list:
        if not image.dataUrl:
            logger.debug("Image without embedded data degraded to a text placeholder")
            label = f"Image: {image.url}" if image.url else "Image"
            return [_text(label, box, fontSize=SECTION_FONT_SIZE, italic=True)]
        objects, body = self._caption(image.title, box, bottom)
        objects.append(ImageObject(dataUrl=image.dataUrl, box=_slide_box(body)))
        return objects

    # ------------------------------------------------------------------
    # Right column
    # ------------------------------------------------------------------

    def _stack_sections(self, sections: List[BulletSection], column: Column, top: float, bottom: float) -> list:
        objects = []
        share = block_share(len(sections), top, bottom)
        y = top
        for index, section in enumerate(sections):
            h = share.height
            if overflows(y, h, bottom):
                logger.debug("Dropping %d bullet section(s) that do not fit the right column", len(sections) - index)
                break
            inner_y = y
            if section.title:
                objects.append(
                    _text(
                        section.title,
                        Box(column.x, inner_y, column.w, SECTION_TITLE_HEIGHT),
                        fontSize=SECTION_FONT_SIZE,
                        bold=True,
                    )
                )
                inner_y += SECTION_TITLE_HEIGHT + SECTION_TITLE_GAP
            body_h = max(MIN_SECTION_BODY, y + h - inner_y)
            objects.append(
                BulletsObject(
                    items=list(section.items),
                    box=_slide_box(Box(column.x, inner_y, column.w, body_h)),
                    options=TextOptions(fontSize=SECTION_FONT_SIZE),
                )
            )
            y += h + BLOCK_GAP
        return objects


def build_positioned_from_intent(intent: IntentSpec, canvas: Optional[Canvas] = None) -> PositionedSpec:
    """Convenience wrapper around :class:`IntentLayoutEngine`."""
    return IntentLayoutEngine(canvas).build(intent)
