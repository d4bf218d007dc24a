"""
HTML preview of positioned slides.

Each slide becomes a fixed-size, relatively positioned ``div`` and every
object an absolutely positioned child, scaled at 96 px per inch and 96/72 px
per point.  The markup is assembled with BeautifulSoup so text content is
escaped for us.
"""
import logging
from typing import Dict, Optional

from bs4 import BeautifulSoup

from .geometry import Canvas, pt_to_px, px
from .models import (
    BulletsObject,
    ChartObject,
    ImageObject,
    PositionedSlide,
    PositionedSpec,
    TableObject,
    TextObject,
)

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = "#FFFFFF"

PREVIEW_CSS = """
body { margin: 0; padding: 24px; background: #2b2b2b; font-family: sans-serif; }
.pptx-dom-preview { margin: 0 auto 24px auto; box-shadow: 0 2px 8px rgba(0, 0, 0, 0.4); }
"""


def _length(value: float) -> str:
    return f"{round(value, 2):g}px"


def _style(props: Dict[str, Optional[str]]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in props.items() if value is not None)


def box_style(box) -> Dict[str, Optional[str]]:
    return {
        "position": "absolute",
        "left": _length(px(box.x)),
        "top": _length(px(box.y)),
        "width": _length(px(box.w)),
        "height": _length(px(box.h)),
        "overflow": "hidden",
    }


def text_style(options) -> Dict[str, Optional[str]]:
    """CSS properties for text-like options (positioned text, bullets, tables, charts)."""
    if options is None:
        return {}
    font_size = getattr(options, "fontSize", None)
    line_spacing = getattr(options, "lineSpacing", None)
    color = getattr(options, "color", None)
    return {
        "font-family": getattr(options, "fontFace", None),
        "font-size": _length(pt_to_px(font_size)) if font_size else None,
        "font-weight": "700" if getattr(options, "bold", None) else None,
        "font-style": "italic" if getattr(options, "italic", None) else None,
        "text-decoration": "underline" if getattr(options, "underline", None) else None,
        "color": f"#{color}" if color else None,
        "text-align": getattr(options, "align", None),
        "line-height": _length(pt_to_px(line_spacing)) if line_spacing else None,
    }


class PreviewRenderer:
    """Builds preview markup for positioned slides."""

    def __init__(self, canvas: Optional[Canvas] = None):
        self.canvas = canvas or Canvas()
        self.soup = BeautifulSoup("", "html.parser")

    def _tag(self, name: str, style: Optional[Dict[str, Optional[str]]] = None, text: Optional[str] = None, **attrs):
        tag = self.soup.new_tag(name, attrs=attrs)
        if style:
            tag["style"] = _style(style)
        if text is not None:
            tag.string = text
        return tag

    def slide(self, slide: PositionedSlide):
        background = f"#{slide.backgroundColor}" if slide.backgroundColor else DEFAULT_BACKGROUND
        container = self._tag(
            "div",
            {
                "position": "relative",
                "width": _length(px(self.canvas.width)),
                "height": _length(px(self.canvas.height)),
                "background": background,
            },
            **{"class": "pptx-dom-preview"},
        )
        for obj in slide.objects:
            container.append(self.render_object(obj))
        return container

    def render_object(self, obj):
        wrapper = self._tag("div", box_style(obj.box))
        if obj.id:
            wrapper["data-id"] = obj.id

        if isinstance(obj, TextObject):
            wrapper.append(self._tag("div", {"width": "100%", "height": "100%", **text_style(obj.options)}, obj.text))
        elif isinstance(obj, BulletsObject):
            ul = self._tag("ul", {"margin": "0", "padding-left": "1.2em", **text_style(obj.options)})
            for item in obj.items:
                ul.append(self._tag("li", text=item))
            wrapper.append(ul)
        elif isinstance(obj, TableObject):
            table = self._tag(
                "table",
                {"width": "100%", "height": "100%", "border-collapse": "collapse", **text_style(obj.options)},
            )
            tbody = self._tag("tbody")
            for row in obj.rows:
                tr = self._tag("tr")
                for cell in row:
                    tr.append(self._tag("td", {"padding": "6px"}, cell))
                tbody.append(tr)
            table.append(tbody)
            wrapper.append(table)
        elif isinstance(obj, ImageObject):
            wrapper.append(
                self._tag(
                    "img",
                    {"width": "100%", "height": "100%", "object-fit": "contain"},
                    alt="",
                    src=obj.dataUrl or obj.url or "",
                )
            )
        elif isinstance(obj, ChartObject):
            # Charts are summarized; the writer produces the real chart
            wrapper["style"] = _style({**box_style(obj.box), **text_style(obj.options)})
            title = obj.options.title if obj.options and obj.options.title else "Chart"
            wrapper.append(self._tag("div", {"font-weight": "700", "margin-bottom": "6px"}, title))
            wrapper.append(
                self._tag("div", {"font-size": "12px", "opacity": "0.75"}, f"{obj.chartType} / series: {len(obj.data)}")
            )
        return wrapper


def render_slide_html(slide: PositionedSlide, canvas: Optional[Canvas] = None) -> str:
    """Render one positioned slide as an HTML fragment."""
    return str(PreviewRenderer(canvas).slide(slide))


def render_preview_html(spec: PositionedSpec) -> str:
    """Render every slide of ``spec`` into a standalone HTML document."""
    renderer = PreviewRenderer(Canvas.for_layout(spec.layout))
    soup = BeautifulSoup("<!DOCTYPE html><html><head></head><body></body></html>", "html.parser")
    soup.head.append(soup.new_tag("meta", attrs={"charset": "utf-8"}))
    title = soup.new_tag("title")
    title.string = spec.meta.title if spec.meta and spec.meta.title else "Slide preview"
    soup.head.append(title)
    style = soup.new_tag("style")
    style.string = PREVIEW_CSS
    soup.head.append(style)

    for slide in spec.slides:
        soup.body.append(renderer.slide(slide))
    logger.debug("Rendered preview for %d slide(s)", len(spec.slides))
    return str(soup)
