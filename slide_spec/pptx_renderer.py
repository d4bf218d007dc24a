#!/usr/bin/env python3
"""
PowerPoint renderer for positioned specs.

Every box in a positioned spec is already absolute (inches on the
LAYOUT_WIDE canvas), so rendering is a direct mapping of each object onto a
python-pptx shape on a blank slide.
"""

import base64
import binascii
import logging
import re
from io import BytesIO
from typing import List, Optional, Tuple

import requests
from PIL import Image
from pptx import Presentation
from pptx.chart.data import CategoryChartData, XyChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml import parse_xml
from pptx.oxml.ns import nsdecls, qn
from pptx.util import Inches, Pt

from .geometry import Canvas
from .models import (
    BulletsObject,
    ChartObject,
    ImageObject,
    PositionedSlide,
    PositionedSpec,
    TableBorder,
    TableObject,
    TextObject,
    TextOptions,
)

logger = logging.getLogger(__name__)

BLANK_LAYOUT = 6
BULLET_GLYPH = "• "
DEFAULT_TABLE_FONT_SIZE = 12
IMAGE_TIMEOUT = 30

CHART_TYPES = {
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "line": XL_CHART_TYPE.LINE_MARKERS,
    "pie": XL_CHART_TYPE.PIE,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
    "area": XL_CHART_TYPE.AREA,
    "scatter": XL_CHART_TYPE.XY_SCATTER,
    "radar": XL_CHART_TYPE.RADAR,
}

LEGEND_POSITIONS = {
    "b": XL_LEGEND_POSITION.BOTTOM,
    "tr": XL_LEGEND_POSITION.CORNER,
    "l": XL_LEGEND_POSITION.LEFT,
    "r": XL_LEGEND_POSITION.RIGHT,
    "t": XL_LEGEND_POSITION.TOP,
}

ALIGNMENTS = {"left": PP_ALIGN.LEFT, "center": PP_ALIGN.CENTER, "right": PP_ALIGN.RIGHT}

ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "t": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "m": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
    "b": MSO_ANCHOR.BOTTOM,
}

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.upper())


def decode_data_url(data_url: str) -> bytes:
    """Decode a ``data:`` URI into raw bytes.

    Raises:
        ValueError: when the URI is malformed or not base64-encoded
    """
    match = _DATA_URL.match(data_url.strip())
    if not match or not match.group("b64"):
        raise ValueError("unsupported data URL (expected base64)")
    try:
        return base64.b64decode(match.group("data"), validate=False)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 image data: {exc}") from exc


def bullet_marker(code: str) -> str:
    """Marker for a custom bullet: a hex code point (``"2022"``) or the literal glyph."""
    try:
        return chr(int(code, 16)) + " "
    except (ValueError, OverflowError):
        return code + " "


def fit_contain(image_size: Tuple[int, int], box: Tuple[int, int, int, int]) -> Tuple[int, int, int, int]:
    """Scale ``image_size`` to fit inside ``box`` (left, top, width, height), centred.

    Returns:
        tuple: (left, top, width, height) in the same units as ``box``
    """
    img_w, img_h = image_size
    left, top, width, height = box
    if img_w <= 0 or img_h <= 0:
        return box
    scale = min(width / img_w, height / img_h)
    fit_w, fit_h = int(img_w * scale), int(img_h * scale)
    return left + (width - fit_w) // 2, top + (height - fit_h) // 2, fit_w, fit_h


class PPTXRenderer:
    """
    Renderer for converting positioned specs to PowerPoint presentations.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def render(self, spec: PositionedSpec, output_path: str) -> str:
        """
        Render a positioned spec to a PowerPoint file.

        Args:
            spec: Validated positioned spec
            output_path: Path where the PPTX file should be saved

        Returns:
            str: ``output_path``
        """
        prs = self.build_presentation(spec)
        prs.save(output_path)
        logger.info("Wrote %d slide(s) to %s", len(prs.slides), output_path)
        return str(output_path)

    def build_presentation(self, spec: PositionedSpec):
        canvas = Canvas.for_layout(spec.layout)
        prs = Presentation()
        prs.slide_width = Inches(canvas.width)
        prs.slide_height = Inches(canvas.height)

        if spec.meta is not None:
            if spec.meta.title:
                prs.core_properties.title = spec.meta.title
            if spec.meta.author:
                prs.core_properties.author = spec.meta.author

        for slide_spec in spec.slides:
            slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
            self._render_slide(slide, slide_spec)
        return prs

    def _render_slide(self, slide, slide_spec: PositionedSlide):
        if slide_spec.backgroundColor:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = rgb(slide_spec.backgroundColor)

        for obj in slide_spec.objects:
            if isinstance(obj, TextObject):
                self._add_text(slide, obj)
            elif isinstance(obj, BulletsObject):
                self._add_bullets(slide, obj)
            elif isinstance(obj, TableObject):
                self._add_table(slide, obj)
            elif isinstance(obj, ChartObject):
                self._add_chart(slide, obj)
            elif isinstance(obj, ImageObject):
                self._add_image(slide, obj)

    @staticmethod
    def _box(obj) -> Tuple[int, int, int, int]:
        box = obj.box
        return Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _new_text_frame(self, slide, obj, options: Optional[TextOptions]):
        textbox = slide.shapes.add_textbox(*self._box(obj))
        text_frame = textbox.text_frame
        text_frame.clear()
        text_frame.word_wrap = True
        text_frame.margin_left = 0
        text_frame.margin_right = 0
        text_frame.margin_top = 0
        text_frame.margin_bottom = 0
        if options is not None and options.valign:
            text_frame.vertical_anchor = ANCHORS[options.valign]
        return text_frame

    @staticmethod
    def _apply_font(font, options: TextOptions):
        if options.fontFace:
            font.name = options.fontFace
        if options.fontSize:
            font.size = Pt(options.fontSize)
        if options.color:
            font.color.rgb = rgb(options.color)
        if options.bold is not None:
            font.bold = options.bold
        if options.italic is not None:
            font.italic = options.italic
        if options.underline is not None:
            font.underline = options.underline

    def _style_paragraph(self, paragraph, options: Optional[TextOptions]):
        """Apply text options to the paragraph defaults and to each of its runs."""
        if options is None:
            return
        self._apply_font(paragraph.font, options)
        for run in paragraph.runs:
            self._apply_font(run.font, options)
        if options.align:
            paragraph.alignment = ALIGNMENTS[options.align]
        if options.lineSpacing:
            paragraph.line_spacing = Pt(options.lineSpacing)
        if options.paraSpaceAfter is not None:
            paragraph.space_after = Pt(options.paraSpaceAfter)

    def _add_text(self, slide, obj: TextObject):
        options = obj.options
        text_frame = self._new_text_frame(slide, obj, options)
        lines = obj.text.split("\n") if obj.text else [""]
        prefix = BULLET_GLYPH if options is not None and options.bullet else ""
        for i, line in enumerate(lines):
            para = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
            para.text = prefix + line if line else line
            if options is not None and options.indentLevel:
                para.level = min(options.indentLevel, 8)
            self._style_paragraph(para, options)

    def _add_bullets(self, slide, obj: BulletsObject):
        """Add one paragraph per item; leading two-space groups become the paragraph level."""
        options = obj.options
        text_frame = self._new_text_frame(slide, obj, options)
        bullet = options.bullet if options is not None and options.bullet is not None else True
        numbered = not isinstance(bullet, bool) and bullet.type == "number"

        counters = {}
        for i, item in enumerate(obj.items):
            stripped = item.lstrip(" ")
            level = min((len(item) - len(stripped)) // 2, 8)
            para = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
            para.level = level

            if numbered:
                for deeper in [k for k in counters if k > level]:
                    counters.pop(deeper)
                counters[level] = counters.get(level, 0) + 1
                marker = f"{counters[level]}. "
            elif bullet is False:
                marker = ""
            elif not isinstance(bullet, bool) and bullet.code:
                marker = bullet_marker(bullet.code)
            else:
                marker = BULLET_GLYPH
            para.text = marker + stripped
            self._style_paragraph(para, options)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _add_table(self, slide, obj: TableObject):
        rows = [list(row) or [""] for row in obj.rows]
        cols = max(len(row) for row in rows)
        options = obj.options

        left, top, width, height = self._box(obj)
        table = slide.shapes.add_table(len(rows), cols, left, top, width, height).table

        header_rows = 1
        if options is not None and options.autoPageHeaderRows is not None:
            header_rows = options.autoPageHeaderRows
        table.first_row = header_rows > 0

        if options is not None and options.border is not None:
            self._apply_table_borders(table, options.border)

        font_size = options.fontSize if options is not None and options.fontSize else DEFAULT_TABLE_FONT_SIZE
        for r, row in enumerate(rows):
            for c in range(cols):
                cell = table.cell(r, c)
                cell.text = row[c] if c < len(row) else ""
                if options is not None and options.fill:
                    cell.fill.solid()
                    cell.fill.fore_color.rgb = rgb(options.fill)
                if options is not None and options.valign:
                    cell.vertical_anchor = ANCHORS[options.valign]
                for para in cell.text_frame.paragraphs:
                    if options is not None and options.align:
                        para.alignment = ALIGNMENTS[options.align]
                    for font in [para.font] + [run.font for run in para.runs]:
                        font.size = Pt(font_size)
                        if r < header_rows:
                            font.bold = True
                        if options is not None and options.fontFace:
                            font.name = options.fontFace
                        if options is not None and options.color:
                            font.color.rgb = rgb(options.color)

    @staticmethod
    def _apply_table_borders(table, border: TableBorder):
        """Apply the same border to every side of every cell using raw XML."""
        match = re.search(r"\d+(?:\.\d+)?", border.pt or "")
        width = Pt(float(match.group(0))) if match else Pt(1)
        color = (border.color or "000000").upper()
        dash = "dash" if border.type == "dash" else "solid"

        def _line_xml(side):
            if border.type == "none":
                return f'<a:{side} w="0" {nsdecls("a")}><a:noFill/></a:{side}>'
            return (
                f'<a:{side} w="{int(width)}" {nsdecls("a")}>'
                f'<a:solidFill><a:srgbClr val="{color}"/></a:solidFill>'
                f'<a:prstDash val="{dash}"/>'
                f'</a:{side}>'
            )

        for row in table.rows:
            for cell in row.cells:
                tcPr = cell._tc.get_or_add_tcPr()
                for side in ("lnL", "lnR", "lnT", "lnB"):
                    existing = tcPr.find(qn(f"a:{side}"))
                    if existing is not None:
                        tcPr.remove(existing)
                    tcPr.append(parse_xml(_line_xml(side)))

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    @staticmethod
    def _chart_data(obj: ChartObject):
        if obj.chartType == "scatter":
            data = XyChartData()
            for series in obj.data:
                xy = data.add_series(series.name)
                for index, value in enumerate(series.values):
                    label = series.labels[index] if index < len(series.labels) else None
                    try:
                        x = float(label)
                    except (TypeError, ValueError):
                        x = float(index + 1)
                    xy.add_data_point(x, value)
            return data

        categories: List[str] = max((s.labels for s in obj.data), key=len)
        data = CategoryChartData()
        data.categories = categories
        for series in obj.data:
            values = list(series.values[: len(categories)])
            values += [None] * (len(categories) - len(values))
            data.add_series(series.name, values)
        return data

    def _add_chart(self, slide, obj: ChartObject):
        graphic_frame = slide.shapes.add_chart(CHART_TYPES[obj.chartType], *self._box(obj), self._chart_data(obj))
        chart = graphic_frame.chart
        options = obj.options
        if options is None:
            return

        if options.showLegend is not None:
            chart.has_legend = options.showLegend
        if chart.has_legend:
            chart.legend.include_in_layout = False
            if options.legendPos:
                chart.legend.position = LEGEND_POSITIONS[options.legendPos]

        if options.title and options.showTitle is not False:
            chart.has_title = True
            chart.chart_title.text_frame.text = options.title
        elif options.showTitle is False:
            chart.has_title = False

        if (options.showValue or options.showPercent) and obj.chartType == "scatter":
            # XY plots carry no plot-level label element
            logger.debug("Data labels are not supported on scatter charts; skipping")
        elif options.showValue or options.showPercent:
            plot = chart.plots[0]
            plot.has_data_labels = True
            labels = plot.data_labels
            labels.show_value = bool(options.showValue)
            if options.showPercent:
                labels.show_percentage = True

        if options.chartColors:
            self._apply_chart_colors(chart, obj.chartType, options.chartColors)

    @staticmethod
    def _apply_chart_colors(chart, chart_type: str, colors: List[str]):
        plot = chart.plots[0]
        if chart_type in ("pie", "doughnut"):
            for index, point in enumerate(plot.series[0].points):
                point.format.fill.solid()
                point.format.fill.fore_color.rgb = rgb(colors[index % len(colors)])
            return
        for index, series in enumerate(plot.series):
            color = rgb(colors[index % len(colors)])
            if chart_type in ("line", "scatter", "radar"):
                series.format.line.color.rgb = color
            else:
                series.format.fill.solid()
                series.format.fill.fore_color.rgb = color

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def _load_image(self, obj: ImageObject) -> bytes:
        if obj.dataUrl:
            return decode_data_url(obj.dataUrl)
        response = self.session.get(obj.url, timeout=IMAGE_TIMEOUT)
        response.raise_for_status()
        return response.content

    def _add_image(self, slide, obj: ImageObject):
        box = self._box(obj)
        try:
            blob = self._load_image(obj)
            with Image.open(BytesIO(blob)) as img:
                size = img.size
        except (requests.RequestException, ValueError, OSError) as exc:
            logger.warning("Could not load image %s: %s", obj.url or "(data URL)", exc)
            placeholder = slide.shapes.add_textbox(*box)
            placeholder.text_frame.text = f"[Missing image: {obj.url or 'data URL'}]"
            return

        left, top, width, height = fit_contain(size, box)
        slide.shapes.add_picture(BytesIO(blob), left, top, width=width, height=height)
