"""
Data models for the three document variants.

Every model forbids unknown keys, so anything the normalizer could not map
onto a canonical key is reported by the validator instead of passing through.
Numbers and flags are strict as well: ``"18"`` is not a font size and
``"yes"`` is not a boolean.
"""
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    model_validator,
)

HexColor = Annotated[str, Field(pattern=r"^[0-9A-Fa-f]{6}$", description="6-digit hex without '#', e.g. FFFFFF")]
NonEmptyStr = Annotated[str, Field(min_length=1)]
SlidePos = Annotated[StrictFloat, Field(ge=0, le=100, description="inches")]
Align = Literal["left", "center", "right"]
ChartType = Literal["bar", "line", "pie", "doughnut", "area", "scatter", "radar"]
LegendPos = Literal["b", "tr", "l", "r", "t"]


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an absolute http(s) URL")
    return value


Url = Annotated[str, AfterValidator(_check_url)]


class DocumentKind(str, Enum):
    """Which variant a producer invocation targets."""
    POSITIONED = "positioned"
    INTENT = "intent"
    DECK = "deck"


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Positioned spec
# ---------------------------------------------------------------------------

class SlideBox(StrictModel):
    x: SlidePos
    y: SlidePos
    w: SlidePos
    h: SlidePos


class BulletStyle(StrictModel):
    type: Optional[Literal["number"]] = None
    code: Optional[str] = None
    style: Optional[str] = None


class TextOptions(StrictModel):
    fontFace: Optional[str] = None
    fontSize: Optional[StrictFloat] = Field(default=None, ge=6, le=96, description="pt")
    color: Optional[HexColor] = None
    bold: Optional[StrictBool] = None
    italic: Optional[StrictBool] = None
    underline: Optional[StrictBool] = None
    align: Optional[Align] = None
    valign: Optional[Literal["top", "middle", "bottom"]] = None
    bullet: Optional[Union[StrictBool, BulletStyle]] = None
    indentLevel: Optional[StrictInt] = Field(default=None, ge=0, le=32)
    lineSpacing: Optional[StrictFloat] = Field(default=None, ge=0, le=200)
    paraSpaceAfter: Optional[StrictFloat] = Field(default=None, ge=0, le=200)


class TableBorder(StrictModel):
    type: Optional[Literal["none", "solid", "dash"]] = None
    pt: Optional[str] = None
    color: Optional[HexColor] = None


class TableOptions(StrictModel):
    fontFace: Optional[str] = None
    fontSize: Optional[StrictFloat] = Field(default=None, ge=6, le=48)
    color: Optional[HexColor] = None
    fill: Optional[HexColor] = None
    align: Optional[Align] = None
    valign: Optional[Literal["top", "middle", "bottom", "t", "m", "b"]] = None
    border: Optional[TableBorder] = None
    autoPage: Optional[StrictBool] = None
    autoPageRepeatHeader: Optional[StrictBool] = None
    autoPageHeaderRows: Optional[StrictInt] = Field(default=None, ge=0, le=10)
    newSlideStartY: Optional[StrictFloat] = None


class ChartSeries(StrictModel):
    name: NonEmptyStr
    labels: List[NonEmptyStr] = Field(min_length=1)
    values: List[StrictFloat] = Field(min_length=1)


class ChartOptions(StrictModel):
    title: Optional[str] = None
    showTitle: Optional[StrictBool] = None
    showLegend: Optional[StrictBool] = None
    legendPos: Optional[LegendPos] = None
    showValue: Optional[StrictBool] = None
    showPercent: Optional[StrictBool] = None
    chartColors: Optional[List[HexColor]] = None


class TextObject(StrictModel):
    kind: Literal["text"] = "text"
    id: Optional[str] = None
    text: str
    box: SlideBox
    options: Optional[TextOptions] = None


class BulletsObject(StrictModel):
    kind: Literal["bullets"] = "bullets"
    id: Optional[str] = None
    items: List[NonEmptyStr] = Field(min_length=1)
    box: SlideBox
    options: Optional[TextOptions] = None


class ImageObject(StrictModel):
    kind: Literal["image"] = "image"
    id: Optional[str] = None
    dataUrl: Optional[str] = Field(default=None, description="data:image/...;base64,...")
    url: Optional[Url] = None
    box: SlideBox

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "ImageObject":
        if bool(self.dataUrl) == bool(self.url):
            raise ValueError("image requires exactly one of dataUrl or url")
        return self


class TableObject(StrictModel):
    kind: Literal["table"] = "table"
    id: Optional[str] = None
    rows: List[List[str]] = Field(min_length=1)
    box: SlideBox
    options: Optional[TableOptions] = None


class ChartObject(StrictModel):
    kind: Literal["chart"] = "chart"
    id: Optional[str] = None
    chartType: ChartType
    data: List[ChartSeries] = Field(min_length=1)
    box: SlideBox
    options: Optional[ChartOptions] = None


SlideObject = Annotated[
    Union[TextObject, BulletsObject, ImageObject, TableObject, ChartObject],
    Field(discriminator="kind"),
]


class SpecMeta(StrictModel):
    title: Optional[str] = None
    author: Optional[str] = None
    layout: Literal["LAYOUT_WIDE"] = "LAYOUT_WIDE"


class PositionedSlide(StrictModel):
    title: Optional[str] = None
    backgroundColor: Optional[HexColor] = None
    objects: List[SlideObject] = Field(min_length=1)


class PositionedSpec(StrictModel):
    meta: Optional[SpecMeta] = None
    slides: List[PositionedSlide] = Field(min_length=1)

    @property
    def layout(self) -> str:
        return self.meta.layout if self.meta else "LAYOUT_WIDE"


# ---------------------------------------------------------------------------
# Intent spec (coordinate-free)
# ---------------------------------------------------------------------------

class IntentChartOptions(StrictModel):
    showLegend: Optional[StrictBool] = None
    legendPos: Optional[LegendPos] = None
    showValue: Optional[StrictBool] = None
    showPercent: Optional[StrictBool] = None
    chartColors: Optional[List[HexColor]] = None


class IntentChart(StrictModel):
    title: Optional[str] = None
    chartType: ChartType
    data: List[ChartSeries] = Field(min_length=1)
    options: Optional[IntentChartOptions] = None


class IntentTableOptions(StrictModel):
    headerRows: Optional[StrictInt] = Field(default=None, ge=0, le=10)


class IntentTable(StrictModel):
    title: Optional[str] = None
    rows: List[List[str]] = Field(min_length=1)
    options: Optional[IntentTableOptions] = None


class IntentImage(StrictModel):
    title: Optional[str] = None
    dataUrl: Optional[str] = None
    url: Optional[Url] = None

    @model_validator(mode="after")
    def _has_source(self) -> "IntentImage":
        if not (self.dataUrl or self.url):
            raise ValueError("image requires dataUrl or url")
        return self


class BulletSection(StrictModel):
    title: Optional[str] = None
    items: List[NonEmptyStr] = Field(min_length=1)


class IntentSlide(StrictModel):
    title: Optional[str] = None
    backgroundColor: Optional[HexColor] = None
    bullets: Optional[List[NonEmptyStr]] = None
    bulletSections: Optional[List[BulletSection]] = None
    tables: Optional[List[IntentTable]] = None
    charts: Optional[List[IntentChart]] = None
    images: Optional[List[IntentImage]] = None
    speakerNotes: Optional[str] = None


class IntentSpec(StrictModel):
    meta: Optional[SpecMeta] = None
    slides: List[IntentSlide] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Deck spec (layout-typed)
# ---------------------------------------------------------------------------

LayoutType = Literal[
    "title",
    "title_bullets",
    "two_column_bullets",
    "image_left_bullets_right",
    "image_full_bleed",
    "table",
    "chart",
]


class DeckBullet(StrictModel):
    text: NonEmptyStr
    level: Optional[StrictInt] = Field(default=None, ge=0, le=4)
    emphasis: Optional[Literal["none", "strong"]] = None


class DeckImageAsset(StrictModel):
    id: NonEmptyStr
    src: NonEmptyStr = Field(description="URL / file path / data URI")
    alt: Optional[str] = None
    credit: Optional[str] = None


class DeckAssets(StrictModel):
    images: Optional[List[DeckImageAsset]] = None


class DeckFonts(StrictModel):
    head: NonEmptyStr
    body: NonEmptyStr


class DeckColors(StrictModel):
    bg: Optional[HexColor] = None
    text: Optional[HexColor] = None
    accent: Optional[HexColor] = None


class DeckTheme(StrictModel):
    layout: Literal["LAYOUT_WIDE"] = "LAYOUT_WIDE"
    fonts: DeckFonts
    colors: Optional[DeckColors] = None


class DeckMeta(StrictModel):
    title: NonEmptyStr
    subtitle: Optional[str] = None
    lang: Literal["ja", "en"] = "ja"
    audience: Optional[str] = None
    purpose: Optional[str] = None


class DeckImageRef(StrictModel):
    asset_id: Optional[str] = None
    src: Optional[str] = None
    caption: Optional[str] = None

    @model_validator(mode="after")
    def _has_reference(self) -> "DeckImageRef":
        if not (self.asset_id or self.src):
            raise ValueError("image requires asset_id or src")
        return self


class DeckTable(StrictModel):
    columns: List[NonEmptyStr] = Field(min_length=1)
    rows: List[List[str]] = Field(min_length=1)
    note: Optional[str] = None


class DeckChartSeries(StrictModel):
    name: NonEmptyStr
    values: List[StrictFloat] = Field(min_length=1)


class DeckChart(StrictModel):
    chart_type: Literal["bar", "line", "pie"]
    categories: Optional[List[NonEmptyStr]] = None
    series: List[DeckChartSeries] = Field(min_length=1)
    note: Optional[str] = None


class DeckColumn(StrictModel):
    heading: Optional[str] = None
    bullets: Optional[List[DeckBullet]] = None


class DeckSlide(StrictModel):
    id: NonEmptyStr
    layout_type: LayoutType
    title: NonEmptyStr
    subtitle: Optional[str] = None
    bullets: Optional[List[DeckBullet]] = None
    left: Optional[DeckColumn] = None
    right: Optional[DeckColumn] = None
    image: Optional[DeckImageRef] = None
    table: Optional[DeckTable] = None
    chart: Optional[DeckChart] = None
    speaker_notes: Optional[str] = None
    overrides: Optional[Dict[str, Any]] = None


class DeckSpec(StrictModel):
    meta: DeckMeta
    theme: DeckTheme
    assets: Optional[DeckAssets] = None
    slides: List[DeckSlide] = Field(min_length=1)


SCHEMAS = {
    DocumentKind.POSITIONED: PositionedSpec,
    DocumentKind.INTENT: IntentSpec,
    DocumentKind.DECK: DeckSpec,
}
