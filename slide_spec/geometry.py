"""
Geometry primitives shared by the layout engines.

All box math is done in inches on the LAYOUT_WIDE canvas (13.333 x 7.5).
Pixels and points only appear at the preview boundary.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

DEFAULT_LAYOUT = "LAYOUT_WIDE"

# layout literal -> (width, height, margin) in inches
CANVAS_LAYOUTS: Dict[str, Tuple[float, float, float]] = {
    "LAYOUT_WIDE": (13.333, 7.5, 0.6),
}

CANVAS_WIDTH, CANVAS_HEIGHT, MARGIN = CANVAS_LAYOUTS[DEFAULT_LAYOUT]

# Preview-only ratios
PX_PER_INCH = 96
PX_PER_PT = 96 / 72

# Slack used when comparing a block's bottom edge against a column bound
EPSILON = 0.001


def clamp(min_value: float, value: float, max_value: float) -> float:
    """Clamp ``value`` into ``[min_value, max_value]``.

    The lower bound wins when the bounds cross, mirroring ``max(min, min(v, max))``.
    """
    return max(min_value, min(value, max_value))


def px(inches: float) -> float:
    """Convert inches to preview pixels."""
    return inches * PX_PER_INCH


def pt_to_px(points: float) -> float:
    """Convert a font size in points to preview pixels."""
    return points * PX_PER_PT


@dataclass(frozen=True)
class Canvas:
    """Fixed slide canvas with a uniform margin."""
    width: float = CANVAS_WIDTH
    height: float = CANVAS_HEIGHT
    margin: float = MARGIN

    @classmethod
    def for_layout(cls, layout: str = DEFAULT_LAYOUT) -> "Canvas":
        width, height, margin = CANVAS_LAYOUTS.get(layout, CANVAS_LAYOUTS[DEFAULT_LAYOUT])
        return cls(width=width, height=height, margin=margin)

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_width(self) -> float:
        return self.width - self.margin * 2

    @property
    def content_top(self) -> float:
        return self.margin

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin

    def content_area(self, top_offset: float = 0.0) -> "Box":
        """Usable area inside the margins, starting ``top_offset`` below the top margin."""
        top = self.content_top + top_offset
        return Box(self.content_left, top, self.content_width, self.content_bottom - top)

    def split_columns(self, left_ratio: float, gutter: float) -> Tuple["Column", "Column"]:
        """Split the usable width into a left and right column separated by ``gutter``."""
        left_w = self.content_width * left_ratio - gutter / 2
        right_w = self.content_width - left_w - gutter
        left = Column(x=self.content_left, w=left_w)
        right = Column(x=self.content_left + left_w + gutter, w=right_w)
        return left, right

    def contains(self, box: "Box") -> bool:
        return (
            box.x >= 0
            and box.y >= 0
            and box.right <= self.width + EPSILON
            and box.bottom <= self.height + EPSILON
        )


@dataclass(frozen=True)
class Column:
    """Horizontal span of a layout column."""
    x: float
    w: float

    @property
    def right(self) -> float:
        return self.x + self.w


@dataclass(frozen=True)
class Box:
    """Absolute bounding box in inches."""
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "w": round(self.w, 4),
            "h": round(self.h, 4),
        }


# Degenerate object used to keep the "at least one object per slide" invariant
PLACEHOLDER_BOX = Box(0.1, 0.1, 0.1, 0.1)
