#!/usr/bin/env python3
"""
Layout tests for the intent engine: positions, floors, overflow and
the at-least-one-object rule.
"""

import pytest

from slide_spec.geometry import Canvas
from slide_spec.layout_engine import (
    BLOCK_FLOOR,
    COLUMN_GUTTER,
    SECTION_COLUMN_RATIO,
    block_share,
    build_positioned_from_intent,
)
from slide_spec.models import ImageObject, IntentSpec, TableObject, TextObject

CANVAS = Canvas()

CHART = {"chartType": "bar", "data": [{"name": "s", "labels": ["a", "b"], "values": [1, 2]}]}


def layout(doc):
    return build_positioned_from_intent(IntentSpec.model_validate(doc))


def rectangles_overlap(a, b):
    """Check if two boxes overlap (touching edges do not count)."""
    if a.x + a.w <= b.x or b.x + b.w <= a.x:
        return False
    if a.y + a.h <= b.y or b.y + b.h <= a.y:
        return False
    return True


def assert_in_canvas(spec):
    for slide in spec.slides:
        assert slide.objects, "every slide needs at least one object"
        for obj in slide.objects:
            box = obj.box
            assert box.x >= 0 and box.y >= 0
            assert box.x + box.w <= CANVAS.width + 0.001, obj
            assert box.y + box.h <= CANVAS.height + 0.001, obj


def test_title_bullets_and_section(intent_doc):
    spec = layout(intent_doc)
    objects = spec.slides[0].objects

    assert len(objects) == 4
    title, bullets, header, section = objects

    assert title.text == "Q1"
    assert (title.box.x, title.box.y, title.box.h) == (0.6, 0.6, 0.7)
    assert title.options.fontSize == 28 and title.options.bold

    assert bullets.items == ["A", "B"]
    assert bullets.box.x == 0.6
    assert bullets.box.y == pytest.approx(1.5)

    assert header.text == "Notes"
    assert section.items == ["x"]

    left_w = CANVAS.content_width * SECTION_COLUMN_RATIO - COLUMN_GUTTER / 2
    assert bullets.box.x + bullets.box.w == pytest.approx(0.6 + left_w, abs=1e-3)
    assert header.box.x == pytest.approx(0.6 + left_w + COLUMN_GUTTER, abs=1e-3)
    assert bullets.box.x + bullets.box.w <= header.box.x


def test_meta_is_carried(intent_doc):
    intent_doc["meta"]["author"] = "Ops"
    spec = layout(intent_doc)
    assert spec.meta.title == "Plan"
    assert spec.meta.author == "Ops"
    assert spec.meta.layout == "LAYOUT_WIDE"


def test_mixed_content_stays_in_canvas(png_data_url):
    doc = {
        "slides": [
            {
                "title": "Everything",
                "bullets": ["one", "two"],
                "tables": [{"title": "T", "rows": [["a", "b"], []]}],
                "charts": [dict(CHART, title="Chart")],
                "images": [{"title": "Pic", "dataUrl": png_data_url}],
                "bulletSections": [{"title": "S1", "items": ["x"]}, {"items": ["y"]}],
            },
            {"bullets": ["no title"]},
            {"title": "Only a title"},
        ]
    }
    spec = layout(doc)
    assert_in_canvas(spec)

    objects = spec.slides[0].objects
    for i, a in enumerate(objects):
        for b in objects[i + 1:]:
            assert not rectangles_overlap(a.box, b.box), (a, b)

    table = next(o for o in objects if isinstance(o, TableObject))
    assert table.rows == [["a", "b"], [""]]
    assert any(isinstance(o, ImageObject) for o in objects)

    # no title: content starts at the top margin
    assert spec.slides[1].objects[0].box.y == pytest.approx(0.6)


def test_blocks_respect_floor_and_drop_overflow():
    doc = {"slides": [{"title": "Many", "charts": [CHART] * 8}]}
    spec = layout(doc)
    objects = spec.slides[0].objects

    charts = objects[1:]
    assert 0 < len(charts) < 8
    for chart in charts:
        assert chart.box.h >= BLOCK_FLOOR - 1e-6
    assert_in_canvas(spec)


def test_block_share():
    share = block_share(1, 1.5, 6.9)
    assert share.height == pytest.approx(5.4)
    share = block_share(20, 1.5, 6.9)
    assert share.height == BLOCK_FLOOR
    # top below bottom: the remaining height is clamped up
    assert block_share(1, 7.0, 6.9).remaining == 1.0


def test_image_without_data_becomes_placeholder():
    spec = layout({"slides": [{"images": [{"title": "Remote", "url": "https://example.com/a.png"}]}]})
    (obj,) = spec.slides[0].objects
    assert isinstance(obj, TextObject)
    assert obj.text == "Image: https://example.com/a.png"
    assert obj.options.italic


def test_empty_slide_gets_placeholder():
    spec = layout({"slides": [{}]})
    (obj,) = spec.slides[0].objects
    assert obj.text == ""
    assert (obj.box.x, obj.box.y, obj.box.w, obj.box.h) == (0.1, 0.1, 0.1, 0.1)


def test_chart_title_and_options_are_merged():
    chart = dict(CHART, title="Revenue", options={"showLegend": True, "legendPos": "r"})
    spec = layout({"slides": [{"charts": [chart]}]})
    options = spec.slides[0].objects[0].options
    assert options.title == "Revenue" and options.showTitle
    assert options.showLegend and options.legendPos == "r"


def test_table_header_rows_option():
    spec = layout({"slides": [{"tables": [{"rows": [["h"], ["v"]], "options": {"headerRows": 2}}]}]})
    assert spec.slides[0].objects[0].options.autoPageHeaderRows == 2


def test_speaker_notes_are_dropped():
    spec = layout({"slides": [{"title": "t", "speakerNotes": "say hi"}]})
    assert [o.text for o in spec.slides[0].objects] == ["t"]
