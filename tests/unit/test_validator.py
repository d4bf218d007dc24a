"""Test schema validation of the three document variants."""

import copy

import pytest

from slide_spec.models import DeckSpec, DocumentKind, IntentSpec, PositionedSpec
from slide_spec.validator import ValidationError, flatten_errors, validate_document


def test_valid_documents(positioned_doc, intent_doc, deck_doc):
    assert isinstance(validate_document(DocumentKind.POSITIONED, positioned_doc).value, PositionedSpec)
    assert isinstance(validate_document(DocumentKind.INTENT, intent_doc).value, IntentSpec)
    assert isinstance(validate_document("deck", deck_doc).value, DeckSpec)


@pytest.mark.parametrize(
    "kind,path",
    [
        (DocumentKind.POSITIONED, ()),
        (DocumentKind.POSITIONED, ("slides", 0)),
        (DocumentKind.POSITIONED, ("slides", 0, "objects", 0)),
        (DocumentKind.POSITIONED, ("slides", 0, "objects", 1, "options")),
        (DocumentKind.INTENT, ("slides", 0)),
        (DocumentKind.DECK, ("theme",)),
        (DocumentKind.DECK, ("slides", 1, "bullets", 0)),
    ],
)
def test_unknown_keys_are_rejected(kind, path, positioned_doc, intent_doc, deck_doc):
    doc = copy.deepcopy({DocumentKind.POSITIONED: positioned_doc, DocumentKind.INTENT: intent_doc, DocumentKind.DECK: deck_doc}[kind])
    node = doc
    for part in path:
        node = node[part]
    node["unexpected"] = True

    result = validate_document(kind, doc)

    assert not result.ok
    assert any(err.path[-1] == "unexpected" for err in result.errors)


def test_none_is_always_invalid():
    result = validate_document(DocumentKind.DECK, None)
    assert not result.ok
    assert result.errors[0].type == "json_invalid"
    assert result.flatten() == "$: response was not valid JSON"


def test_bad_hex_color_reports_path(positioned_doc):
    positioned_doc["slides"][0]["backgroundColor"] = "#FFFFFF"
    result = validate_document(DocumentKind.POSITIONED, positioned_doc)
    assert not result.ok
    assert result.errors[0].dotted_path == "slides.0.backgroundColor"


def test_empty_slide_list_is_invalid():
    assert not validate_document(DocumentKind.INTENT, {"slides": []}).ok


def test_image_requires_exactly_one_source():
    box = {"x": 1, "y": 1, "w": 1, "h": 1}
    both = {"slides": [{"objects": [{"kind": "image", "dataUrl": "data:image/png;base64,AA", "url": "https://e.com/a.png", "box": box}]}]}
    neither = {"slides": [{"objects": [{"kind": "image", "box": box}]}]}
    assert not validate_document(DocumentKind.POSITIONED, both).ok
    assert not validate_document(DocumentKind.POSITIONED, neither).ok


def test_chart_series_need_labels_and_values():
    chart = {
        "kind": "chart",
        "chartType": "line",
        "data": [{"name": "s", "labels": [], "values": [1]}],
        "box": {"x": 1, "y": 1, "w": 1, "h": 1},
    }
    assert not validate_document(DocumentKind.POSITIONED, {"slides": [{"objects": [chart]}]}).ok


def test_box_values_are_bounded():
    obj = {"kind": "text", "text": "t", "box": {"x": -1, "y": 0, "w": 1, "h": 101}}
    result = validate_document(DocumentKind.POSITIONED, {"slides": [{"objects": [obj]}]})
    paths = {err.dotted_path for err in result.errors}
    assert "slides.0.objects.0.text.box.x" in paths
    assert "slides.0.objects.0.text.box.h" in paths


def test_deck_layout_type_is_closed(deck_doc):
    deck_doc["slides"][0]["layout_type"] = "three_columns"
    assert not validate_document(DocumentKind.DECK, deck_doc).ok


def test_deck_bullet_level_is_bounded(deck_doc):
    deck_doc["slides"][1]["bullets"][0]["level"] = 5
    assert not validate_document(DocumentKind.DECK, deck_doc).ok


def test_flatten_errors_one_line_each():
    errors = [ValidationError(("slides",), "Field required"), ValidationError((), "bad")]
    assert flatten_errors(errors) == "slides: Field required\n$: bad"


def test_numbers_and_flags_are_not_coerced():
    obj = {
        "kind": "text",
        "text": "t",
        "box": {"x": "1.5", "y": True, "w": "2", "h": 1},
        "options": {"bold": "yes", "fontSize": "18"},
    }
    result = validate_document(DocumentKind.POSITIONED, {"slides": [{"objects": [obj]}]})

    assert not result.ok
    paths = {err.dotted_path for err in result.errors}
    assert {
        "slides.0.objects.0.text.box.x",
        "slides.0.objects.0.text.box.y",
        "slides.0.objects.0.text.box.w",
        "slides.0.objects.0.text.options.bold",
        "slides.0.objects.0.text.options.fontSize",
    } <= paths
    assert "slides.0.objects.0.text.box.h" not in paths


def test_strict_types_across_variants(intent_doc, deck_doc):
    intent_doc["slides"][0]["tables"] = [{"rows": [["a"]], "options": {"headerRows": "1"}}]
    assert not validate_document(DocumentKind.INTENT, intent_doc).ok

    deck_doc["slides"][1]["bullets"][1]["level"] = "1"
    assert not validate_document(DocumentKind.DECK, deck_doc).ok


def test_integer_values_are_accepted_for_floats():
    chart = {
        "kind": "chart",
        "chartType": "bar",
        "data": [{"name": "s", "labels": ["a"], "values": [3]}],
        "box": {"x": 1, "y": 1, "w": 2, "h": 2},
        "options": {"showLegend": False},
    }
    result = validate_document(DocumentKind.POSITIONED, {"slides": [{"objects": [chart]}]})
    assert result.ok, result.flatten()
    assert result.value.slides[0].objects[0].data[0].values == [3.0]


def test_deeply_nested_document_is_reported():
    deep = []
    node = deep
    for _ in range(5000):
        child = []
        node.append(child)
        node = child
    result = validate_document(DocumentKind.POSITIONED, {"slides": deep})
    assert not result.ok
