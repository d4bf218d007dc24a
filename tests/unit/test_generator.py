#!/usr/bin/env python3
"""
End-to-end tests for SlideSpecGenerator and the command-line entry point.
"""

import json

import pytest
from pptx import Presentation

from slide_spec.errors import InvalidDocumentError, ProducerNotConfiguredError
from slide_spec.generator import SlideSpecGenerator, main
from slide_spec.models import DeckSpec, DocumentKind, PositionedSpec

AZURE_VARS = ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_DEPLOYMENT_NAME")


@pytest.fixture(autouse=True)
def no_debug_env(monkeypatch):
    monkeypatch.delenv("SLIDES_DEBUG", raising=False)


def test_generate_deck_end_to_end(fake_producer, deck_doc, tmp_path):
    producer = fake_producer(deck_doc)
    generator = SlideSpecGenerator(producer=producer, output_dir=tmp_path)

    output = generator.generate(
        "deck",
        [{"role": "user", "content": "launch deck"}],
        "launch",
        preview_path="launch",
    )

    assert output == str(tmp_path / "launch.pptx")
    prs = Presentation(output)
    assert len(prs.slides) == 3
    html = (tmp_path / "launch.html").read_text(encoding="utf-8")
    assert html.count("pptx-dom-preview") >= 3
    assert len(producer.calls) == 1


def test_generate_passes_current_html(fake_producer, intent_doc, tmp_path):
    producer = fake_producer(intent_doc)
    generator = SlideSpecGenerator(producer=producer, output_dir=tmp_path)

    generator.generate(DocumentKind.INTENT, [{"role": "user", "content": "plan"}], current_html="<p>draft</p>")

    context = producer.calls[0]["messages"][1]["content"]
    assert "<p>draft</p>" in context
    assert (tmp_path / "presentation.pptx").exists()


def test_load_document_normalizes_and_validates(positioned_doc):
    positioned_doc["pages"] = positioned_doc.pop("slides")
    document = SlideSpecGenerator.load_document("positioned", positioned_doc)
    assert isinstance(document, PositionedSpec)


def test_load_document_rejects_invalid():
    with pytest.raises(InvalidDocumentError) as exc_info:
        SlideSpecGenerator.load_document(DocumentKind.DECK, {"slides": []})
    assert exc_info.value.status == 422
    assert exc_info.value.kind == "deck"


def test_to_positioned_dispatch(deck_doc, intent_doc, positioned_doc):
    generator = SlideSpecGenerator(producer=object())
    positioned = PositionedSpec.model_validate(positioned_doc)
    assert generator.to_positioned(positioned) is positioned
    assert len(generator.to_positioned(DeckSpec.model_validate(deck_doc)).slides) == 3
    with pytest.raises(TypeError):
        generator.to_positioned(intent_doc)


def test_missing_credentials(monkeypatch):
    for name in AZURE_VARS:
        monkeypatch.delenv(name, raising=False)
    generator = SlideSpecGenerator()

    with pytest.raises(ProducerNotConfiguredError) as exc_info:
        generator.request_document("deck", [{"role": "user", "content": "hi"}])

    assert exc_info.value.status == 503
    assert exc_info.value.missing == list(AZURE_VARS)


def test_debug_entries_empty_without_recorder(fake_producer):
    assert SlideSpecGenerator(producer=fake_producer()).debug_entries() == []


def test_cli_renders_saved_document(deck_doc, tmp_path):
    source = tmp_path / "deck.json"
    source.write_text(json.dumps(deck_doc), encoding="utf-8")
    output = tmp_path / "out" / "deck.pptx"
    preview = tmp_path / "out" / "deck.html"
    spec_json = tmp_path / "out" / "positioned.json"

    main(["--mode", "deck", "--input", str(source), "-o", str(output), "--preview", str(preview), "--spec-json", str(spec_json)])

    assert output.exists()
    assert preview.exists()
    positioned = json.loads(spec_json.read_text(encoding="utf-8"))
    assert len(positioned["slides"]) == 3
    assert positioned["slides"][0]["backgroundColor"] == "101820"


def test_cli_reports_invalid_document(tmp_path):
    source = tmp_path / "bad.json"
    source.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["--mode", "intent", "--input", str(source), "-o", str(tmp_path / "x.pptx")])

    assert "not valid JSON" in str(exc_info.value)


def test_cli_missing_input(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main(["--input", str(tmp_path / "missing.json"), "-o", str(tmp_path / "x.pptx")])
    assert exc_info.value.code == 1


def test_cli_requires_a_source():
    with pytest.raises(SystemExit):
        main(["--mode", "deck"])


def test_write_html_page(fake_producer, tmp_path):
    producer = fake_producer("```html\n<section><h1>Plan</h1></section>\n```")
    generator = SlideSpecGenerator(producer=producer, output_dir=tmp_path)

    output = generator.write_html([{"role": "user", "content": "a plan page"}], "plan", current_html="<p>old</p>")

    assert output == str(tmp_path / "plan.html")
    html = (tmp_path / "plan.html").read_text(encoding="utf-8")
    assert html.startswith("<!doctype html>")
    assert "<section><h1>Plan</h1></section>" in html
    assert "```" not in html
    assert "<p>old</p>" in producer.calls[0]["messages"][1]["content"]


def test_cli_html_mode_writes_page(monkeypatch, fake_producer, tmp_path):
    for name in AZURE_VARS:
        monkeypatch.setenv(name, "https://res.openai.azure.com" if name == "AZURE_OPENAI_ENDPOINT" else "x")
    producer = fake_producer("<!doctype html><html><body>Hi</body></html>")
    monkeypatch.setattr("slide_spec.generator.AzureOpenAIProducer", lambda settings, recorder=None: producer)

    main(["--mode", "html", "--prompt", "a page", "-o", str(tmp_path / "page.pptx")])

    assert (tmp_path / "page.html").read_text(encoding="utf-8") == "<!doctype html><html><body>Hi</body></html>"
    assert not (tmp_path / "page.pptx").exists()
    assert producer.calls[0]["temperature"] == 0.3


def test_cli_html_mode_rejects_input(deck_doc, tmp_path):
    source = tmp_path / "deck.json"
    source.write_text(json.dumps(deck_doc), encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["--mode", "html", "--input", str(source)])
    assert exc_info.value.code == 2
