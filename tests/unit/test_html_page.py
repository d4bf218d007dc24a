"""Test HTML page generation and markup normalization."""

import pytest

from slide_spec.errors import InvalidConversationError, SlideSpecError
from slide_spec.html_page import (
    HTML_TEMPERATURE,
    build_html_messages,
    generate_html,
    normalize_html,
)
from slide_spec.prompts import HTML_SYSTEM


CONVERSATION = [{"role": "user", "content": "A landing page for the launch"}]


def test_fenced_fragment_is_wrapped():
    html = normalize_html("```html\n<h1>Launch</h1>\n```")

    assert html.startswith("<!doctype html>\n<html lang=\"ja\">")
    assert "<title>Slide Spec</title>" in html
    assert '<meta charset="utf-8" />' in html
    assert "<h1>Launch</h1>" in html
    assert "```" not in html


def test_wrap_language_can_be_chosen():
    assert '<html lang="en">' in normalize_html("<p>x</p>", lang="en")


def test_complete_document_is_kept():
    page = "<!DOCTYPE html>\n<html><body><p>x</p></body></html>"
    assert normalize_html("```\n" + page + "\n```") == page


def test_missing_doctype_is_added():
    page = '<html lang="en"><body>x</body></html>'
    assert normalize_html(page) == "<!doctype html>\n" + page


def test_element_named_like_html_is_not_a_document():
    html = normalize_html("<html-preview>x</html-preview>")
    assert html.count("<!doctype html>") == 1
    assert "<body>\n<html-preview>x</html-preview>\n  </body>" in html


def test_build_html_messages_order():
    messages = build_html_messages(CONVERSATION, "<p>old</p>")

    assert [m["role"] for m in messages] == ["system", "user", "user"]
    assert messages[0]["content"] == HTML_SYSTEM
    assert "<p>old</p>" in messages[1]["content"]
    assert messages[2] == CONVERSATION[0]


def test_build_html_messages_without_context():
    assert len(build_html_messages(CONVERSATION)) == 2


def test_generate_html(fake_producer):
    producer = fake_producer("```html\n<!doctype html><html><body>ok</body></html>\n```")

    html = generate_html(producer, CONVERSATION)

    assert html == "<!doctype html><html><body>ok</body></html>"
    assert len(producer.calls) == 1
    assert producer.calls[0]["temperature"] == HTML_TEMPERATURE == 0.3


@pytest.mark.parametrize("content", ["", "   \n"])
def test_empty_content_is_an_error(fake_producer, content):
    producer = fake_producer(content)

    with pytest.raises(SlideSpecError, match="empty content"):
        generate_html(producer, CONVERSATION)
    assert len(producer.calls) == 1


def test_malformed_conversation_is_rejected(fake_producer):
    producer = fake_producer("<p>x</p>")

    with pytest.raises(InvalidConversationError):
        generate_html(producer, [{"role": "tool", "content": "x"}])
    assert producer.calls == []
