"""
HTML page generation.

The producer turns the conversation into a single HTML page.  That page is
what the slide-document tasks later receive as ``current_html`` context.
The output is free-form markup rather than a schema-checked document, so
there is no retry loop: fences are stripped and bare fragments are wrapped
into a complete document.
"""
import logging
import re
from typing import List, Optional, Sequence

from .errors import SlideSpecError
from .orchestrator import check_conversation
from .producer import Message, Producer
from .prompts import HTML_CONTEXT_INSTRUCTION, HTML_SYSTEM

logger = logging.getLogger(__name__)

HTML_TEMPERATURE = 0.3
PAGE_TITLE = "Slide Spec"

_FENCE_OPEN = re.compile(r"^```(?:html)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")
_DOCTYPE = re.compile(r"^<!doctype html>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<html[\s>]", re.IGNORECASE)

PAGE_TEMPLATE = """<!doctype html>
<html lang="{lang}">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{title}</title>
  </head>
  <body>
{body}
  </body>
</html>"""


def normalize_html(content: str, lang: str = "ja") -> str:
    """Strip code fences and make sure ``content`` is a complete HTML document.

    A fragment without an ``<html>`` element is wrapped in a minimal page; a
    full document missing its doctype gets one prepended.
    """
    html = (content or "").strip()
    html = _FENCE_OPEN.sub("", html, count=1)
    html = _FENCE_CLOSE.sub("", html, count=1)

    if _DOCTYPE.match(html):
        return html
    if not _HTML_TAG.search(html):
        return PAGE_TEMPLATE.format(lang=lang, title=PAGE_TITLE, body=html)
    return "<!doctype html>\n" + html


def build_html_messages(conversation: Sequence[Message], current_html: Optional[str] = None) -> List[Message]:
    messages: List[Message] = [{"role": "system", "content": HTML_SYSTEM}]
    if current_html:
        messages.append({"role": "user", "content": HTML_CONTEXT_INSTRUCTION.format(html=current_html)})
    messages.extend(check_conversation(conversation))
    return messages


def generate_html(producer: Producer, conversation: Sequence[Message], current_html: Optional[str] = None) -> str:
    """Ask ``producer`` for an HTML page built from the conversation.

    Raises:
        SlideSpecError: the producer returned no content
        UpstreamError: the producer boundary failed
    """
    raw = producer.complete(build_html_messages(conversation, current_html), HTML_TEMPERATURE)
    if not (raw or "").strip():
        logger.warning("Producer returned empty content for the HTML page")
        raise SlideSpecError("Producer returned empty content")
    return normalize_html(raw)
