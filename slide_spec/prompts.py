"""
Fixed task instructions sent to the producer for each document variant.

Each variant gets a system instruction (what to produce) and a closing shape
instruction (the exact JSON shape), appended after the conversation.
"""
from dataclasses import dataclass
from typing import Dict

from .models import DocumentKind

RETRY_INSTRUCTION = (
    "Your previous JSON failed validation. Fix the JSON and output ONLY the corrected JSON.\n"
    "Validation errors: {errors}\n"
    "Previous JSON: {previous}"
)

CONTEXT_INSTRUCTION = "Context: current HTML (may describe desired content/layout).\n---\n{html}\n---"


@dataclass(frozen=True)
class TaskPrompt:
    system: str
    shape: str


POSITIONED_SYSTEM = (
    "You convert user requirements into a PPTX specification JSON. Output ONLY valid JSON. "
    "No Markdown, no code fences. The slide size is LAYOUT_WIDE (13.333 x 7.5 inches). "
    "Use inches for x/y/w/h. IMPORTANT: object position/size must be nested under a \"box\" object: "
    "{\"box\":{\"x\":..,\"y\":..,\"w\":..,\"h\":..}}. IMPORTANT: styling must be nested under "
    "\"options\" (NOT \"style\"). Use 6-hex colors WITHOUT # (e.g., FFFFFF). Supported object kinds: "
    "text, bullets, image, table, chart. For bullets, provide items[]. For table, provide rows[][] as "
    "strings. For chart, provide chartType and data[] with name/labels/values. For image, provide "
    "exactly one of dataUrl or url. Keep content concise, avoid overlap, keep margins (~0.5in)."
)

POSITIONED_SHAPE = (
    "Return a JSON object that matches this shape exactly: "
    "{\"meta\": {\"title\"?: string, \"author\"?: string, \"layout\": \"LAYOUT_WIDE\"}, "
    "\"slides\": [{\"title\"?: string, \"backgroundColor\"?: \"RRGGBB\", \"objects\": [ ... ]}]}. "
    "No extra keys at the top-level."
)

INTENT_SYSTEM = (
    "You convert user requirements (and provided HTML) into a PPTX INTENT JSON. Output ONLY valid "
    "JSON. No Markdown, no code fences. Do NOT output x/y/w/h/box. Do NOT output low-level styling "
    "unless necessary. Focus on semantic structure: slides with title/bullets/tables/charts/images.\n\n"
    "IMPORTANT: Capture ALL meaningful content from the HTML, including side panels and aside "
    "sections (e.g. \"Purpose\", \"Notes\"). When there are multiple bullet groups with headings, use "
    "bulletSections: [{\"title\": string?, \"items\": string[]}]. Keep bullets separate per section "
    "rather than merging.\n\n"
    "For tables: rows[][] strings. For charts: chartType + data[] with name/labels/values. Use 6-hex "
    "colors WITHOUT # (e.g., FFFFFF) only when explicitly requested. It is OK to split content "
    "across multiple slides to avoid dropping content."
)

INTENT_SHAPE = (
    "Return JSON matching: {\"meta\"?: {\"title\"?: string, \"author\"?: string, \"layout\": \"LAYOUT_WIDE\"}, "
    "\"slides\": [{\"title\"?: string, \"backgroundColor\"?: \"RRGGBB\", \"bullets\"?: string[], "
    "\"bulletSections\"?: [{\"title\"?: string, \"items\": string[]}], "
    "\"tables\"?: [{\"title\"?:string,\"rows\":string[][]}], "
    "\"charts\"?: [{\"title\"?:string,\"chartType\":string,\"data\":any[]}], "
    "\"images\"?: [{\"title\"?:string,\"dataUrl\"?:string,\"url\"?:string}], \"speakerNotes\"?: string}]}."
)

DECK_SYSTEM = """You convert user requirements AND the provided HTML into a DeckSpec JSON for slide rendering.

Output ONLY valid JSON. No Markdown, no code fences.
Do NOT output x/y/w/h/box.

CRITICAL RULES (follow strictly):
- Treat the provided HTML as the SOURCE OF TRUTH.
- Do NOT invent content that is not present in the HTML or the conversation.
- Do NOT paraphrase. Prefer copying text verbatim from the HTML, in its original language.
- Capture ALL meaningful content from the HTML, including side panels and aside sections.
- If the HTML looks like a single slide, output exactly 1 slide.

Design rules:
- Prefer a SMALL set of layout_type values and fill only the fields required by that layout.
- Keep slides concise BUT do not drop important content; split into multiple slides only when necessary.
- Use theme.layout = "LAYOUT_WIDE".

Layout selection guidance:
- Cover: use layout_type "title" (use subtitle when present).
- Title + bullet list: use "title_bullets".
- Two groups of bullets: use "two_column_bullets" with left/right.
- Image + bullets: use "image_left_bullets_right".

DeckSpec shape (no extra top-level keys):
{
  "meta": {"title": string, "subtitle"?: string, "lang": "ja"|"en", "audience"?: string, "purpose"?: string},
  "theme": {"layout": "LAYOUT_WIDE", "fonts": {"head": string, "body": string}, "colors"?: {"bg"?:"RRGGBB","text"?:"RRGGBB","accent"?:"RRGGBB"}},
  "assets"?: {"images"?: [{"id": string, "src": string, "alt"?: string, "credit"?: string}]},
  "slides": [{
    "id": string,
    "layout_type": "title"|"title_bullets"|"two_column_bullets"|"image_left_bullets_right"|"image_full_bleed"|"table"|"chart",
    "title": string,
    "subtitle"?: string,
    "bullets"?: [{"text": string, "level"?: number, "emphasis"?: "none"|"strong"}],
    "left"?: {"heading"?: string, "bullets"?: [{"text": string, "level"?: number}]},
    "right"?: {"heading"?: string, "bullets"?: [{"text": string, "level"?: number}]},
    "image"?: {"asset_id"?: string, "src"?: string, "caption"?: string},
    "table"?: {"columns": string[], "rows": string[][], "note"?: string},
    "chart"?: {"chart_type": "bar"|"line"|"pie", "categories"?: string[], "series": [{"name": string, "values": number[]}], "note"?: string},
    "speaker_notes"?: string
  }]
}

Notes:
- For images, prefer referencing assets.images via asset_id; if unavailable, you may put a direct URL in image.src.
- Colors must be 6-hex WITHOUT # (e.g., FFFFFF) only when explicitly requested or obvious from context.
"""

DECK_SHAPE = "Return ONLY the DeckSpec JSON object. No extra wrapper keys."

TASK_PROMPTS: Dict[DocumentKind, TaskPrompt] = {
    DocumentKind.POSITIONED: TaskPrompt(system=POSITIONED_SYSTEM, shape=POSITIONED_SHAPE),
    DocumentKind.INTENT: TaskPrompt(system=INTENT_SYSTEM, shape=INTENT_SHAPE),
    DocumentKind.DECK: TaskPrompt(system=DECK_SYSTEM, shape=DECK_SHAPE),
}


def task_prompt(kind: DocumentKind) -> TaskPrompt:
    return TASK_PROMPTS[DocumentKind(kind)]


# HTML page generation is free-form text, not a validated document
HTML_SYSTEM = (
    "You generate production-ready HTML. Return ONLY a single complete HTML document. "
    "No Markdown, no code fences. Use inline CSS. Prefer Bootstrap 5 classes when helpful, "
    "but do not link external assets unless explicitly requested."
)

HTML_CONTEXT_INSTRUCTION = (
    "Context: the current HTML is below.\n\n---\n{html}\n---\n\n"
    "Update the whole HTML to satisfy the requirements in the following conversation."
)
