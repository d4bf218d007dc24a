"""
Shape normalizer for producer output.

Producers drift from the canonical shape in predictable ways: alternate names
for the slide list, flattened box fields, a free-text field where a list is
expected, a ``style`` bag standing in for ``options``.  Each rule below maps
those aliases onto the canonical key before validation.

Rules are purely structural:

* an existing canonical key always wins and is never overwritten;
* an alias is consumed (removed) once it has been copied, so the strict
  validator only ever sees canonical keys;
* nothing is invented and nothing canonical is dropped.

Every function returns a new value and leaves its argument untouched, and
applying a normalizer to its own output is a no-op.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .models import DocumentKind

logger = logging.getLogger(__name__)

BOX_FIELDS = ("x", "y", "w", "h")


@dataclass(frozen=True)
class AliasRule:
    """Copy the first acceptable alias into ``canonical`` when it is absent."""
    canonical: str
    aliases: Tuple[str, ...]
    accept: Callable[[Any], bool]
    transform: Optional[Callable[[Any], Any]] = None


def _is_list(value: Any) -> bool:
    return isinstance(value, list)


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_dict(value: Any) -> bool:
    return isinstance(value, dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_http_url(value: Any) -> bool:
    return isinstance(value, str) and re.match(r"^https?://", value, re.IGNORECASE) is not None


def split_lines(text: str) -> List[str]:
    """Split free text into trimmed, non-empty lines."""
    return [line.strip() for line in re.split(r"\r?\n", text) if line.strip()]


def apply_rules(node: Dict[str, Any], rules: Sequence[AliasRule]) -> Dict[str, Any]:
    """Apply alias rules to a mapping and return the rewritten copy."""
    out = dict(node)
    for rule in rules:
        # Canonical key wins; a leftover alias is left for the validator to report.
        if out.get(rule.canonical) is not None:
            continue
        for alias in rule.aliases:
            if alias in out and rule.accept(out[alias]):
                value = out.pop(alias)
                out[rule.canonical] = rule.transform(value) if rule.transform else value
                logger.debug("Mapped alias '%s' -> '%s'", alias, rule.canonical)
                break
    return out


def _map_list(value: Any, fn: Callable[[Any], Any]) -> Any:
    if not isinstance(value, list):
        return value
    return [fn(item) for item in value]


# ---------------------------------------------------------------------------
# Positioned spec
# ---------------------------------------------------------------------------

SLIDE_LIST_RULES = (
    AliasRule("slides", ("pages",), _is_list),
)

POSITIONED_ROOT_RULES = (
    AliasRule("slides", ("pages", "Slides"), _is_list),
)

POSITIONED_SLIDE_RULES = (
    AliasRule("objects", ("elements",), _is_list),
    AliasRule("backgroundColor", ("bgColor", "background"), _is_str),
)

# Keys a producer sometimes puts on the slide itself; they belong to objects
STRAY_SLIDE_KEYS = BOX_FIELDS + ("style",)

OBJECT_RULES = (
    AliasRule("kind", ("type",), _is_str),
    AliasRule("options", ("style",), _is_dict),
)

OBJECT_KINDS = ("text", "bullets", "image", "table", "chart")

KIND_SYNONYMS = {
    "textbox": "text",
    "paragraph": "text",
    "bullet": "bullets",
    "list": "bullets",
    "bullet_list": "bullets",
    "picture": "image",
    "img": "image",
    "graph": "chart",
}

# kind -> rules applied after the kind tag is settled
KIND_RULES: Dict[str, Tuple[AliasRule, ...]] = {
    "bullets": (AliasRule("items", ("text",), _is_str, split_lines),),
    "table": (AliasRule("rows", ("data",), _is_list),),
    "chart": (AliasRule("data", ("series",), _is_list),),
    "image": (
        AliasRule("url", ("src",), _is_http_url),
        AliasRule("dataUrl", ("data", "src"), _is_str),
    ),
}


def _normalize_kind(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    folded = value.strip().lower()
    if folded in OBJECT_KINDS:
        return folded
    return KIND_SYNONYMS.get(folded, value)


def normalize_slide_object(obj: Any) -> Any:
    """Rewrite one positioned slide object into canonical form."""
    if not isinstance(obj, dict):
        return obj
    out = apply_rules(obj, OBJECT_RULES)
    if "kind" in out:
        out["kind"] = _normalize_kind(out["kind"])

    if "box" not in out and all(_is_number(out.get(k)) for k in BOX_FIELDS):
        out["box"] = {k: out[k] for k in BOX_FIELDS}
    for key in BOX_FIELDS:
        out.pop(key, None)
    # style was either folded into options above or is redundant next to it
    out.pop("style", None)

    kind_rules = KIND_RULES.get(out.get("kind"))
    if kind_rules:
        out = apply_rules(out, kind_rules)
    return out


def normalize_positioned_slide(slide: Any) -> Any:
    if not isinstance(slide, dict):
        return slide
    out = apply_rules(slide, POSITIONED_SLIDE_RULES)
    for key in STRAY_SLIDE_KEYS:
        out.pop(key, None)
    if isinstance(out.get("objects"), list):
        out["objects"] = [normalize_slide_object(o) for o in out["objects"] if o]
    return out


def normalize_positioned_spec(value: Any) -> Any:
    """Normalize a raw positioned-spec candidate."""
    if not isinstance(value, dict):
        return value
    root = apply_rules(value, POSITIONED_ROOT_RULES)
    if "slides" in root:
        root["slides"] = _map_list(root["slides"], normalize_positioned_slide)
    return root


# ---------------------------------------------------------------------------
# Intent spec
# ---------------------------------------------------------------------------

INTENT_SLIDE_RULES = (
    AliasRule("bullets", ("bulletPoints",), _is_list),
    AliasRule("bulletSections", ("sections", "panels"), _is_list),
    AliasRule("tables", ("table",), _is_list),
    AliasRule("charts", ("chart",), _is_list),
    AliasRule("images", ("image",), _is_list),
)

BULLET_SECTION_RULES = (
    AliasRule("items", ("bullets", "bulletPoints"), _is_list),
)


def normalize_intent_slide(slide: Any) -> Any:
    if not isinstance(slide, dict):
        return slide
    out = apply_rules(slide, INTENT_SLIDE_RULES)
    sections = out.get("bulletSections")
    if isinstance(sections, list):
        out["bulletSections"] = [
            apply_rules(sec, BULLET_SECTION_RULES) for sec in sections if isinstance(sec, dict)
        ]
    return out


def normalize_intent_spec(value: Any) -> Any:
    """Normalize a raw intent-spec candidate."""
    if not isinstance(value, dict):
        return value
    root = apply_rules(value, SLIDE_LIST_RULES)
    if "slides" in root:
        root["slides"] = _map_list(root["slides"], normalize_intent_slide)
    return root


# ---------------------------------------------------------------------------
# Deck spec
# ---------------------------------------------------------------------------

DECK_SLIDE_RULES = (
    AliasRule("layout_type", ("layoutType", "layout"), _is_str),
    AliasRule("speaker_notes", ("speakerNotes",), _is_str),
)

DECK_IMAGE_RULES = (
    AliasRule("asset_id", ("assetId",), _is_str),
    AliasRule("src", ("url",), _is_str),
)

DECK_THEME_RULES = (
    AliasRule("layout", ("slideLayout",), _is_str),
)


def normalize_deck_slide(slide: Any) -> Any:
    if not isinstance(slide, dict):
        return slide
    out = apply_rules(slide, DECK_SLIDE_RULES)
    if isinstance(out.get("image"), dict):
        out["image"] = apply_rules(out["image"], DECK_IMAGE_RULES)
    return out


def normalize_deck_spec(value: Any) -> Any:
    """Normalize a raw deck-spec candidate."""
    if not isinstance(value, dict):
        return value
    root = apply_rules(value, SLIDE_LIST_RULES)
    if "slides" in root:
        root["slides"] = _map_list(root["slides"], normalize_deck_slide)
    if isinstance(root.get("theme"), dict):
        root["theme"] = apply_rules(root["theme"], DECK_THEME_RULES)
    return root


NORMALIZERS = {
    DocumentKind.POSITIONED: normalize_positioned_spec,
    DocumentKind.INTENT: normalize_intent_spec,
    DocumentKind.DECK: normalize_deck_spec,
}


def normalize(kind: DocumentKind, value: Any) -> Any:
    """Normalize ``value`` towards the canonical shape of ``kind``."""
    return NORMALIZERS[DocumentKind(kind)](value)
