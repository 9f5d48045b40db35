"""Turn a model's free-form reply into exactly five validated feedback items.

Parsing tries, in order: the whole text, a ```json fenced block, and the
span between the first "{" and the last "}". Extraction then tries each
strategy in EXTRACTION_STRATEGIES; items resolve their category through a
static alias table. Validation requires every canonical category, an integer
score in [MIN_SCORE, MAX_SCORE] and a non-empty note.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Callable

from editlens_core.errors import ParseError, SchemaError
from editlens_core.models import CATEGORIES, Category, FeedbackItem

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 3
MAX_NOTE_LENGTH = 500

SCORE_KEYS = ("score", "grade", "rating", "value")
NOTE_KEYS = ("note", "advice", "comment", "text", "feedback", "description")

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

_ALIASES: dict[Category, tuple[str, ...]] = {
    Category.WORD_ACCURACY: (
        "word accuracy",
        "wordaccuracy",
        "accuracy of transcribed words",
        "wording accuracy",
    ),
    Category.TIMESTAMP_ACCURACY: (
        "timestamp accuracy",
        "timing accuracy",
        "time accuracy",
        "timestamps accuracy",
    ),
    Category.PUNCTUATION_FORMATTING: (
        "punctuation & formatting",
        "punctuation and formatting",
        "punctuation formatting",
        "formatting and punctuation",
    ),
    Category.TAGS_EMPHASIS: (
        "tags & emphasis",
        "tags and emphasis",
        "tag emphasis",
        "emphasis and tags",
    ),
    Category.SEGMENTATION: (
        "segmentation",
        "segmenting",
        "segment breaks",
        "segment quality",
    ),
}


def normalize_category_key(value) -> str:
    if not isinstance(value, str):
        return ""
    return _NON_ALNUM.sub("", value.lower().replace("&", "and"))


def _build_alias_table() -> dict[str, Category]:
    table: dict[str, Category] = {}
    for category in CATEGORIES:
        table[normalize_category_key(category.value)] = category
        for alias in _ALIASES[category]:
            table[normalize_category_key(alias)] = category
    return table


CATEGORY_ALIASES: dict[str, Category] = _build_alias_table()


def resolve_category(name) -> Category | None:
    return CATEGORY_ALIASES.get(normalize_category_key(name))


# --------------------------------------------------------------------------- #
# Parsing                                                                      #
# --------------------------------------------------------------------------- #


def _is_usable(value) -> bool:
    # Objects and arrays always count, even when empty; scalars must be truthy.
    if isinstance(value, (dict, list)):
        return True
    return value is not None and bool(value)


def _try_json(text: str):
    trimmed = text.strip()
    if not trimmed:
        return None
    try:
        value = json.loads(trimmed)
    except json.JSONDecodeError:
        return None
    return value if _is_usable(value) else None


def parse_model_json(text: str):
    """Recover a JSON value from model output or raise ParseError."""
    text = text or ""

    direct = _try_json(text)
    if direct is not None:
        return direct

    fenced = _FENCED_JSON.search(text)
    if fenced:
        parsed = _try_json(fenced.group(1))
        if parsed is not None:
            return parsed

    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        parsed = _try_json(text[start : end + 1])
        if parsed is not None:
            return parsed

    raise ParseError("Model response is not valid JSON.")


# --------------------------------------------------------------------------- #
# Extraction                                                                   #
# --------------------------------------------------------------------------- #


def items_from_list(entries) -> list[dict]:
    """Normalise a list of entries into items carrying a ``category`` field.

    An entry either has a string ``category`` field or is a single-key mapping
    whose key is the category and whose value holds the remaining fields.
    Anything else is dropped.
    """
    items: list[dict] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry:
            continue
        if isinstance(entry.get("category"), str):
            items.append(entry)
            continue
        if len(entry) == 1:
            key, nested = next(iter(entry.items()))
            if isinstance(nested, dict):
                items.append({"category": key, **nested})
    return items


def extract_feedback_list(payload) -> list[dict] | None:
    if isinstance(payload, dict) and isinstance(payload.get("feedback"), list):
        return items_from_list(payload["feedback"])
    return None


def extract_feedback_mapping(payload) -> list[dict] | None:
    if not isinstance(payload, dict) or not isinstance(payload.get("feedback"), dict):
        return None
    return [{"category": key, **value} for key, value in payload["feedback"].items() if isinstance(value, dict)]


def extract_categories_list(payload) -> list[dict] | None:
    if isinstance(payload, dict) and isinstance(payload.get("categories"), list):
        return items_from_list(payload["categories"])
    return None


def extract_results_list(payload) -> list[dict] | None:
    if isinstance(payload, dict) and isinstance(payload.get("results"), list):
        return items_from_list(payload["results"])
    return None


def extract_bare_list(payload) -> list[dict] | None:
    if isinstance(payload, list):
        return items_from_list(payload)
    return None


EXTRACTION_STRATEGIES: tuple[Callable[[object], list[dict] | None], ...] = (
    extract_feedback_list,
    extract_feedback_mapping,
    extract_categories_list,
    extract_results_list,
)


def extract_items(payload) -> list[dict]:
    """Collect raw feedback items from every keyed strategy, then fall back to a bare list."""
    items: list[dict] = []
    for strategy in EXTRACTION_STRATEGIES:
        found = strategy(payload)
        if found:
            items.extend(found)
    if not items:
        items = extract_bare_list(payload) or []
    return items


# --------------------------------------------------------------------------- #
# Validation                                                                   #
# --------------------------------------------------------------------------- #


def _first_present(item: dict, keys: tuple[str, ...]):
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def parse_score(item: dict) -> int | None:
    """Leading integer of the first present score field, or None when there is none."""
    raw = _first_present(item, SCORE_KEYS)
    if raw is None or isinstance(raw, bool):
        return None
    match = _LEADING_INT.match(str(raw))
    if not match:
        return None
    return int(match.group(1))


def parse_note(item: dict) -> str:
    note = _first_present(item, NOTE_KEYS)
    return note.strip() if isinstance(note, str) else ""


def validate_feedback(payload) -> list[FeedbackItem]:
    """Return one FeedbackItem per canonical category, in canonical order."""
    if not isinstance(payload, (dict, list)):
        raise SchemaError("Model output must be an object.")

    items = extract_items(payload)
    if not items:
        raise SchemaError("Missing feedback categories in model output.")

    by_category: dict[Category, dict] = {}
    for item in items:
        canonical = resolve_category(item.get("category"))
        if canonical is None:
            logger.debug("Ignoring feedback item with unknown category %r", item.get("category"))
            continue
        # First item per category wins; later duplicates are ignored.
        by_category.setdefault(canonical, item)

    feedback: list[FeedbackItem] = []
    for category in CATEGORIES:
        item = by_category.get(category)
        if item is None:
            raise SchemaError(f"Missing category: {category.value}", category=category.value)

        score = parse_score(item)
        if score is None or not MIN_SCORE <= score <= MAX_SCORE:
            raise SchemaError(f"Invalid score for {category.value}", category=category.value)

        note = parse_note(item)
        if not note:
            raise SchemaError(f"Empty note for {category.value}", category=category.value)

        feedback.append(FeedbackItem(category=category, score=score, note=note[:MAX_NOTE_LENGTH]))

    return feedback


def parse_and_validate(text: str) -> list[FeedbackItem]:
    return validate_feedback(parse_model_json(text))
