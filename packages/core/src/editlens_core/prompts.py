"""Prompt construction for the edit critique.

The system prompt fixes the reviewer persona, the five categories and the
output schema. The user prompt carries the feature packet for one review
action. Both are plain strings so every provider sends identical content.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from editlens_core.models import CATEGORIES
from editlens_core.utils.text import clip_text
from editlens_core.validation import MAX_NOTE_LENGTH, MAX_SCORE, MIN_SCORE

PREVIEW_CLIP = 600


@dataclass(frozen=True)
class Prompts:
    system_prompt: str
    user_prompt: str
    preview: str

    def to_dict(self) -> dict:
        return {"systemPrompt": self.system_prompt, "userPrompt": self.user_prompt, "preview": self.preview}


def _category_list() -> str:
    return json.dumps([c.value for c in CATEGORIES], ensure_ascii=False)


def build_system_prompt(note_language: str = "English") -> str:
    return f"""You are a senior transcription QA lead giving feedback to a reviewer.
The reviewer edited an automatically produced, timestamped transcript. You receive
measured differences between the transcript before and after their edit and judge
the quality of that edit in five categories:

- Word Accuracy: wording fixes, missed or introduced recognition errors.
- Timestamp Accuracy: segment boundaries; speech must not be cut, silence must be trimmed.
- Punctuation & Formatting: punctuation marks and spacing around them.
- Tags & Emphasis: bracket tags, emphasis markup and breathing tags.
- Segmentation: splitting and merging of segments.

Scoring: an integer from {MIN_SCORE} to {MAX_SCORE} per category, where {MIN_SCORE} means the edit
is good and {MAX_SCORE} means it needs serious rework.

Notes: write in {note_language}, at most {MAX_NOTE_LENGTH} characters, 1-2 sentences, one concrete
action the reviewer should take next time plus a short encouraging phrase.
Base every judgement on the numbers and excerpts provided. Do not invent segments.

Respond with **only** a valid JSON object:

{{
  "feedback": [
    {{"category": "<category name>", "score": <integer {MIN_SCORE}-{MAX_SCORE}>, "note": "<note>"}},
    ...
  ]
}}

"feedback" must contain exactly five items, one for each of these exact category names:
{_category_list()}
Do not return any text outside the JSON object."""


def _category_guidance(packet: dict) -> str:
    diagnostics = packet.get("diagnostics", {})
    timestamp = diagnostics.get("timestamp_behavior", {})
    segmentation = diagnostics.get("segmentation", {})
    word = diagnostics.get("word_accuracy", {})
    hints = diagnostics.get("reviewer_playbook_hints", {})

    lines = [
        f"- Word Accuracy: change severity is `{word.get('severity', 'low')}`.",
        f"- Timestamp Accuracy: dominant pattern is `{timestamp.get('primary_pattern', 'balanced_or_minor')}`, "
        f"advice hint `{timestamp.get('advice_hint', 'focus_minor_tweaks_only')}`.",
        f"- Segmentation: dominant event is `{segmentation.get('dominant_pattern', 'minor_or_none')}`; "
        f"rule `{hints.get('segmentation_rule_hint', '')}`.",
        f"- Tags & Emphasis: rule `{hints.get('breathing_rule_hint', '')}`.",
    ]
    tooling = hints.get("timestamp_tooling") or []
    if tooling:
        lines.append(f"- Tooling suggestions you may mention: {', '.join(tooling)}.")
    return "\n".join(lines)


def build_user_prompt(packet: dict) -> str:
    action_id = packet.get("session", {}).get("actionId", "")
    rendered = json.dumps(packet, ensure_ascii=False, indent=2)
    return f"""Review action `{action_id}`.

## Category Guidance
{_category_guidance(packet)}

## Feature Packet
```json
{rendered}
```

Return the JSON object described in the instructions."""


def build_prompts(packet: dict, note_language: str = "English") -> Prompts:
    user = build_user_prompt(packet)
    return Prompts(
        system_prompt=build_system_prompt(note_language),
        user_prompt=user,
        preview=clip_text(user, PREVIEW_CLIP),
    )


def build_repair_instruction(note_language: str = "English") -> str:
    """Corrective message sent after a reply fails parsing or validation."""
    return "\n".join(
        [
            "Fix your previous answer and return STRICT JSON only (no Markdown, no extra text).",
            'Schema: {"feedback": [{"category", "score", "note"}, ...]}.',
            f"feedback must contain EXACTLY 5 items with EXACTLY these category names: {_category_list()}",
            f"score: integer {MIN_SCORE}..{MAX_SCORE} ({MIN_SCORE} is best, {MAX_SCORE} is worst).",
            f"note: in {note_language}, <= {MAX_NOTE_LENGTH} characters, 1-2 sentences, "
            "a concrete action plus an encouraging phrase.",
            "Do not skip categories and do not add extra categories.",
        ]
    )
