"""Tests for prompt construction."""

import json

from editlens_core.metrics import compute_review_metrics
from editlens_core.models import Annotation, NormalizedState
from editlens_core.prompts import (
    PREVIEW_CLIP,
    build_prompts,
    build_repair_instruction,
    build_system_prompt,
    build_user_prompt,
)


def _packet():
    original = NormalizedState(annotations=(Annotation("a", "hello", 0.0, 1.0),))
    current = NormalizedState(annotations=(Annotation("a", "hello world", 0.2, 1.3),))
    return compute_review_metrics(original, current, "act-42").feature_packet


class TestSystemPrompt:
    def test_lists_every_category(self):
        prompt = build_system_prompt()
        for name in ("Word Accuracy", "Timestamp Accuracy", "Punctuation & Formatting", "Tags & Emphasis", "Segmentation"):
            assert name in prompt

    def test_uses_note_language(self):
        assert "write in Russian" in build_system_prompt("Russian")

    def test_describes_score_range(self):
        assert "integer from 1 to 3" in build_system_prompt()


class TestUserPrompt:
    def test_embeds_packet_as_json(self):
        packet = _packet()
        prompt = build_user_prompt(packet)
        assert "Review action `act-42`" in prompt
        block = prompt.split("```json\n", 1)[1].split("\n```", 1)[0]
        assert json.loads(block) == packet

    def test_category_guidance(self):
        prompt = build_user_prompt(_packet())
        assert "dominant pattern is `balanced_or_minor`" in prompt
        assert "recommend_playback_0_75_for_hard_segments" in prompt


def test_build_prompts_preview_is_clipped():
    prompts = build_prompts(_packet())
    assert prompts.preview == prompts.user_prompt[:PREVIEW_CLIP] + "..."
    assert set(prompts.to_dict()) == {"systemPrompt", "userPrompt", "preview"}


def test_repair_instruction():
    text = build_repair_instruction("German")
    assert "STRICT JSON" in text
    assert "EXACTLY 5 items" in text
    assert "in German" in text
