"""Tests for the feature packet assembler."""

import pytest

from editlens_core.features import (
    BASIC_TIMESTAMP_TOOLING,
    DEFAULT_ADVICE_HINT,
    EXCERPT_CLIP,
    FULL_TIMESTAMP_TOOLING,
    advice_hint,
    build_feature_packet,
    build_stats,
    timestamp_tooling,
)
from editlens_core.metrics import measure_edit
from editlens_core.models import Annotation, NormalizedState


def _state(*annotations):
    return NormalizedState(annotations=tuple(annotations))


def _seg(seg_id, start, end, content=""):
    return Annotation(id=seg_id, content=content, start_time=start, end_time=end)


@pytest.fixture
def packet():
    original = _state(_seg("a", 0.0, 1.0, "hello there"), _seg("b", 1.0, 3.0, "second part"))
    current = _state(
        _seg("a", 0.0, 1.0, "hello, there"),
        _seg("b", 1.0, 2.0, "second"),
        _seg("c", 2.0, 3.0, "part [дыхание]"),
    )
    return build_feature_packet(measure_edit(original, current), "act-7")


class TestHints:
    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("silence_included_risk", "focus_trim_silence"),
            ("silence_included_risk_mild", "focus_trim_silence"),
            ("speech_cut_risk", "focus_do_not_cut_speech"),
            ("speech_cut_risk_mild", "focus_do_not_cut_speech"),
            ("balanced_or_minor", DEFAULT_ADVICE_HINT),
        ],
    )
    def test_advice_hint(self, pattern, expected):
        assert advice_hint(pattern) == expected

    def test_timestamp_tooling(self):
        assert timestamp_tooling(1, 1) == FULL_TIMESTAMP_TOOLING
        assert timestamp_tooling(1, 0) == BASIC_TIMESTAMP_TOOLING


class TestFeaturePacket:
    def test_top_level_sections(self, packet):
        assert set(packet) == {"session", "deltas", "diagnostics", "lint", "text_evidence", "evidence"}
        assert packet["session"]["actionId"] == "act-7"

    def test_segmentation_split(self, packet):
        seg = packet["diagnostics"]["segmentation"]
        assert seg["segment_count_before"] == 2
        assert seg["segment_count_after"] == 3
        assert seg["segment_count_direction"] == "more_segments_after_l2"
        assert seg["split_events"] == 1
        assert seg["dominant_pattern"] == "split"

    def test_deltas(self, packet):
        deltas = packet["deltas"]
        assert deltas["segment_count_delta"] == 1
        assert deltas["new_segments"] == 1
        assert deltas["removed_segments"] == 0
        assert deltas["changed_segment_ratio"] == 1.0
        assert deltas["punctuation_delta"] == {"before": 0, "after": 1}
        assert deltas["tag_delta"]["breathing_after"] == 1
        assert deltas["token_deletions"] == 1

    def test_timestamp_behavior(self, packet):
        behavior = packet["diagnostics"]["timestamp_behavior"]
        assert behavior["shrank_count"] == 1
        assert behavior["severe_shrank_count"] == 1
        assert behavior["primary_pattern"] == "speech_cut_risk"
        assert behavior["advice_hint"] == "focus_do_not_cut_speech"
        assert behavior["max_abs_duration_delta_ms"] == 1000

    def test_playbook_hints(self, packet):
        hints = packet["diagnostics"]["reviewer_playbook_hints"]
        assert hints["timestamp_tooling"] == BASIC_TIMESTAMP_TOOLING
        assert hints["segmentation_rule_hint"].startswith("split_only_when_pause")

    def test_text_evidence(self, packet):
        text = packet["text_evidence"]
        assert text["language_hint"] == "mostly-latin"
        assert text["transcript_before_excerpt"] == "hello there second part"
        assert [s["annotationId"] for s in text["new_segments"]] == ["c"]
        assert len(packet["evidence"]) == 2

    def test_excerpt_is_clipped(self):
        long_text = "word " * 1000
        m = measure_edit(_state(_seg("a", 0.0, 1.0, long_text)), _state())
        packet = build_feature_packet(m, "x")
        assert len(packet["text_evidence"]["transcript_before_excerpt"]) == EXCERPT_CLIP + 3

    def test_zero_matched_ratio(self):
        packet = build_feature_packet(measure_edit(_state(), _state()), "x")
        assert packet["deltas"]["changed_segment_ratio"] == 0
        assert packet["diagnostics"]["word_accuracy"]["word_change_rate_per_segment"] == 0


def test_build_stats():
    original = _state(_seg("a", 0.0, 1.0, "one two"))
    current = _state(_seg("a", 0.0, 1.0, "one two three"))
    m = measure_edit(original, current)
    stats = build_stats(m, build_feature_packet(m, "x"))
    assert stats["original"] == {"annotations": 1, "words": 2, "lintErrors": 0}
    assert stats["current"]["words"] == 3
    assert stats["changes"]["timestampPrimaryPattern"] == "balanced_or_minor"
