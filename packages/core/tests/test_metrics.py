"""Tests for the diff & metrics engine."""

import pytest

from editlens_core.metrics import (
    EVIDENCE_LIMIT,
    MarkupCounts,
    classify_change_severity,
    classify_duration_deltas,
    compute_review_metrics,
    count_markup,
    count_spacing_issues,
    dominant_segmentation_pattern,
    measure_edit,
    segmentation_direction,
)
from editlens_core.models import Annotation, LintError, NormalizedState
from editlens_core.segmentation import SegmentationGraphStats


def _state(*annotations, lint_errors=()):
    return NormalizedState(annotations=tuple(annotations), lint_errors=tuple(lint_errors))


def _seg(seg_id, start, end, content=""):
    return Annotation(id=seg_id, content=content, start_time=start, end_time=end)


class TestEndToEnd:
    def test_single_edited_segment(self):
        original = _state(_seg("a", 0.0, 1.0, "hello"))
        current = _state(_seg("a", 0.2, 1.3, "hello world"))

        m = measure_edit(original, current)

        assert m.matched_count == 1
        assert m.changed_segments == 1
        assert m.token_insertions == 1
        assert m.token_deletions == 0
        assert m.token_replacements == 1
        assert m.start_shifts_ms[0] == pytest.approx(200)
        assert m.duration_deltas_ms[0] == pytest.approx(100)
        assert m.duration_behavior.primary_pattern == "balanced_or_minor"
        assert m.segmentation_dominant_pattern == "minor_or_none"

    def test_review_metrics_shape(self):
        original = _state(_seg("a", 0.0, 1.0, "hello"))
        current = _state(_seg("a", 0.2, 1.3, "hello world"))

        metrics = compute_review_metrics(original, current, "action-1")

        changes = metrics.stats["changes"]
        assert changes["matched"] == 1
        assert changes["changedSegments"] == 1
        assert changes["startShiftMeanMs"] == pytest.approx(200)
        assert metrics.stats["original"]["words"] == 1
        assert metrics.stats["current"]["words"] == 2
        assert metrics.feature_packet["session"] == {"actionId": "action-1"}
        assert metrics.feature_packet["deltas"]["timestamp_shift_start_ms"]["signed_mean"] == pytest.approx(200)

    def test_identical_states(self):
        state = _state(_seg("a", 0.0, 1.0, "same"), _seg("b", 1.0, 2.0, "text"))
        m = measure_edit(state, state)
        assert m.changed_segments == 0
        assert m.evidence == []
        assert m.word_accuracy_severity == "low"
        assert m.segmentation_direction == "same_count"

    def test_empty_states(self):
        m = measure_edit(_state(), _state())
        assert m.matched_count == 0
        assert m.duration_behavior.primary_pattern == "balanced_or_minor"
        assert m.segmentation_dominant_pattern == "minor_or_none"


class TestIdentityMatching:
    def test_new_and_removed_ids(self):
        original = _state(_seg("a", 0.0, 1.0, "x"), _seg("b", 1.0, 2.0, "y"))
        current = _state(_seg("a", 0.0, 1.0, "x"), _seg("c", 5.0, 6.0, "z"))
        m = measure_edit(original, current)
        assert m.matched_ids == ["a"]
        assert m.new_only_ids == ["c"]
        assert m.removed_ids == ["b"]
        assert m.new_segments_text[0]["text"] == "z"
        assert m.removed_segments_text[0]["time_before"] == [1.0, 2.0]

    def test_duplicate_id_last_value_wins(self):
        original = _state(_seg("a", 0.0, 1.0, "first"), _seg("a", 0.5, 1.0, "second"))
        current = _state(_seg("a", 0.5, 1.0, "second"))
        m = measure_edit(original, current)
        assert m.matched_ids == ["a"]
        assert m.changed_segments == 0

    def test_one_sided_change_is_not_a_replacement(self):
        original = _state(_seg("a", 0.0, 1.0, ""))
        current = _state(_seg("a", 0.0, 1.0, "new words"))
        m = measure_edit(original, current)
        assert m.token_insertions == 2
        assert m.token_replacements == 0

    def test_evidence_is_capped(self):
        count = EVIDENCE_LIMIT + 2
        original = _state(*[_seg(f"s{i}", i, i + 1, "old") for i in range(count)])
        current = _state(*[_seg(f"s{i}", i, i + 1, "new") for i in range(count)])
        m = measure_edit(original, current)
        assert m.changed_segments == count
        assert len(m.evidence) == EVIDENCE_LIMIT
        assert len(m.changed_segments_text) == count
        assert m.evidence[0]["category_hint"] == "Word Accuracy"


class TestSamples:
    def test_lint_sample_for_unknown_annotation(self):
        current = _state(_seg("a", 0.0, 1.0, "x"), lint_errors=[LintError("zzz", "bad", "error")])
        m = measure_edit(_state(), current)
        assert m.lint_samples == [
            {"annotationId": "zzz", "reason": "bad", "severity": "error", "text": "", "time_after": None}
        ]
        assert m.lint_errors_after == 1

    def test_punctuation_and_tag_samples(self):
        current = _state(_seg("a", 0.0, 1.0, "Hi, there."), _seg("b", 1.0, 2.0, "[noise] ok"))
        m = measure_edit(_state(), current)
        assert [s["annotationId"] for s in m.punctuation_samples] == ["a"]
        assert m.punctuation_samples[0]["punctuation_count"] == 2
        assert [s["annotationId"] for s in m.tag_samples] == ["b"]


class TestCaps:
    def test_clipped_fields_use_their_caps(self):
        long_text = "[tag] " + "a," * 600
        old_text = "old " * 200
        original = _state(_seg("m", 0.0, 1.0, old_text), _seg("r", 10.0, 11.0, long_text))
        current = _state(
            _seg("m", 0.0, 1.0, long_text),
            _seg("n", 20.0, 21.0, long_text),
            lint_errors=[LintError("m", "spacing", "warning")],
        )

        m = measure_edit(original, current)

        assert m.evidence[0]["before"] == old_text[:280] + "..."
        assert m.evidence[0]["after"] == long_text[:280] + "..."
        assert m.changed_segments_text[0]["after"] == long_text[:380] + "..."
        assert m.new_segments_text[0]["text"] == long_text[:360] + "..."
        assert m.removed_segments_text[0]["text"] == long_text[:360] + "..."
        assert m.lint_samples[0]["text"] == long_text[:320] + "..."
        assert m.punctuation_samples[0]["text"] == long_text[:260] + "..."
        assert m.tag_samples[0]["text"] == long_text[:300] + "..."

    def test_samples_capped_at_eight(self):
        count = 12
        original = _state(*[_seg(f"r{i}", i, i + 1, "[old], gone") for i in range(count)])
        current = _state(
            *[_seg(f"n{i}", 100 + i, 101 + i, "[new], here") for i in range(count)],
            lint_errors=[LintError(f"n{i}", "spacing", "warning") for i in range(count)],
        )

        m = measure_edit(original, current)

        assert len(m.new_only_ids) == count
        assert len(m.removed_ids) == count
        assert len(m.new_segments_text) == 8
        assert len(m.removed_segments_text) == 8
        assert len(m.lint_samples) == 8
        assert len(m.punctuation_samples) == 8
        assert len(m.tag_samples) == 8


class TestClassifyDurationDeltas:
    def test_mild_threshold_is_inclusive(self):
        behavior = classify_duration_deltas([120], 1)
        assert behavior.grew_count == 1
        assert behavior.primary_pattern == "silence_included_risk_mild"

    def test_severe_grow(self):
        behavior = classify_duration_deltas([600, -200], 2)
        assert behavior.severe_grew_count == 1
        assert behavior.primary_pattern == "silence_included_risk"

    def test_severe_shrink(self):
        assert classify_duration_deltas([-500], 1).primary_pattern == "speech_cut_risk"

    def test_severe_tie_falls_through_to_mild_rates(self):
        behavior = classify_duration_deltas([600, -600, -200], 3)
        assert behavior.primary_pattern == "speech_cut_risk_mild"

    def test_zero_matched_gives_zero_rates(self):
        behavior = classify_duration_deltas([], 0)
        assert behavior.grew_rate == 0.0
        assert behavior.primary_pattern == "balanced_or_minor"


@pytest.mark.parametrize(
    "rate,expected",
    [(0.35, "high"), (0.5, "high"), (0.15, "moderate"), (0.1, "low"), (0.0, "low")],
)
def test_classify_change_severity(rate, expected):
    assert classify_change_severity(rate) == expected


class TestSegmentationLabels:
    def test_direction(self):
        assert segmentation_direction(2) == "more_segments_after_l2"
        assert segmentation_direction(-1) == "fewer_segments_after_l2"
        assert segmentation_direction(0) == "same_count"

    def test_dominant_tie_prefers_earlier_event(self):
        graph = SegmentationGraphStats(split_events=1, combine_events=1)
        assert dominant_segmentation_pattern(graph) == "split"

    def test_dominant_largest_wins(self):
        graph = SegmentationGraphStats(added_segments=1, combine_events=3)
        assert dominant_segmentation_pattern(graph) == "combined"

    def test_dominant_none(self):
        assert dominant_segmentation_pattern(SegmentationGraphStats()) == "minor_or_none"


class TestTextCounters:
    def test_spacing_issues(self):
        issues = count_spacing_issues("a , b.c")
        assert issues["spaces_before_comma"] == 1
        assert issues["no_space_after_punct"] == 1
        assert issues["spaces_before_dot"] == 0

    def test_markup(self):
        counts = count_markup("[дыхание] {x} <y> **z**")
        assert counts == MarkupCounts(square=1, curly=1, angle=1, emphasis=1, breathing=1)

    def test_breathing_tag_is_case_insensitive(self):
        assert count_markup("[Вдох]").breathing == 1
