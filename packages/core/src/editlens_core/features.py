"""Feature packet assembler.

Folds EditMeasurements into the nested structure consumed by the prompt
builder and by audit logging. Field names are a stable contract: changing
them breaks prompts already tuned against them and every analytics query
over the logged packets.

Hint fields are pure lookups over the classification labels.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from editlens_core.utils.text import (
    abs_max,
    average,
    clip_text,
    count_words,
    detect_language_hint,
    percentile,
    round_half_up,
)

if TYPE_CHECKING:
    from editlens_core.metrics import EditMeasurements

EXCERPT_CLIP = 1600

# Severe grew + severe shrank count at which full timestamp tooling is suggested.
TIMESTAMP_TOOLING_THRESHOLD = 2

ADVICE_HINTS = {
    "silence_included_risk": "focus_trim_silence",
    "silence_included_risk_mild": "focus_trim_silence",
    "speech_cut_risk": "focus_do_not_cut_speech",
    "speech_cut_risk_mild": "focus_do_not_cut_speech",
}
DEFAULT_ADVICE_HINT = "focus_minor_tweaks_only"

FULL_TIMESTAMP_TOOLING = [
    "recommend_max_zoom",
    "recommend_hotkeys_q_w_e_r_segment_click",
    "recommend_playback_0_75_for_hard_segments",
]
BASIC_TIMESTAMP_TOOLING = ["recommend_playback_0_75_for_hard_segments"]

SEGMENTATION_RULE_HINT = "split_only_when_pause_at_least_1s_do_not_cut_speech_to_force_split"
BREATHING_RULE_HINT = "avoid_tagging_natural_breathing_only_semantic_breaths"


def advice_hint(primary_pattern: str) -> str:
    return ADVICE_HINTS.get(primary_pattern, DEFAULT_ADVICE_HINT)


def timestamp_tooling(severe_grew_count: int, severe_shrank_count: int) -> list[str]:
    if severe_grew_count + severe_shrank_count >= TIMESTAMP_TOOLING_THRESHOLD:
        return list(FULL_TIMESTAMP_TOOLING)
    return list(BASIC_TIMESTAMP_TOOLING)


def _shift_summary(signed: list[float]) -> dict:
    absolute = [abs(v) for v in signed]
    return {
        "mean": round_half_up(average(absolute), 2),
        "p95": round_half_up(percentile(absolute, 95), 2),
        "max": round_half_up(max([0.0, *absolute]), 2),
        "signed_mean": round_half_up(average(signed), 2),
    }


def _build_deltas(m: EditMeasurements) -> dict:
    old_durations = [a.duration_ms for a in m.old_annotations]
    new_durations = [a.duration_ms for a in m.new_annotations]
    before, after = m.markup_before, m.markup_after
    return {
        "segment_count_delta": m.segment_count_delta,
        "changed_segment_ratio": round_half_up(m.changed_segments / m.matched_count, 4) if m.matched_count else 0,
        "new_segments": len(m.new_only_ids),
        "removed_segments": len(m.removed_ids),
        "avg_segment_duration_delta_ms": round_half_up(average(new_durations) - average(old_durations), 2),
        "timestamp_shift_start_ms": _shift_summary(m.start_shifts_ms),
        "timestamp_shift_end_ms": _shift_summary(m.end_shifts_ms),
        "token_insertions": m.token_insertions,
        "token_deletions": m.token_deletions,
        "token_replacements": m.token_replacements,
        "punctuation_delta": {"before": m.punctuation_before, "after": m.punctuation_after},
        "punctuation_spacing_delta": {"before": dict(m.spacing_before), "after": dict(m.spacing_after)},
        "tag_delta": {
            "square_before": before.square,
            "square_after": after.square,
            "curly_before": before.curly,
            "curly_after": after.curly,
            "angle_before": before.angle,
            "angle_after": after.angle,
            "emphasis_before": before.emphasis,
            "emphasis_after": after.emphasis,
            "breathing_before": before.breathing,
            "breathing_after": after.breathing,
        },
    }


def _build_diagnostics(m: EditMeasurements) -> dict:
    behavior = m.duration_behavior
    graph = m.segmentation
    word_change_magnitude = m.token_insertions + m.token_deletions + m.token_replacements
    word_change_rate = word_change_magnitude / max(1, m.matched_count) if m.matched_count else 0
    before, after = m.markup_before, m.markup_after

    return {
        "word_accuracy": {
            "changed_segments": m.changed_segments,
            "matched_segments": m.matched_count,
            "word_change_magnitude": word_change_magnitude,
            "word_change_rate_per_segment": round_half_up(word_change_rate, 3),
            "severity": m.word_accuracy_severity,
        },
        "timestamp_behavior": {
            "grew_count": behavior.grew_count,
            "shrank_count": behavior.shrank_count,
            "severe_grew_count": behavior.severe_grew_count,
            "severe_shrank_count": behavior.severe_shrank_count,
            "grew_rate": round_half_up(behavior.grew_rate, 3),
            "shrank_rate": round_half_up(behavior.shrank_rate, 3),
            "severe_grew_rate": round_half_up(behavior.severe_grew_rate, 3),
            "severe_shrank_rate": round_half_up(behavior.severe_shrank_rate, 3),
            "mean_duration_delta_ms": round_half_up(average(m.duration_deltas_ms), 2),
            "median_duration_delta_ms": round_half_up(percentile(m.duration_deltas_ms, 50), 2),
            "p95_abs_duration_delta_ms": round_half_up(percentile([abs(d) for d in m.duration_deltas_ms], 95), 2),
            "max_abs_duration_delta_ms": round_half_up(abs_max(m.duration_deltas_ms), 2),
            "primary_pattern": behavior.primary_pattern,
            "advice_hint": advice_hint(behavior.primary_pattern),
        },
        "punctuation_formatting": {
            "punctuation_before": m.punctuation_before,
            "punctuation_after": m.punctuation_after,
            "punctuation_spacing_issue_before": sum(m.spacing_before.values()),
            "punctuation_spacing_issue_after": sum(m.spacing_after.values()),
        },
        "tags_and_emphasis": {
            "square_delta": after.square - before.square,
            "curly_delta": after.curly - before.curly,
            "angle_delta": after.angle - before.angle,
            "emphasis_delta": after.emphasis - before.emphasis,
            "breathing_delta": after.breathing - before.breathing,
        },
        "segmentation": {
            "segment_count_before": len(m.old_annotations),
            "segment_count_after": len(m.new_annotations),
            "segment_count_delta": m.segment_count_delta,
            "segment_count_direction": m.segmentation_direction,
            "added_segments": graph.added_segments,
            "deleted_segments": graph.deleted_segments,
            "split_events": graph.split_events,
            "combine_events": graph.combine_events,
            "dominant_pattern": m.segmentation_dominant_pattern,
            "old_to_new_links_p95": graph.old_to_new_links_p95,
            "new_to_old_links_p95": graph.new_to_old_links_p95,
        },
        "reviewer_playbook_hints": {
            "timestamp_tooling": timestamp_tooling(behavior.severe_grew_count, behavior.severe_shrank_count),
            "segmentation_rule_hint": SEGMENTATION_RULE_HINT,
            "breathing_rule_hint": BREATHING_RULE_HINT,
        },
    }


def build_feature_packet(m: EditMeasurements, action_id: str) -> dict:
    """Assemble the prompt-ready packet for one (original, current) pair."""
    return {
        "session": {"actionId": action_id},
        "deltas": _build_deltas(m),
        "diagnostics": _build_diagnostics(m),
        "lint": {
            "errors_before": m.lint_errors_before,
            "errors_after": m.lint_errors_after,
        },
        "text_evidence": {
            "language_hint": detect_language_hint(m.new_text),
            "transcript_before_excerpt": clip_text(m.old_text, EXCERPT_CLIP),
            "transcript_after_excerpt": clip_text(m.new_text, EXCERPT_CLIP),
            "changed_segments": [dict(s) for s in m.changed_segments_text],
            "new_segments": [dict(s) for s in m.new_segments_text],
            "removed_segments": [dict(s) for s in m.removed_segments_text],
            "lint_samples": [dict(s) for s in m.lint_samples],
            "punctuation_samples": [dict(s) for s in m.punctuation_samples],
            "tag_samples": [dict(s) for s in m.tag_samples],
        },
        "evidence": [dict(e) for e in m.evidence],
    }


def build_stats(m: EditMeasurements, packet: dict) -> dict:
    """Compact per-side counts and headline change numbers."""
    deltas = packet["deltas"]
    return {
        "original": {
            "annotations": len(m.old_annotations),
            "words": count_words(m.old_text),
            "lintErrors": packet["lint"]["errors_before"],
        },
        "current": {
            "annotations": len(m.new_annotations),
            "words": count_words(m.new_text),
            "lintErrors": packet["lint"]["errors_after"],
        },
        "changes": {
            "matched": m.matched_count,
            "changedSegments": m.changed_segments,
            "newSegments": len(m.new_only_ids),
            "removedSegments": len(m.removed_ids),
            "startShiftMeanMs": deltas["timestamp_shift_start_ms"]["mean"],
            "endShiftMeanMs": deltas["timestamp_shift_end_ms"]["mean"],
            "timestampPrimaryPattern": m.duration_behavior.primary_pattern,
            "segmentationDominantPattern": m.segmentation_dominant_pattern,
        },
    }
