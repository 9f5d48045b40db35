"""Diff & metrics engine for two review states.

measure_edit() turns an (original, current) pair into an EditMeasurements
snapshot: identity matching, timestamp shifts, duration behaviour, word-level
change counts, punctuation/markup counts and bounded evidence samples.
compute_review_metrics() hands that snapshot to the feature packet assembler.

The engine never raises on annotation content: missing text counts as empty
and reversed timestamps count as zero duration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from editlens_core.features import build_feature_packet, build_stats
from editlens_core.models import Annotation, NormalizedState
from editlens_core.segmentation import SegmentationGraphStats, compute_segmentation_graph_stats
from editlens_core.utils.text import clip_text, count_pattern, count_words, round_half_up

# Duration-delta thresholds (after − before, ms) for grew/shrank classification.
MILD_DURATION_DELTA_MS = 120
SEVERE_DURATION_DELTA_MS = 500

# Changed-segment rate thresholds for the word accuracy severity label.
HIGH_CHANGE_RATE = 0.35
MODERATE_CHANGE_RATE = 0.15

# Truncation caps for evidence lists.
EVIDENCE_LIMIT = 6
CHANGED_SEGMENTS_LIMIT = 10
SAMPLE_LIMIT = 8

# Character caps for clipped text fields.
EVIDENCE_CLIP = 280
SEGMENT_TEXT_CLIP = 360
CHANGED_TEXT_CLIP = 380
LINT_TEXT_CLIP = 320
PUNCTUATION_TEXT_CLIP = 260
TAG_TEXT_CLIP = 300

PUNCTUATION = re.compile(r"[.,!?;:]")
SPACING_PATTERNS = {
    "spaces_before_comma": re.compile(r"\s+,"),
    "spaces_before_dot": re.compile(r"\s+\."),
    "spaces_before_colon": re.compile(r"\s+:"),
    "spaces_before_semicolon": re.compile(r"\s+;"),
    "no_space_after_punct": re.compile(r"[.,!?;:][^\s\d\])}>\"']"),
}
SQUARE_TAG = re.compile(r"\[[^\]]+\]")
CURLY_TAG = re.compile(r"\{[^}]+\}")
ANGLE_TAG = re.compile(r"<[^>]+>")
EMPHASIS = re.compile(r"\*\*[^*]+\*\*")
ANY_MARKUP = re.compile(r"\[[^\]]+\]|\{[^}]+\}|<[^>]+>|\*\*[^*]+\*\*")
BREATHING_TAG = re.compile(r"\[(?:дыхание|вдох|выдох|вздох|резкий-вздох)\]", re.IGNORECASE)


@dataclass(frozen=True)
class MarkupCounts:
    square: int = 0
    curly: int = 0
    angle: int = 0
    emphasis: int = 0
    breathing: int = 0


@dataclass(frozen=True)
class DurationBehavior:
    grew_count: int = 0
    shrank_count: int = 0
    severe_grew_count: int = 0
    severe_shrank_count: int = 0
    grew_rate: float = 0.0
    shrank_rate: float = 0.0
    severe_grew_rate: float = 0.0
    severe_shrank_rate: float = 0.0
    primary_pattern: str = "balanced_or_minor"


@dataclass(frozen=True)
class EditMeasurements:
    """Raw per-pair numbers and samples; the feature packet is built from this."""

    old_annotations: list[Annotation]
    new_annotations: list[Annotation]
    matched_ids: list[str]
    new_only_ids: list[str]
    removed_ids: list[str]
    start_shifts_ms: list[float]
    end_shifts_ms: list[float]
    duration_deltas_ms: list[float]
    changed_segments: int
    token_insertions: int
    token_deletions: int
    token_replacements: int
    word_accuracy_severity: str
    duration_behavior: DurationBehavior
    old_text: str
    new_text: str
    punctuation_before: int
    punctuation_after: int
    spacing_before: dict[str, int]
    spacing_after: dict[str, int]
    markup_before: MarkupCounts
    markup_after: MarkupCounts
    segmentation: SegmentationGraphStats
    segmentation_direction: str
    segmentation_dominant_pattern: str
    lint_errors_before: int
    lint_errors_after: int
    evidence: list[dict] = field(default_factory=list)
    changed_segments_text: list[dict] = field(default_factory=list)
    new_segments_text: list[dict] = field(default_factory=list)
    removed_segments_text: list[dict] = field(default_factory=list)
    lint_samples: list[dict] = field(default_factory=list)
    punctuation_samples: list[dict] = field(default_factory=list)
    tag_samples: list[dict] = field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return len(self.matched_ids)

    @property
    def segment_count_delta(self) -> int:
        return len(self.new_annotations) - len(self.old_annotations)


@dataclass(frozen=True)
class ReviewMetrics:
    stats: dict
    feature_packet: dict


def _time_range(seg: Annotation) -> list[float]:
    return [round_half_up(seg.start_time, 3), round_half_up(seg.end_time, 3)]


def _rate(count: int, total: int) -> float:
    return count / total if total else 0.0


def count_spacing_issues(text: str) -> dict[str, int]:
    return {name: count_pattern(text, pattern) for name, pattern in SPACING_PATTERNS.items()}


def count_markup(text: str) -> MarkupCounts:
    return MarkupCounts(
        square=count_pattern(text, SQUARE_TAG),
        curly=count_pattern(text, CURLY_TAG),
        angle=count_pattern(text, ANGLE_TAG),
        emphasis=count_pattern(text, EMPHASIS),
        breathing=count_pattern(text, BREATHING_TAG),
    )


def classify_change_severity(rate: float) -> str:
    if rate >= HIGH_CHANGE_RATE:
        return "high"
    if rate >= MODERATE_CHANGE_RATE:
        return "moderate"
    return "low"


def classify_duration_deltas(deltas: list[float], matched_count: int) -> DurationBehavior:
    """Count grew/shrank segments and pick the dominant timestamp pattern.

    Severe rates are compared first; mild rates only break a severe tie.
    """
    grew = sum(1 for d in deltas if d >= MILD_DURATION_DELTA_MS)
    shrank = sum(1 for d in deltas if d <= -MILD_DURATION_DELTA_MS)
    severe_grew = sum(1 for d in deltas if d >= SEVERE_DURATION_DELTA_MS)
    severe_shrank = sum(1 for d in deltas if d <= -SEVERE_DURATION_DELTA_MS)

    grew_rate = _rate(grew, matched_count)
    shrank_rate = _rate(shrank, matched_count)
    severe_grew_rate = _rate(severe_grew, matched_count)
    severe_shrank_rate = _rate(severe_shrank, matched_count)

    if severe_shrank_rate > severe_grew_rate:
        pattern = "speech_cut_risk"
    elif severe_grew_rate > severe_shrank_rate:
        pattern = "silence_included_risk"
    elif shrank_rate > grew_rate:
        pattern = "speech_cut_risk_mild"
    elif grew_rate > shrank_rate:
        pattern = "silence_included_risk_mild"
    else:
        pattern = "balanced_or_minor"

    return DurationBehavior(
        grew_count=grew,
        shrank_count=shrank,
        severe_grew_count=severe_grew,
        severe_shrank_count=severe_shrank,
        grew_rate=grew_rate,
        shrank_rate=shrank_rate,
        severe_grew_rate=severe_grew_rate,
        severe_shrank_rate=severe_shrank_rate,
        primary_pattern=pattern,
    )


def segmentation_direction(delta: int) -> str:
    if delta > 0:
        return "more_segments_after_l2"
    if delta < 0:
        return "fewer_segments_after_l2"
    return "same_count"


def dominant_segmentation_pattern(graph: SegmentationGraphStats) -> str:
    """Largest of added/deleted/split/combined; earlier entries win ties."""
    events = [
        ("added", graph.added_segments),
        ("deleted", graph.deleted_segments),
        ("split", graph.split_events),
        ("combined", graph.combine_events),
    ]
    best_key, best_value = events[0]
    for key, value in events[1:]:
        if value > best_value:
            best_key, best_value = key, value
    if best_value == 0:
        return "minor_or_none"
    return best_key


def measure_edit(original: NormalizedState, current: NormalizedState) -> EditMeasurements:
    old_annotations = original.sorted_annotations()
    new_annotations = current.sorted_annotations()

    old_map = {a.id: a for a in old_annotations}
    new_map = {a.id: a for a in new_annotations}
    matched_ids = [i for i in old_map if i in new_map]
    new_only_ids = [i for i in new_map if i not in old_map]
    removed_ids = [i for i in old_map if i not in new_map]

    start_shifts: list[float] = []
    end_shifts: list[float] = []
    duration_deltas: list[float] = []
    changed_segments = 0
    insertions = deletions = replacements = 0
    evidence: list[dict] = []
    changed_text: list[dict] = []

    for annotation_id in matched_ids:
        before = old_map[annotation_id]
        after = new_map[annotation_id]

        start_shifts.append((after.start_time - before.start_time) * 1000)
        end_shifts.append((after.end_time - before.end_time) * 1000)
        duration_deltas.append(after.duration_ms - before.duration_ms)

        if before.content == after.content:
            continue

        changed_segments += 1
        before_words = count_words(before.content)
        after_words = count_words(after.content)
        insertions += max(0, after_words - before_words)
        deletions += max(0, before_words - after_words)
        if before_words > 0 and after_words > 0:
            replacements += 1

        if len(evidence) < EVIDENCE_LIMIT:
            evidence.append(
                {
                    "category_hint": "Word Accuracy",
                    "annotationId": annotation_id,
                    "time_after": _time_range(after),
                    "before": clip_text(before.content, EVIDENCE_CLIP),
                    "after": clip_text(after.content, EVIDENCE_CLIP),
                }
            )
        if len(changed_text) < CHANGED_SEGMENTS_LIMIT:
            changed_text.append(
                {
                    "annotationId": annotation_id,
                    "time_after": _time_range(after),
                    "before": clip_text(before.content, CHANGED_TEXT_CLIP),
                    "after": clip_text(after.content, CHANGED_TEXT_CLIP),
                }
            )

    old_text = " ".join(a.content for a in old_annotations)
    new_text = " ".join(a.content for a in new_annotations)

    new_segments_text = [
        {
            "annotationId": seg.id,
            "time_after": _time_range(seg),
            "text": clip_text(seg.content, SEGMENT_TEXT_CLIP),
        }
        for seg in (new_map[i] for i in new_only_ids[:SAMPLE_LIMIT])
    ]
    removed_segments_text = [
        {
            "annotationId": seg.id,
            "time_before": _time_range(seg),
            "text": clip_text(seg.content, SEGMENT_TEXT_CLIP),
        }
        for seg in (old_map[i] for i in removed_ids[:SAMPLE_LIMIT])
    ]

    lint_samples = []
    for lint in current.lint_errors[:SAMPLE_LIMIT]:
        seg = new_map.get(lint.annotation_id)
        lint_samples.append(
            {
                "annotationId": lint.annotation_id,
                "reason": lint.reason,
                "severity": lint.severity,
                "text": clip_text(seg.content if seg else "", LINT_TEXT_CLIP),
                "time_after": _time_range(seg) if seg else None,
            }
        )

    punctuation_samples = [
        {
            "annotationId": seg.id,
            "text": clip_text(seg.content, PUNCTUATION_TEXT_CLIP),
            "punctuation_count": count_pattern(seg.content, PUNCTUATION),
            "time_after": _time_range(seg),
        }
        for seg in [s for s in new_annotations if PUNCTUATION.search(s.content)][:SAMPLE_LIMIT]
    ]
    tag_samples = [
        {
            "annotationId": seg.id,
            "text": clip_text(seg.content, TAG_TEXT_CLIP),
            "time_after": _time_range(seg),
        }
        for seg in [s for s in new_annotations if ANY_MARKUP.search(s.content)][:SAMPLE_LIMIT]
    ]

    matched_count = len(matched_ids)
    graph = compute_segmentation_graph_stats(old_annotations, new_annotations)

    return EditMeasurements(
        old_annotations=old_annotations,
        new_annotations=new_annotations,
        matched_ids=matched_ids,
        new_only_ids=new_only_ids,
        removed_ids=removed_ids,
        start_shifts_ms=start_shifts,
        end_shifts_ms=end_shifts,
        duration_deltas_ms=duration_deltas,
        changed_segments=changed_segments,
        token_insertions=insertions,
        token_deletions=deletions,
        token_replacements=replacements,
        word_accuracy_severity=classify_change_severity(_rate(changed_segments, matched_count)),
        duration_behavior=classify_duration_deltas(duration_deltas, matched_count),
        old_text=old_text,
        new_text=new_text,
        punctuation_before=count_pattern(old_text, PUNCTUATION),
        punctuation_after=count_pattern(new_text, PUNCTUATION),
        spacing_before=count_spacing_issues(old_text),
        spacing_after=count_spacing_issues(new_text),
        markup_before=count_markup(old_text),
        markup_after=count_markup(new_text),
        segmentation=graph,
        segmentation_direction=segmentation_direction(len(new_annotations) - len(old_annotations)),
        segmentation_dominant_pattern=dominant_segmentation_pattern(graph),
        lint_errors_before=len(original.lint_errors),
        lint_errors_after=len(current.lint_errors),
        evidence=evidence,
        changed_segments_text=changed_text,
        new_segments_text=new_segments_text,
        removed_segments_text=removed_segments_text,
        lint_samples=lint_samples,
        punctuation_samples=punctuation_samples,
        tag_samples=tag_samples,
    )


def compute_review_metrics(original: NormalizedState, current: NormalizedState, action_id: str) -> ReviewMetrics:
    """Produce the compact stats summary and the full feature packet for one review action."""
    measurements = measure_edit(original, current)
    packet = build_feature_packet(measurements, action_id)
    return ReviewMetrics(stats=build_stats(measurements, packet), feature_packet=packet)
