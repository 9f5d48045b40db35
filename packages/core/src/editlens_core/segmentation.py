"""Segmentation graph: bipartite time-overlap links between old and new segments.

Two segments are linked when their time ranges overlap by at least
MIN_LINK_OVERLAP_MS. Degree counts on each side classify the edit:

    old segment, degree 0   → deleted
    old segment, degree ≥ 2 → split (one segment became several)
    new segment, degree 0   → added
    new segment, degree ≥ 2 → combined (several segments merged into one)

Cost is O(|old| × |new|), which is fine at review scale (hundreds of segments).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from editlens_core.models import Annotation
from editlens_core.utils.text import percentile, round_half_up

MIN_LINK_OVERLAP_MS = 120
LINK_PERCENTILE = 95


@dataclass(frozen=True)
class SegmentationGraphStats:
    added_segments: int = 0
    deleted_segments: int = 0
    split_events: int = 0
    combine_events: int = 0
    old_to_new_links_p95: float = 0.0
    new_to_old_links_p95: float = 0.0


def overlap_ms(a: Annotation, b: Annotation) -> float:
    start = max(a.start_time, b.start_time)
    end = min(a.end_time, b.end_time)
    return max(0.0, (end - start) * 1000)


def build_link_degrees(
    old: Sequence[Annotation], new: Sequence[Annotation]
) -> tuple[dict[str, int], dict[str, int]]:
    """Return (old id → number of linked new segments, new id → number of linked old segments).

    Every id appears in its map, with degree 0 when it has no link.
    """
    old_to_new = {seg.id: 0 for seg in old}
    new_to_old = {seg.id: 0 for seg in new}
    for old_seg in old:
        for new_seg in new:
            if overlap_ms(old_seg, new_seg) < MIN_LINK_OVERLAP_MS:
                continue
            old_to_new[old_seg.id] += 1
            new_to_old[new_seg.id] += 1
    return old_to_new, new_to_old


def compute_segmentation_graph_stats(old: Sequence[Annotation], new: Sequence[Annotation]) -> SegmentationGraphStats:
    old_to_new, new_to_old = build_link_degrees(old, new)
    old_links = list(old_to_new.values())
    new_links = list(new_to_old.values())
    return SegmentationGraphStats(
        added_segments=sum(1 for n in new_links if n == 0),
        deleted_segments=sum(1 for n in old_links if n == 0),
        split_events=sum(1 for n in old_links if n >= 2),
        combine_events=sum(1 for n in new_links if n >= 2),
        old_to_new_links_p95=round_half_up(percentile(old_links, LINK_PERCENTILE), 2),
        new_to_old_links_p95=round_half_up(percentile(new_links, LINK_PERCENTILE), 2),
    )
