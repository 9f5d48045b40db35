"""Tests for the segmentation overlap graph."""

import pytest

from editlens_core.models import Annotation
from editlens_core.segmentation import (
    SegmentationGraphStats,
    build_link_degrees,
    compute_segmentation_graph_stats,
    overlap_ms,
)


def _seg(seg_id, start, end):
    return Annotation(id=seg_id, content="x", start_time=start, end_time=end)


class TestOverlap:
    def test_overlap_in_ms(self):
        assert overlap_ms(_seg("a", 0.0, 1.0), _seg("b", 0.5, 2.0)) == 500

    def test_disjoint_is_zero(self):
        assert overlap_ms(_seg("a", 0.0, 1.0), _seg("b", 2.0, 3.0)) == 0.0


class TestLinkDegrees:
    def test_short_overlap_does_not_link(self):
        old_to_new, new_to_old = build_link_degrees([_seg("a", 0.0, 1.0)], [_seg("b", 0.9, 2.0)])
        assert old_to_new == {"a": 0}
        assert new_to_old == {"b": 0}

    def test_overlap_at_threshold_links(self):
        old_to_new, _ = build_link_degrees([_seg("a", 0.0, 1.0)], [_seg("b", 0.875, 2.0)])
        assert old_to_new == {"a": 1}


class TestGraphStats:
    def test_empty_inputs(self):
        assert compute_segmentation_graph_stats([], []) == SegmentationGraphStats()

    def test_split(self):
        old = [_seg("a", 0.0, 2.0)]
        new = [_seg("b", 0.0, 1.0), _seg("c", 1.0, 2.0)]
        stats = compute_segmentation_graph_stats(old, new)
        assert stats.split_events == 1
        assert stats.combine_events == 0
        assert stats.added_segments == 0
        assert stats.old_to_new_links_p95 == 2

    def test_combine(self):
        old = [_seg("a", 0.0, 1.0), _seg("b", 1.0, 2.0)]
        new = [_seg("c", 0.0, 2.0)]
        stats = compute_segmentation_graph_stats(old, new)
        assert stats.combine_events == 1
        assert stats.split_events == 0
        assert stats.new_to_old_links_p95 == 2

    def test_added_and_deleted(self):
        old = [_seg("a", 0.0, 1.0)]
        new = [_seg("b", 5.0, 6.0)]
        stats = compute_segmentation_graph_stats(old, new)
        assert stats.added_segments == 1
        assert stats.deleted_segments == 1
        assert stats.old_to_new_links_p95 == 0

    @pytest.mark.parametrize(
        "old,new",
        [
            ([(0.0, 2.0)], [(0.0, 1.0), (1.0, 2.0), (5.0, 6.0)]),
            ([(0.0, 1.0), (1.0, 2.0)], [(0.0, 2.0)]),
            ([(0.0, 1.0)], [(0.95, 1.5), (3.0, 4.0)]),
            ([], [(0.0, 1.0)]),
        ],
    )
    def test_added_plus_linked_new_segments_equals_new_count(self, old, new):
        old_segs = [_seg(f"o{i}", s, e) for i, (s, e) in enumerate(old)]
        new_segs = [_seg(f"n{i}", s, e) for i, (s, e) in enumerate(new)]
        _, new_to_old = build_link_degrees(old_segs, new_segs)
        stats = compute_segmentation_graph_stats(old_segs, new_segs)
        linked = sum(1 for degree in new_to_old.values() if degree >= 1)
        assert stats.added_segments + linked == len(new_segs)
