"""Mapping from core results to audit log records.

The CLI owns this mapping: editlens_core has no store knowledge and
editlens_store has no core knowledge. The CLI bridges the two.
"""

from __future__ import annotations

from editlens_core.models import ReviewRequest
from editlens_core.service import PreparedReview
from editlens_store.models import AnalyticsRecord, ReviewPairRecord


def to_review_pair_record(request: ReviewRequest) -> ReviewPairRecord:
    return ReviewPairRecord(
        review_action_id=request.review_action_id,
        original_captured_at=request.original.captured_at,
        current_captured_at=request.current.captured_at,
        original_text=request.original.to_text(),
        reviewed_text=request.current.to_text(),
    )


def to_analytics_record(
    event_type: str,
    request: ReviewRequest,
    prepared: PreparedReview,
    ai_review=None,
    input_boxes: dict | None = None,
    metadata: dict | None = None,
) -> AnalyticsRecord:
    return AnalyticsRecord(
        event_type=event_type,
        review_action_id=request.review_action_id,
        original_captured_at=request.original.captured_at,
        current_captured_at=request.current.captured_at,
        original_text=request.original.to_text(),
        current_text=request.current.to_text(),
        original=request.original.to_dict(),
        current=request.current.to_dict(),
        stats=prepared.stats,
        feature_packet=prepared.feature_packet,
        ai_review=ai_review,
        input_boxes=input_boxes or {},
        metadata=metadata or {},
    )
