"""Audit log record models.

Decoupled from editlens_core so the store layer can be used independently
and editlens_core has no knowledge of persistence concerns. States and
metrics are carried as plain JSON-ready dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

EVENT_REVIEW_GENERATE = "review_generate"
EVENT_SUBMIT_REVIEW_ACTION = "submit_transcript_review_action"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ReviewPairRecord:
    """Before/after transcript text for one review action."""

    review_action_id: str
    original_captured_at: str
    current_captured_at: str
    original_text: str
    reviewed_text: str
    logged_at: str = field(default_factory=_now)  # ISO-8601 UTC timestamp

    def to_dict(self) -> dict:
        return {
            "loggedAt": self.logged_at,
            "reviewActionId": self.review_action_id,
            "originalCapturedAt": self.original_captured_at,
            "currentCapturedAt": self.current_captured_at,
            "originalText": self.original_text,
            "reviewedText": self.reviewed_text,
        }


@dataclass
class AnalyticsRecord:
    """One analytics event: both review states, the metrics packet and the AI review."""

    event_type: str  # EVENT_REVIEW_GENERATE | EVENT_SUBMIT_REVIEW_ACTION
    review_action_id: str
    original_captured_at: str
    current_captured_at: str
    original_text: str
    current_text: str
    original: dict
    current: dict
    stats: dict
    feature_packet: dict
    ai_review: object = None
    input_boxes: dict = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)
    logged_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "loggedAt": self.logged_at,
            "eventType": self.event_type,
            "reviewActionId": self.review_action_id,
            "originalCapturedAt": self.original_captured_at,
            "currentCapturedAt": self.current_captured_at,
            "originalText": self.original_text,
            "currentText": self.current_text,
            "original": self.original,
            "current": self.current,
            "metricsAnalysis": {"stats": self.stats, "featurePacket": self.feature_packet},
            "aiReview": self.ai_review,
            "inputBoxes": self.input_boxes,
            "metadata": self.metadata,
        }
