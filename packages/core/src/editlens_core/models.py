"""Review state and feedback data models.

Wire format uses the reviewing application's camelCase keys; the dataclasses
expose snake_case attributes. Unrecognised keys are carried in ``extra`` so a
state can be written back to the audit log exactly as it was received.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from editlens_core.errors import InputError


class Category(str, Enum):
    WORD_ACCURACY = "Word Accuracy"
    TIMESTAMP_ACCURACY = "Timestamp Accuracy"
    PUNCTUATION_FORMATTING = "Punctuation & Formatting"
    TAGS_EMPHASIS = "Tags & Emphasis"
    SEGMENTATION = "Segmentation"


# Canonical order; validated feedback is always returned in this order.
CATEGORIES: tuple[Category, ...] = tuple(Category)

_ANNOTATION_KEYS = {"id", "content", "startTimeInSeconds", "endTimeInSeconds", "metadata"}
_STATE_KEYS = {"annotations", "lintErrors", "capturedAt"}


def _parse_seconds(raw, key: str, annotation_id: str) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise InputError(f"Annotation {annotation_id!r}: {key} must be a number.")
    try:
        value = float(raw)
    except OverflowError:
        raise InputError(f"Annotation {annotation_id!r}: {key} must be finite.")
    if not math.isfinite(value):
        raise InputError(f"Annotation {annotation_id!r}: {key} must be finite.")
    return value


@dataclass(frozen=True)
class Annotation:
    """One timestamped transcript segment."""

    id: str
    content: str = ""
    start_time: float = 0.0
    end_time: float = 0.0
    metadata: dict | None = None
    extra: dict = field(default_factory=dict, compare=False)

    @property
    def duration_ms(self) -> float:
        # Reversed timestamps count as zero duration.
        return max(0.0, (self.end_time - self.start_time) * 1000)

    @classmethod
    def from_dict(cls, data) -> Annotation:
        if not isinstance(data, dict):
            raise InputError("Each annotation must be an object.")
        annotation_id = data.get("id")
        if not isinstance(annotation_id, str) or not annotation_id:
            raise InputError("Each annotation requires a non-empty string id.")
        content = data.get("content")
        metadata = data.get("metadata")
        return cls(
            id=annotation_id,
            content=content if isinstance(content, str) else "",
            start_time=_parse_seconds(data.get("startTimeInSeconds"), "startTimeInSeconds", annotation_id),
            end_time=_parse_seconds(data.get("endTimeInSeconds"), "endTimeInSeconds", annotation_id),
            metadata=metadata if isinstance(metadata, dict) else None,
            extra={k: v for k, v in data.items() if k not in _ANNOTATION_KEYS},
        )

    def to_dict(self) -> dict:
        return {
            **self.extra,
            "id": self.id,
            "content": self.content,
            "startTimeInSeconds": self.start_time,
            "endTimeInSeconds": self.end_time,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class LintError:
    """A finding produced by the external transcript linter."""

    annotation_id: str = ""
    reason: str = ""
    severity: str = ""

    @classmethod
    def from_dict(cls, data) -> LintError:
        if not isinstance(data, dict):
            raise InputError("Each lint error must be an object.")
        return cls(
            annotation_id=str(data.get("annotationId") or ""),
            reason=str(data.get("reason") or ""),
            severity=str(data.get("severity") or ""),
        )

    def to_dict(self) -> dict:
        return {"annotationId": self.annotation_id, "reason": self.reason, "severity": self.severity}


@dataclass(frozen=True)
class NormalizedState:
    """One snapshot (before or after the edit) of a review action."""

    annotations: tuple[Annotation, ...] = ()
    lint_errors: tuple[LintError, ...] = ()
    captured_at: str = ""
    extra: dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data, label: str = "state") -> NormalizedState:
        if not isinstance(data, dict):
            raise InputError(f"{label} must be an object.")
        annotations = data.get("annotations") or []
        lint_errors = data.get("lintErrors") or []
        if not isinstance(annotations, list):
            raise InputError(f"{label}.annotations must be a list.")
        if not isinstance(lint_errors, list):
            raise InputError(f"{label}.lintErrors must be a list.")
        return cls(
            annotations=tuple(Annotation.from_dict(a) for a in annotations),
            lint_errors=tuple(LintError.from_dict(e) for e in lint_errors),
            captured_at=str(data.get("capturedAt") or ""),
            extra={k: v for k, v in data.items() if k not in _STATE_KEYS},
        )

    def to_dict(self) -> dict:
        return {
            **self.extra,
            "annotations": [a.to_dict() for a in self.annotations],
            "lintErrors": [e.to_dict() for e in self.lint_errors],
            "capturedAt": self.captured_at,
        }

    def sorted_annotations(self) -> list[Annotation]:
        """Annotations ordered by start time, then id."""
        return sorted(self.annotations, key=lambda a: (a.start_time, a.id))

    def to_text(self) -> str:
        """Plain transcript text, one segment per line, in playback order."""
        return "\n".join(a.content for a in self.sorted_annotations()).strip()


@dataclass(frozen=True)
class ReviewRequest:
    review_action_id: str
    original: NormalizedState
    current: NormalizedState


def parse_review_request(body) -> ReviewRequest:
    """Validate a ``{reviewActionId, original, current}`` mapping."""
    if not isinstance(body, dict):
        raise InputError("Body must be an object.")
    action_id = body.get("reviewActionId")
    if not isinstance(action_id, str) or not action_id.strip():
        raise InputError("reviewActionId is required.")
    if not isinstance(body.get("original"), dict) or not isinstance(body.get("current"), dict):
        raise InputError("original and current are required.")
    return ReviewRequest(
        review_action_id=action_id,
        original=NormalizedState.from_dict(body["original"], "original"),
        current=NormalizedState.from_dict(body["current"], "current"),
    )


@dataclass(frozen=True)
class FeedbackItem:
    category: Category
    score: int
    note: str

    def to_dict(self) -> dict:
        return {"category": self.category.value, "score": self.score, "note": self.note}


@dataclass
class CritiqueResult:
    """Validated model feedback plus the metadata callers log alongside it."""

    feedback: list[FeedbackItem]
    raw_model_text: str
    model: str
    latency_ms: int
    received_at: str  # ISO-8601 UTC timestamp
    repaired: bool = False

    def to_dict(self) -> dict:
        return {
            "feedback": [item.to_dict() for item in self.feedback],
            "rawModelText": self.raw_model_text,
            "modelIdentifier": self.model,
            "latencyMs": self.latency_ms,
            "receivedAt": self.received_at,
            "repaired": self.repaired,
        }
