"""Abstract audit log interface.

The CLI depends on BaseAuditLog, not on a concrete backend, so backends are
swappable without touching CLI code. Logs are append-only: there is no read
or query method.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from editlens_store.models import AnalyticsRecord, ReviewPairRecord


class BaseAuditLog(ABC):
    @abstractmethod
    def log_review_pair(self, record: ReviewPairRecord) -> None:
        """Append the before/after text of one review action."""

    @abstractmethod
    def log_analytics(self, record: AnalyticsRecord) -> None:
        """Append one analytics event."""

    def close(self) -> None:
        """Release any resources held by the log.

        Default is a no-op so callers can always call close() safely.
        """
