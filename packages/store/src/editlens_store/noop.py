"""No-op audit log, used when ``audit_log: none`` is configured."""

from __future__ import annotations

from typing import TYPE_CHECKING

from editlens_store.base import BaseAuditLog

if TYPE_CHECKING:
    from editlens_store.models import AnalyticsRecord, ReviewPairRecord


class NoOpAuditLog(BaseAuditLog):
    def log_review_pair(self, record: ReviewPairRecord) -> None:
        pass

    def log_analytics(self, record: AnalyticsRecord) -> None:
        pass
