"""JsonlAuditLog — append-only JSON-lines files.

One compact JSON object per line, one file per record kind. Parent
directories are created on first write. Write errors propagate; callers
that treat logging as best-effort catch OSError themselves.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from editlens_store.base import BaseAuditLog

if TYPE_CHECKING:
    from editlens_store.models import AnalyticsRecord, ReviewPairRecord

logger = logging.getLogger(__name__)


class JsonlAuditLog(BaseAuditLog):
    def __init__(self, review_pair_path: str, analytics_path: str):
        self._review_pair_path = Path(review_pair_path)
        self._analytics_path = Path(analytics_path)

    def log_review_pair(self, record: ReviewPairRecord) -> None:
        self._append(self._review_pair_path, record.to_dict())

    def log_analytics(self, record: AnalyticsRecord) -> None:
        self._append(self._analytics_path, record.to_dict())

    @staticmethod
    def _append(path: Path, entry: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry, ensure_ascii=False, default=str)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        logger.debug("Appended audit entry to %s", path)
