"""Offline critic used in test mode.

Returns a fixed, schema-valid reply without any network access so the rest
of the pipeline (validation, logging, CLI output) can be exercised locally.
"""

from __future__ import annotations

import json

from editlens_core.models import CATEGORIES
from editlens_core.providers.base import BaseCritic

STATIC_SCORES = (1, 2, 3)
STATIC_NOTE = "test test test"


def static_reply() -> str:
    feedback = [
        {"category": category.value, "score": STATIC_SCORES[i % len(STATIC_SCORES)], "note": STATIC_NOTE}
        for i, category in enumerate(CATEGORIES)
    ]
    return json.dumps({"feedback": feedback}, ensure_ascii=False)


class StaticCritic(BaseCritic):
    MODEL = "test-mode"

    def _call_api(self, messages: list[dict]) -> str:
        return static_reply()
