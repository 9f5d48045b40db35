"""Base critic implementing the Template Method pattern.

All providers share the same critique algorithm:
    critique() → _call_with_retry() → _call_api()   ← only this differs per provider
               → parse_and_validate()
               → on ParseError/SchemaError: one repair turn → parse_and_validate()

SDK clients are built with max_retries=0: _call_with_retry is the only
transport retry layer.

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: send one list of chat messages and return the text reply

The repair turn replays the first reply as the assistant message and appends
a corrective instruction. A second failure propagates to the caller; there is
never a third model turn.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from editlens_core.errors import ModelOutputError, UpstreamError
from editlens_core.models import CritiqueResult
from editlens_core.prompts import Prompts, build_repair_instruction
from editlens_core.validation import parse_and_validate

logger = logging.getLogger(__name__)

# Shared defaults; subclasses may override them as class attributes.
_MAX_RETRIES = 3
_MAX_TOKENS = 4096

# Replayed in the repair turn in place of a blank first reply.
EMPTY_REPLY_PLACEHOLDER = "(empty reply)"


class BaseCritic(ABC):
    MODEL: str = ""
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None, note_language: str = "English"):
        self.model = model or self.MODEL
        self.note_language = note_language

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def critique(self, prompts: Prompts) -> CritiqueResult:
        """Run the first model turn and, if its reply is invalid, exactly one repair turn."""
        started = time.monotonic()
        messages = [
            {"role": "system", "content": prompts.system_prompt},
            {"role": "user", "content": prompts.user_prompt},
        ]

        first = self._call_with_retry(messages)
        try:
            feedback = parse_and_validate(first)
            return self._result(feedback, first, started, repaired=False)
        except ModelOutputError as e:
            logger.warning(
                "%s: first reply failed validation (%s). Sending repair turn.",
                self.__class__.__name__,
                e,
            )

        repair_messages = [
            *messages,
            {"role": "assistant", "content": first if first.strip() else EMPTY_REPLY_PLACEHOLDER},
            {"role": "user", "content": build_repair_instruction(self.note_language)},
        ]
        repaired = self._call_with_retry(repair_messages)
        feedback = parse_and_validate(repaired)
        return self._result(feedback, repaired, started, repaired=True)

    # ------------------------------------------------------------------ #
    # Abstract — implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, messages: list[dict]) -> str:
        """Make a single API call and return the raw text reply.

        Should raise on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, messages: list[dict]) -> str:
        """Retry _call_api on transport errors with exponential backoff.

        Raises UpstreamError after MAX_RETRIES failed attempts. Invalid
        replies are not transport errors and are never retried here.
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(messages) or ""
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise UpstreamError(f"{self.__class__.__name__} request failed: {e}") from e
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)
        raise UpstreamError(f"{self.__class__.__name__} made no request attempts.")

    def _result(self, feedback, raw: str, started: float, repaired: bool) -> CritiqueResult:
        return CritiqueResult(
            feedback=feedback,
            raw_model_text=raw,
            model=self.model,
            latency_ms=int((time.monotonic() - started) * 1000),
            received_at=datetime.now(timezone.utc).isoformat(),
            repaired=repaired,
        )
