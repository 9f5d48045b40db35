"""Review orchestration: metrics → prompts → model critique."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from editlens_core.config import require_api_key
from editlens_core.metrics import compute_review_metrics
from editlens_core.models import CritiqueResult, ReviewRequest
from editlens_core.prompts import Prompts, build_prompts
from editlens_core.providers.anthropic import AnthropicCritic
from editlens_core.providers.base import BaseCritic
from editlens_core.providers.openai import OpenAICritic
from editlens_core.providers.openrouter import OpenRouterCritic
from editlens_core.providers.static import StaticCritic

logger = logging.getLogger(__name__)

_PROVIDERS = {
    "openrouter": OpenRouterCritic,
    "openai": OpenAICritic,
    "anthropic": AnthropicCritic,
}


@dataclass
class PreparedReview:
    """Everything computed before the model is called.

    Decoupled from editlens_store: the CLI maps this to audit records.
    """

    stats: dict
    feature_packet: dict
    prompts: Prompts
    prepared_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return {
            "preparedAt": self.prepared_at,
            "stats": self.stats,
            "featurePacket": self.feature_packet,
            "prompts": self.prompts.to_dict(),
        }


@dataclass
class GeneratedReview:
    prepared: PreparedReview
    critique: CritiqueResult

    def to_dict(self) -> dict:
        return {"prepared": self.prepared.to_dict(), "llm": self.critique.to_dict()}


def get_critic(config: dict) -> BaseCritic:
    note_language = config.get("note_language", "English")
    if config.get("test_mode"):
        return StaticCritic(note_language=note_language)
    provider = config.get("provider")
    critic_cls = _PROVIDERS.get(provider)
    if critic_cls is None:
        raise ValueError(f"Unknown model provider: {provider!r}. Choose one of: {', '.join(_PROVIDERS)}.")
    return critic_cls(api_key=require_api_key(config), model=config.get("model"), note_language=note_language)


def prepare_review(request: ReviewRequest, note_language: str = "English") -> PreparedReview:
    metrics = compute_review_metrics(request.original, request.current, request.review_action_id)
    return PreparedReview(
        stats=metrics.stats,
        feature_packet=metrics.feature_packet,
        prompts=build_prompts(metrics.feature_packet, note_language),
    )


def generate_feedback(request: ReviewRequest, config: dict, critic: BaseCritic | None = None) -> GeneratedReview:
    """Prepare the review and obtain validated feedback from the configured model.

    Raises ParseError/SchemaError when the reply is still invalid after the
    repair turn, and UpstreamError when the provider cannot be reached.
    """
    prepared = prepare_review(request, config.get("note_language", "English"))
    critic = critic or get_critic(config)
    critique = critic.critique(prepared.prompts)
    logger.info(
        "Review %s: feedback from %s in %d ms%s",
        request.review_action_id,
        critique.model,
        critique.latency_ms,
        " (repaired)" if critique.repaired else "",
    )
    return GeneratedReview(prepared=prepared, critique=critique)
