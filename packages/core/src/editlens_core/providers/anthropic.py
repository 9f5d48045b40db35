from __future__ import annotations

from editlens_core.providers.base import BaseCritic


class AnthropicCritic(BaseCritic):
    MODEL = "claude-sonnet-4-20250514"
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, model: str | None = None, note_language: str = "English"):
        super().__init__(model=model, note_language=note_language)
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'editlens[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key, max_retries=0)

    def _call_api(self, messages: list[dict]) -> str:
        # Imported inside the method because the anthropic package is optional;
        # __init__ already validated it is installed before we reach here.
        from anthropic.types import TextBlock

        # The Messages API takes the system prompt separately from the turns.
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [{"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"]

        response = self.client.messages.create(
            model=self.model,
            system=system,
            messages=turns,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
