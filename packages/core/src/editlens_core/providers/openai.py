from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from editlens_core.providers.base import BaseCritic


class OpenAICritic(BaseCritic):
    MODEL = "gpt-4o"
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, model: str | None = None, note_language: str = "English"):
        super().__init__(model=model, note_language=note_language)
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. " "Install it with: pip install 'editlens[openai]'"
            )
        self.client = self._build_client(api_key)

    def _build_client(self, api_key: str):
        return _OpenAI(api_key=api_key, max_retries=0)

    def _request_options(self) -> dict:
        """Extra keyword arguments passed to chat.completions.create."""
        return {}

    def _call_api(self, messages: list[dict]) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            response_format={"type": "json_object"},
            **self._request_options(),
        )
        return response.choices[0].message.content or ""
