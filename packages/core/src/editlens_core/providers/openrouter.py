"""OpenRouter provider.

OpenRouter exposes an OpenAI-compatible chat completions API, so this reuses
the OpenAI SDK pointed at the OpenRouter base URL. Requests ask for the
lowest-latency upstream with fallbacks allowed, restricted to upstreams that
honour every request parameter (notably the JSON response format).
"""

from __future__ import annotations

from editlens_core.providers.openai import OpenAICritic, _OpenAI

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
APP_TITLE = "editlens review assistant"


class OpenRouterCritic(OpenAICritic):
    MODEL = "openai/gpt-oss-120b"
    TEMPERATURE = 0.2

    def _build_client(self, api_key: str):
        return _OpenAI(
            api_key=api_key,
            base_url=OPENROUTER_BASE_URL,
            max_retries=0,
            default_headers={"X-Title": APP_TITLE},
        )

    def _request_options(self) -> dict:
        return {
            "extra_body": {
                "provider": {
                    "sort": "latency",
                    "allow_fallbacks": True,
                    "require_parameters": True,
                }
            }
        }
