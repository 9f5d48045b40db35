import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG: dict = {
    "provider": "openrouter",
    "model": None,  # None = the provider's default model
    "test_mode": False,
    "note_language": "English",
    "audit_log": "jsonl",  # "jsonl" or "none"
    "review_pair_log_path": "logs/review-text-pairs.jsonl",
    "analytics_log_path": "logs/review-analytics.jsonl",
}

PROVIDER_KEY_ENV = {
    "openrouter": "OPENROUTER_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

_TRUTHY = {"1", "true", "yes", "on"}


def load_env_files(base_dir: str = ".") -> None:
    """
    Load ``.env.runtime`` and then ``.env.runtime.<EDITLENS_ENV>`` when present.

    Variables already exported in the environment are never overridden.
    """
    base = Path(base_dir)
    load_dotenv(base / ".env.runtime", override=False)
    mode = os.environ.get("EDITLENS_ENV", "").strip()
    if mode:
        load_dotenv(base / f".env.runtime.{mode}", override=False)


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name, "").strip().lower()
    if not value:
        return None
    return value in _TRUTHY


def load_config(config_path: str = ".editlens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .editlens.yml in the current directory
      3. CLI argument overrides
      4. EDITLENS_MODEL / EDITLENS_TEST_MODE environment variables
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    env_model = os.environ.get("EDITLENS_MODEL", "").strip()
    if env_model:
        config["model"] = env_model
    env_test_mode = _env_flag("EDITLENS_TEST_MODE")
    if env_test_mode is not None:
        config["test_mode"] = env_test_mode

    # Resolve credentials from environment variables
    config["openrouter_api_key"] = os.environ.get("OPENROUTER_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

    return config


def require_api_key(config: dict) -> Optional[str]:
    """
    Return the API key for the configured provider.

    Test mode needs no key and returns None. Raises ValueError naming the
    environment variable when the key is missing.
    """
    if config.get("test_mode"):
        return None
    provider = config.get("provider")
    env_name = PROVIDER_KEY_ENV.get(provider)
    if env_name is None:
        raise ValueError(f"Unknown model provider: {provider!r}. Choose one of: {', '.join(PROVIDER_KEY_ENV)}.")
    key = config.get(f"{provider}_api_key")
    if not key:
        raise ValueError(f"{env_name} environment variable is not set.")
    return key
