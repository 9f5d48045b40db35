"""Reading review requests and side files from disk."""

from __future__ import annotations

import json
from pathlib import Path

from editlens_core.errors import InputError
from editlens_core.models import ReviewRequest, parse_review_request


def read_json(path: str):
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InputError(f"{path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise InputError(f"{path} is not valid UTF-8 JSON: {e}") from e


def read_json_object(path: str | None, name: str) -> dict | None:
    """Load an optional JSON file that must hold an object."""
    if path is None:
        return None
    value = read_json(path)
    if not isinstance(value, dict):
        raise InputError(f"{name} must be an object when provided.")
    return value


def load_request(path: str) -> ReviewRequest:
    """Load a ``{reviewActionId, original, current}`` request file."""
    return parse_review_request(read_json(path))
