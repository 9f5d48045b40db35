import math
import re

_CYRILLIC = re.compile(r"[\u0400-\u04FF]")
_LATIN = re.compile(r"[A-Za-z]")

ELLIPSIS = "..."


def count_words(text: str) -> int:
    return len(text.split())


def count_pattern(text: str, pattern: re.Pattern) -> int:
    return sum(1 for _ in pattern.finditer(text))


def average(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def percentile(values: list[float], p: float) -> float:
    """Nearest-rank percentile over the ascending-sorted values; 0 for empty input."""
    if not values:
        return 0.0
    ordered = sorted(values)
    idx = math.ceil((p / 100) * len(ordered)) - 1
    return ordered[max(0, min(len(ordered) - 1, idx))]


def round_half_up(value, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves going up; non-numeric input gives 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    factor = 10**digits
    return math.floor(number * factor + 0.5) / factor


def abs_max(values: list[float]) -> float:
    if not values:
        return 0.0
    return max(abs(v) for v in values)


def clip_text(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + ELLIPSIS


def detect_language_hint(text: str) -> str:
    if not text:
        return "unknown"
    cyr = len(_CYRILLIC.findall(text))
    lat = len(_LATIN.findall(text))
    if cyr > lat * 2:
        return "mostly-cyrillic"
    if lat > cyr * 2:
        return "mostly-latin"
    return "mixed"
