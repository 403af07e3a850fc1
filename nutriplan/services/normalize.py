"""
Cleanup and parsing of completion service output.
"""
import json
import re
from typing import Any

from nutriplan.core.errors import EmptyResponseError, MalformedResponseError
from nutriplan.core.logger import log_error


_LEADING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")

# Fields the client iterates over; null would break it
ARRAY_KEYS = frozenset({
    "meals",
    "items",
    "ingredients",
    "instructions",
    "diets",
    "restrictions",
})


def strip_markdown_fence(text: str) -> str:
    """
    Remove a markdown code fence wrapped around a response.

    Only the outermost leading ``` (optionally tagged json) and trailing ```
    are removed. Running it on already clean text is a no-op.
    """
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def clean_text_response(text: str | None) -> str:
    """
    Strip fences from a plain-text response.

    Raises:
        EmptyResponseError: If nothing is left
    """
    cleaned = strip_markdown_fence(text or "")
    if not cleaned:
        raise EmptyResponseError()
    return cleaned


def parse_json_response(text: str | None) -> Any:
    """
    Parse a structured response after fence stripping.

    Raises:
        EmptyResponseError: If the response is empty
        MalformedResponseError: If the cleaned text is not valid JSON
    """
    cleaned = clean_text_response(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        log_error("AI JSON parsing", e)
        raise MalformedResponseError()
    return sanitize_arrays(parsed)


def sanitize_arrays(value: Any) -> Any:
    """Recursively replace null or non-list values under ARRAY_KEYS with []."""
    if isinstance(value, list):
        return [sanitize_arrays(v) for v in value]
    if not isinstance(value, dict):
        return value

    sanitized = {}
    for key, item in value.items():
        if key in ARRAY_KEYS:
            sanitized[key] = [sanitize_arrays(v) for v in item] if isinstance(item, list) else []
        else:
            sanitized[key] = sanitize_arrays(item)
    return sanitized


def unwrap_list(result: Any, key: str) -> list:
    """
    Pull the list out of an object-rooted structured response.

    The JSON output mode only admits objects at the top level, so list-shaped
    results arrive as {key: [...]}.
    """
    if not isinstance(result, dict) or not isinstance(result.get(key), list):
        raise MalformedResponseError(f"expected a list under '{key}'")
    return result[key]


def fold_weekly_plan(days: list) -> dict[str, dict]:
    """
    Build a date-keyed weekly plan from a list of daily plans.

    Later entries overwrite earlier ones with the same date. Entries that are
    not objects or have no date are dropped.
    """
    week: dict[str, dict] = {}
    for day in days:
        if isinstance(day, dict) and day.get("date"):
            week[str(day["date"])] = day
    return week
