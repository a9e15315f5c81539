"""
Input sanitization for request payloads

Strings coming from the storefront are stripped of angle brackets and
control characters before they reach validation or the database.
"""
import re
from typing import Any

_ANGLE_BRACKETS = re.compile(r"[<>]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_string(value: str) -> str:
    value = _ANGLE_BRACKETS.sub("", value)
    value = _CONTROL_CHARS.sub("", value)
    return value.strip()


def sanitize(value: Any) -> Any:
    """Recursively sanitize every string inside dicts and lists"""
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, list):
        return [sanitize(item) for item in value]
    if isinstance(value, dict):
        return {key: sanitize(item) for key, item in value.items()}
    return value
