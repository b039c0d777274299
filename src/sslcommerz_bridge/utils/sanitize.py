"""Sanitisation helpers for untrusted form input."""

import re
from typing import Any, Mapping

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\r\n\t\x00]+")
_SPACES_RE = re.compile(r" {2,}")
_KEY_RE = re.compile(r"[^a-z0-9_\-]")
_LEADING_INT_RE = re.compile(r"^\s*[+-]?(\d+)")

# Order ids fit in a signed 64-bit integer
MAX_ABSINT_DIGITS = 18


def sanitize_text_field(value: Any) -> str:
    """Strip tags and control characters, collapse spaces, trim.

    Args:
        value: Raw input value (coerced to str)

    Returns:
        Clean single-line text
    """
    if value is None:
        return ""
    text = _TAG_RE.sub("", str(value))
    text = _CONTROL_RE.sub(" ", text)
    text = _SPACES_RE.sub(" ", text)
    return text.strip()


def sanitize_key(value: Any) -> str:
    """Lowercase and keep only [a-z0-9_-]."""
    if value is None:
        return ""
    return _KEY_RE.sub("", str(value).lower())


def absint(value: Any) -> int:
    """Parse the leading integer of a value as a non-negative int.

    Returns 0 when no integer can be read or the digits run longer than
    MAX_ABSINT_DIGITS.
    """
    if value is None:
        return 0
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return 0
    digits = match.group(1).lstrip("0")
    if len(digits) > MAX_ABSINT_DIGITS:
        return 0
    return int(digits or "0")


def sanitize_form(form: Mapping[str, Any]) -> dict[str, str | list[str]]:
    """Sanitise every value of a form mapping; lists element-wise."""
    clean: dict[str, str | list[str]] = {}
    for key, value in form.items():
        if isinstance(value, (list, tuple)):
            clean[str(key)] = [sanitize_text_field(item) for item in value]
        else:
            clean[str(key)] = sanitize_text_field(value)
    return clean
