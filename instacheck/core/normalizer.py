"""Username normalization for typed and imported input."""

import re

_PROFILE_URL_PREFIX = re.compile(r"https?://(www\.)?instagram\.com/", re.IGNORECASE)
_TEXT_SEPARATORS = re.compile(r"[\n,]+")


def normalize_handle(raw: str) -> str:
    """
    Reduce a handle, @mention or profile URL to the bare username.

    Removes every ``@``, one Instagram profile URL prefix and every ``/``,
    then trims whitespace. Applying it twice yields the same string.

    Args:
        raw: Candidate string from a cell or text line

    Returns:
        Bare username, or an empty string if nothing is left
    """
    clean = raw.replace("@", "")
    clean = _PROFILE_URL_PREFIX.sub("", clean, count=1)
    clean = clean.replace("/", "")
    return clean.strip()


def split_text(text: str) -> list[str]:
    """
    Split a pasted block on newlines and commas.

    Args:
        text: Free-form text, one or more handles

    Returns:
        Non-empty trimmed segments in input order (not yet normalized)
    """
    return [part.strip() for part in _TEXT_SEPARATORS.split(text) if part.strip()]


def normalize_many(candidates: list[str]) -> list[str]:
    """Normalize candidates, dropping those that end up empty."""
    result = []
    for candidate in candidates:
        handle = normalize_handle(candidate)
        if handle:
            result.append(handle)
    return result
