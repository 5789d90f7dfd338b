"""String helpers shared by the monitor components."""

import re
from typing import Iterable, Optional


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate a string to a maximum length.

    Args:
        text: The string to truncate.
        max_length: Maximum length including suffix.
        suffix: String to append when truncated.

    Returns:
        Truncated string with suffix if needed.
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def dedup_key(title: str, length: int = 50) -> str:
    """Deduplication key for an issue title: its first length characters."""
    return title[:length]


def first_match(text: str, patterns: Iterable[str]) -> Optional[str]:
    """Return the first regex pattern that matches text, case-insensitively.

    Args:
        text: Text to search.
        patterns: Regular expressions, tried in order.

    Returns:
        The matching pattern, or None.
    """
    for pattern in patterns:
        if re.search(pattern, text, re.IGNORECASE):
            return pattern
    return None
