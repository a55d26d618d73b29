"""Shared utilities used across the order support assistant."""

import re


def normalize_message(value: str) -> str:
    """Lower-case a user message and collapse runs of whitespace.

    Examples:
        >>> normalize_message("  Order   B ")
        'order b'
    """
    return re.sub(r"\s+", " ", value).strip().lower()


def format_duration(seconds: float) -> str:
    """Render an elapsed time as minutes and seconds.

    Examples:
        >>> format_duration(125.4)
        '2 minutes and 5 seconds'
    """
    total = max(0, int(round(seconds)))
    minutes, secs = divmod(total, 60)
    return f"{minutes} minutes and {secs} seconds"
