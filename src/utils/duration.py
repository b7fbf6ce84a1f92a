"""
RoMod - Duration Utilities
==========================

Parsing and formatting of ban durations.

Usage:
    from src.utils.duration import parse_duration, format_duration

    seconds = parse_duration("1d12h")   # 129600
    seconds = parse_duration("7")       # 604800 (bare numbers are days)
    display = format_duration(129600)   # "1d 12h"
    display = format_duration(None)     # "Permanent"

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import re
from typing import Optional, Union

from src.core.constants import (
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
    SECONDS_PER_WEEK,
)


# =============================================================================
# Constants
# =============================================================================

SECONDS_PER_MONTH = 30 * SECONDS_PER_DAY
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

PERMANENT_KEYWORDS = frozenset({"permanent", "perm", "forever", "indefinite"})

TIME_MULTIPLIERS = {
    "y": SECONDS_PER_YEAR,
    "mo": SECONDS_PER_MONTH,
    "w": SECONDS_PER_WEEK,
    "d": SECONDS_PER_DAY,
    "h": SECONDS_PER_HOUR,
    "m": SECONDS_PER_MINUTE,
    "s": 1,
}

TIME_UNIT_ALIASES = {
    "years": "y", "year": "y",
    "months": "mo", "month": "mo",
    "weeks": "w", "week": "w",
    "days": "d", "day": "d",
    "hours": "h", "hour": "h", "hrs": "h", "hr": "h",
    "minutes": "m", "minute": "m", "mins": "m", "min": "m",
    "seconds": "s", "second": "s", "secs": "s", "sec": "s",
}

_TOKEN = re.compile(r"(\d+)(y|mo|w|d|h|m|s)")


# =============================================================================
# Parsing
# =============================================================================

def _normalize(duration_str: str) -> str:
    result = duration_str.lower().strip()
    for word, short in sorted(TIME_UNIT_ALIASES.items(), key=lambda x: -len(x[0])):
        result = re.sub(rf"(?<=\d)\s*{word}\b", short, result)
    return result.replace(" ", "")


def parse_duration(value: Union[str, int, float, None]) -> Optional[int]:
    """
    Parse a duration into seconds.

    Accepts integers (seconds), bare numeric strings (days, matching
    the dashboard's ban form) and unit strings such as "12h", "1w2d",
    "3 days".

    Returns:
        Seconds, or None for empty, permanent or unparseable input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Fractions truncate; anything under one second is not a duration
        seconds = int(value)
        return seconds if seconds > 0 else None

    text = value.lower().strip()
    if not text or text in PERMANENT_KEYWORDS:
        return None
    if text.isdigit():
        days = int(text)
        return days * SECONDS_PER_DAY if days > 0 else None

    normalized = _normalize(text)
    tokens = _TOKEN.findall(normalized)
    if not tokens or "".join(n + u for n, u in tokens) != normalized:
        return None

    total = sum(int(n) * TIME_MULTIPLIERS[u] for n, u in tokens)
    return total if total > 0 else None


# =============================================================================
# Formatting
# =============================================================================

def format_duration(seconds: Optional[float], max_units: int = 2) -> str:
    """
    Format seconds as "1d 12h", or "Permanent" for None.

    Examples:
        >>> format_duration(90061)
        '1d 1h'
        >>> format_duration(45)
        '< 1m'
    """
    if seconds is None:
        return "Permanent"
    remaining = int(seconds)
    if remaining < SECONDS_PER_MINUTE:
        return "< 1m"

    parts = []
    for unit in ("y", "mo", "w", "d", "h", "m"):
        size = TIME_MULTIPLIERS[unit]
        if remaining >= size and len(parts) < max_units:
            count, remaining = divmod(remaining, size)
            parts.append(f"{count}{unit}")
    return " ".join(parts)


__all__ = [
    "PERMANENT_KEYWORDS",
    "parse_duration",
    "format_duration",
]
