"""Text helpers shared by the provider adapters."""

from __future__ import annotations

import math
from typing import Iterable

from i18n import Locale

FILLED_CHAR = "█"
EMPTY_CHAR = "░"
DEFAULT_BAR_WIDTH = 30

# Used-percentage at which a block gets the "limit reached" warning.
HIGH_USAGE_THRESHOLD = 80


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def calc_remain_percent(used_percent: float) -> int:
    return round_half_up(100 - used_percent)


def create_progress_bar(remain_percent: float, width: int = DEFAULT_BAR_WIDTH) -> str:
    """Render a bar whose filled part represents the remaining quota.

    Percentages outside [0, 100] are clamped first.
    """
    safe_percent = max(0.0, min(100.0, remain_percent))
    filled = round_half_up(safe_percent / 100 * width)
    empty = width - filled
    return FILLED_CHAR * filled + EMPTY_CHAR * empty


def format_duration(seconds: float, locale: Locale) -> str:
    """Format seconds as days/hours/minutes, e.g. ``2d 3h 5m``.

    Zero-valued units are skipped, but minutes are shown if nothing else is.
    """
    seconds = int(seconds)
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60

    parts = []
    if days > 0:
        parts.append(locale.t("days", n=days))
    if hours > 0:
        parts.append(locale.t("hours", n=hours))
    if minutes > 0 or not parts:
        parts.append(locale.t("minutes", n=minutes))
    return locale.unit_separator.join(parts)


def format_tokens(tokens: float) -> str:
    """Millions with one decimal: 1234567 -> '1.2M'."""
    return f"{tokens / 1_000_000:.1f}M"


def format_number(value: float) -> str:
    """Thousands separators, no trailing zeros: 12345 -> '12,345'."""
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def safe_max(values: Iterable[float]) -> float:
    """Largest value, or 0 for an empty sequence."""
    return max(values, default=0)


def mask_string(value: str, show_chars: int = 4) -> str:
    """Hide the middle of a secret: ``abcd1234efgh`` -> ``abcd****efgh``.

    Strings of ``2 * show_chars`` characters or fewer are returned as-is.
    """
    if len(value) <= show_chars * 2:
        return value
    return f"{value[:show_chars]}****{value[-show_chars:]}"
