from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

HPA_TO_MMHG = 0.750062


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; display values round .5 upwards.
    return int(math.floor(value + 0.5))


def capitalize_first_letter(text: str | None) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:]


def convert_pressure(hpa: float) -> int:
    """Convert hectopascals to millimetres of mercury."""
    return round_half_up(hpa * HPA_TO_MMHG)


def format_clock_time(timestamp: int, utc_offset_seconds: int = 0) -> str:
    """Render a UNIX timestamp as 24-hour ``HH:MM`` local to the given offset."""
    tz = timezone(timedelta(seconds=utc_offset_seconds))
    return datetime.fromtimestamp(timestamp, tz=tz).strftime("%H:%M")


def to_percent(fraction: float) -> int:
    return round_half_up(fraction * 100)
