"""Human-readable durations and dates."""

from cctime.utils.date_grouping import parse_day_key


def format_duration(ms: float) -> str:
    """Format milliseconds for display.

    850 -> "850ms", 12345 -> "12.3s", 245000 -> "4m 5s", 7380000 -> "2h 3m"
    """
    if ms < 1000:
        return f"{int(round(ms))}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    if ms < 3_600_000:
        minutes = int(ms // 60_000)
        seconds = int((ms % 60_000) // 1000)
        return f"{minutes}m {seconds}s"
    hours = int(ms // 3_600_000)
    minutes = int((ms % 3_600_000) // 60_000)
    return f"{hours}h {minutes}m"


def format_day(key: str) -> str:
    """2026-01-05 -> "Jan 5, 2026". Empty keys stay empty."""
    if not key:
        return ""
    day = parse_day_key(key)
    return f"{day.strftime('%b')} {day.day}, {day.year}"
