"""Calendar-day keys for bucketing timestamps.

All bucketing uses UTC calendar days so that a report does not change with
the machine's timezone.
"""

from datetime import date, datetime, timezone


def to_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_date(instant: datetime | float | int) -> date:
    """Reduce a datetime or Unix timestamp to its UTC calendar date."""
    if isinstance(instant, datetime):
        return to_utc(instant).date()
    return datetime.fromtimestamp(instant, tz=timezone.utc).date()


def day_key(instant: datetime | float | int) -> str:
    """YYYY-MM-DD key for an instant."""
    return to_utc_date(instant).isoformat()


def parse_day_key(key: str) -> date:
    return date.fromisoformat(key)


def today_utc(now: datetime | None = None) -> date:
    if now is None:
        now = datetime.now(timezone.utc)
    return to_utc(now).date()


def group_by_day(items: list, timestamp_key: str = "trigger_timestamp") -> dict[str, list]:
    """Group items by the UTC day of a timestamp attribute or key.

    Preserves input order within each group; groups are ordered by day.
    """
    groups: dict[str, list] = {}
    for item in items:
        if isinstance(item, dict):
            ts = item[timestamp_key]
        else:
            ts = getattr(item, timestamp_key)
        groups.setdefault(day_key(ts), []).append(item)
    return dict(sorted(groups.items()))
