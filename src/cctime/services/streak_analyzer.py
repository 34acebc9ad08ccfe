"""Consecutive-day usage streaks from session file modification times."""

from datetime import date, datetime, timedelta
from typing import Iterable

from cctime.types.sessions import UsageStreak
from cctime.utils.date_grouping import to_utc_date, today_utc

_ONE_DAY = timedelta(days=1)


def analyze_streaks(
    instants: Iterable[datetime | float],
    today: date | None = None,
) -> UsageStreak:
    """Compute current and longest usage streaks.

    Instants are reduced to UTC calendar dates and deduplicated. The current
    streak only counts when the most recent day is today or yesterday.
    """
    days = sorted({to_utc_date(i) for i in instants})
    if not days:
        return UsageStreak()
    if today is None:
        today = today_utc()

    longest = 0
    longest_start = longest_end = None
    run_start = days[0]
    run_length = 1

    for prev, current in zip(days, days[1:]):
        if current - prev == _ONE_DAY:
            run_length += 1
            continue
        if run_length > longest:
            longest, longest_start, longest_end = run_length, run_start, prev
        run_start = current
        run_length = 1

    if run_length > longest:
        longest, longest_start, longest_end = run_length, run_start, days[-1]

    current_streak = 0
    if days[-1] in (today, today - _ONE_DAY):
        # The trailing run is the active one
        current_streak = run_length

    return UsageStreak(
        current_streak=current_streak,
        longest_streak=longest,
        longest_start=longest_start,
        longest_end=longest_end,
        total_days_used=len(days),
    )


def format_streak_message(streak: UsageStreak) -> str:
    if streak.longest_streak == 0:
        return "No usage streak found"

    lines = []
    longest_text = _days(streak.longest_streak)
    if streak.longest_start and streak.longest_end:
        start = _short_date(streak.longest_start)
        end = _short_date(streak.longest_end)
        span = start if start == end else f"{start} - {end}"
        lines.append(f"Longest streak: {longest_text} ({span})")
    else:
        lines.append(f"Longest streak: {longest_text}")

    if streak.current_streak > 0 and streak.current_streak != streak.longest_streak:
        lines.append(f"Current streak: {_days(streak.current_streak)}")

    return "\n".join(lines)


def _days(n: int) -> str:
    return "1 day" if n == 1 else f"{n} days"


def _short_date(d: date) -> str:
    return f"{d.strftime('%b')} {d.day}"
