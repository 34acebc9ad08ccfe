"""Roll per-turn latencies into daily, per-session and global summaries."""

import math
from datetime import date
from typing import Iterable, Mapping, Sequence

from cctime.types.metrics import (
    DailyBucket,
    GlobalSummary,
    LatencyStats,
    MetricsReport,
    Percentiles,
    SessionSummary,
)
from cctime.types.turns import Turn
from cctime.utils.date_grouping import group_by_day, parse_day_key

# Default ceiling for filter_outliers (5 minutes)
DEFAULT_MAX_LATENCY_MS = 5 * 60 * 1000


def calculate_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """Nearest-rank percentile of ascending-sorted values.

    The value at zero-based index ceil(p/100 * n) - 1, clamped to [0, n-1].
    Returns 0 for empty input.
    """
    n = len(sorted_values)
    if n == 0:
        return 0
    index = math.ceil((percentile / 100) * n) - 1
    return sorted_values[min(max(index, 0), n - 1)]


def calculate_statistics(latencies: Iterable[int]) -> LatencyStats:
    """Descriptive statistics over a set of latencies."""
    values = sorted(latencies)
    if not values:
        return LatencyStats()
    return LatencyStats(
        count=len(values),
        average=sum(values) / len(values),
        median=calculate_percentile(values, 50),
        minimum=values[0],
        maximum=values[-1],
        p90=calculate_percentile(values, 90),
        p99=calculate_percentile(values, 99),
    )


def filter_outliers(
    turns: Iterable[Turn],
    max_latency_ms: int = DEFAULT_MAX_LATENCY_MS,
) -> list[Turn]:
    """Drop turns whose response latency exceeds max_latency_ms."""
    return [t for t in turns if t.response_latency_ms <= max_latency_ms]


def reduce_turns(
    turns: Iterable[Turn],
    project_paths: Mapping[str, str] | None = None,
) -> MetricsReport:
    """Build daily buckets, session summaries and the global summary.

    Daily and session groupings are both derived from the same input list.
    project_paths maps session ids to their project, since turns only carry
    the session id. Empty input gives empty maps and an all-zero summary.
    """
    turns = list(turns)
    project_paths = project_paths or {}

    daily: dict[str, DailyBucket] = {}
    for key, day_turns in group_by_day(turns).items():
        daily[key] = _make_bucket(
            key,
            [t.response_latency_ms for t in day_turns],
            {t.session_id for t in day_turns},
        )

    by_session: dict[str, list[Turn]] = {}
    for turn in turns:
        by_session.setdefault(turn.session_id, []).append(turn)

    sessions: dict[str, SessionSummary] = {}
    for session_id, session_turns in by_session.items():
        triggers = [t.trigger_timestamp for t in session_turns]
        sessions[session_id] = SessionSummary(
            session_id=session_id,
            project_path=project_paths.get(session_id, ""),
            latencies=tuple(t.response_latency_ms for t in session_turns),
            first_turn_time=min(triggers),
            last_turn_time=max(triggers),
        )

    return MetricsReport(
        daily=daily,
        sessions=sessions,
        summary=_summarize(daily, sessions),
    )


def merge_reports(*reports: MetricsReport) -> MetricsReport:
    """Combine reports from separate files or runs.

    Buckets for the same day and summaries for the same session merge their
    latency multisets, so percentiles stay exact.
    """
    daily: dict[str, DailyBucket] = {}
    sessions: dict[str, SessionSummary] = {}

    for report in reports:
        for key, bucket in report.daily.items():
            existing = daily.get(key)
            if existing is None:
                daily[key] = _make_bucket(key, bucket.latencies, bucket.session_ids)
            else:
                daily[key] = _make_bucket(
                    key,
                    existing.latencies + bucket.latencies,
                    existing.session_ids | bucket.session_ids,
                )

        for session_id, summary in report.sessions.items():
            existing = sessions.get(session_id)
            if existing is None:
                sessions[session_id] = SessionSummary(
                    session_id=session_id,
                    project_path=summary.project_path,
                    latencies=summary.latencies,
                    first_turn_time=summary.first_turn_time,
                    last_turn_time=summary.last_turn_time,
                )
                continue
            sessions[session_id] = SessionSummary(
                session_id=session_id,
                project_path=existing.project_path or summary.project_path,
                latencies=existing.latencies + summary.latencies,
                first_turn_time=_earliest(existing.first_turn_time, summary.first_turn_time),
                last_turn_time=_latest(existing.last_turn_time, summary.last_turn_time),
            )

    daily = dict(sorted(daily.items()))
    return MetricsReport(daily=daily, sessions=sessions, summary=_summarize(daily, sessions))


def filter_by_date_range(report: MetricsReport, start: date, end: date) -> MetricsReport:
    """Keep the days within [start, end] and the sessions active on them."""
    daily = {
        key: bucket for key, bucket in report.daily.items()
        if start <= parse_day_key(key) <= end
    }
    active = set()
    for bucket in daily.values():
        active |= bucket.session_ids
    sessions = {
        session_id: summary for session_id, summary in report.sessions.items()
        if session_id in active
    }
    return MetricsReport(daily=daily, sessions=sessions, summary=_summarize(daily, sessions))


def top_sessions(report: MetricsReport, n: int = 10) -> list[SessionSummary]:
    """Sessions with the largest total latency first."""
    ranked = sorted(report.sessions.values(), key=lambda s: s.total_latency_ms, reverse=True)
    return ranked[:n]


def sessions_for_date(report: MetricsReport, day: str) -> list[SessionSummary]:
    bucket = report.daily.get(day)
    if bucket is None:
        return []
    return [
        report.sessions[session_id]
        for session_id in sorted(bucket.session_ids)
        if session_id in report.sessions
    ]


def _make_bucket(key: str, latencies: Iterable[int], session_ids: set[str]) -> DailyBucket:
    values = tuple(sorted(latencies))
    return DailyBucket(
        date=key,
        latencies=values,
        session_ids=set(session_ids),
        percentiles=Percentiles(
            p50=calculate_percentile(values, 50),
            p90=calculate_percentile(values, 90),
            p99=calculate_percentile(values, 99),
        ),
    )


def _summarize(
    daily: dict[str, DailyBucket],
    sessions: dict[str, SessionSummary],
) -> GlobalSummary:
    count = sum(b.count for b in daily.values())
    if count == 0:
        return GlobalSummary()
    total = sum(b.total_latency_ms for b in daily.values())
    keys = sorted(daily)
    return GlobalSummary(
        total_latency_ms=total,
        turn_count=count,
        mean_latency_ms=total / count,
        unique_sessions=len(sessions),
        date_from=keys[0],
        date_to=keys[-1],
    )


def _earliest(a, b):
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _latest(a, b):
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)
