"""Serialize a MetricsReport to JSON, CSV or Markdown."""

import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path

import orjson

from cctime.services.metrics_reducer import top_sessions
from cctime.types.metrics import MetricsReport
from cctime.utils.formatting import format_day, format_duration

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv", "markdown")
_EXTENSIONS = {"json": "json", "csv": "csv", "markdown": "md"}

# Sessions listed in the Markdown session table
MARKDOWN_SESSION_LIMIT = 20


def to_serializable(report: MetricsReport, include_stats: bool = True) -> dict:
    """Plain dict view of a report, with camelCase keys for external tools."""
    summary = report.summary
    data = {
        "summary": {
            "totalResponseTimeMs": summary.total_latency_ms,
            "totalResponses": summary.turn_count,
            "averageResponseTimeMs": summary.mean_latency_ms,
            "uniqueSessions": summary.unique_sessions,
            "dateRange": {"from": summary.date_from, "to": summary.date_to},
        },
        "daily": [
            {
                "date": key,
                "totalResponseTimeMs": bucket.total_latency_ms,
                "averageResponseTimeMs": bucket.mean_latency_ms,
                "responseCount": bucket.count,
                "sessionCount": len(bucket.session_ids),
                "sessions": sorted(bucket.session_ids),
                "percentiles": {
                    "p50": bucket.percentiles.p50,
                    "p90": bucket.percentiles.p90,
                    "p99": bucket.percentiles.p99,
                },
            }
            for key, bucket in sorted(report.daily.items())
        ],
    }
    if include_stats:
        data["sessions"] = [
            {
                "sessionId": s.session_id,
                "projectPath": s.project_path,
                "totalResponses": s.turn_count,
                "totalResponseTimeMs": s.total_latency_ms,
                "averageResponseTimeMs": s.mean_latency_ms,
                "firstMessage": s.first_turn_time.isoformat() if s.first_turn_time else "",
                "lastMessage": s.last_turn_time.isoformat() if s.last_turn_time else "",
            }
            for s in report.sessions.values()
        ]
    return data


def render_json(report: MetricsReport, include_stats: bool = True) -> str:
    return orjson.dumps(
        to_serializable(report, include_stats),
        option=orjson.OPT_INDENT_2,
    ).decode("utf-8")


def render_csv(report: MetricsReport, include_stats: bool = True) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([
        "Date",
        "Total Response Time (ms)",
        "Average Response Time (ms)",
        "Response Count",
        "Session Count",
        "P50 (ms)",
        "P90 (ms)",
        "P99 (ms)",
    ])
    for key, bucket in sorted(report.daily.items()):
        writer.writerow([
            key,
            bucket.total_latency_ms,
            f"{bucket.mean_latency_ms:.2f}",
            bucket.count,
            len(bucket.session_ids),
            bucket.percentiles.p50,
            bucket.percentiles.p90,
            bucket.percentiles.p99,
        ])

    if include_stats:
        summary = report.summary
        writer.writerow([])
        writer.writerow(["Summary Statistics"])
        writer.writerow(["Total Response Time", summary.total_latency_ms])
        writer.writerow(["Total Responses", summary.turn_count])
        writer.writerow(["Average Response Time", f"{summary.mean_latency_ms:.2f}"])
        writer.writerow(["Unique Sessions", summary.unique_sessions])
        writer.writerow(["Date Range", f"{summary.date_from} to {summary.date_to}"])
    return buf.getvalue()


def render_markdown(report: MetricsReport, include_stats: bool = True) -> str:
    summary = report.summary
    lines = [
        "# Response Time Analysis",
        "",
        "## Summary Statistics",
        "",
        f"- **Total Response Time**: {format_duration(summary.total_latency_ms)}",
        f"- **Total Responses**: {summary.turn_count}",
        f"- **Average Response Time**: {format_duration(summary.mean_latency_ms)}",
        f"- **Unique Sessions**: {summary.unique_sessions}",
        f"- **Date Range**: {format_day(summary.date_from)} to {format_day(summary.date_to)}",
        "",
        "## Daily Metrics",
        "",
        "| Date | Total Time | Avg Time | Responses | Sessions | P50 | P90 | P99 |",
        "|------|------------|----------|-----------|----------|-----|-----|-----|",
    ]
    for key, b in sorted(report.daily.items()):
        lines.append(
            f"| {format_day(key)} | {format_duration(b.total_latency_ms)} "
            f"| {format_duration(b.mean_latency_ms)} | {b.count} | {len(b.session_ids)} "
            f"| {format_duration(b.percentiles.p50)} | {format_duration(b.percentiles.p90)} "
            f"| {format_duration(b.percentiles.p99)} |"
        )

    if include_stats and report.sessions:
        lines += [
            "",
            "## Session Details",
            "",
            "| Session ID | Project | Responses | Total Time | Avg Time |",
            "|------------|---------|-----------|------------|----------|",
        ]
        for s in top_sessions(report, MARKDOWN_SESSION_LIMIT):
            short_id = s.session_id[:8] + "..." if len(s.session_id) > 8 else s.session_id
            project = s.project_path.rstrip("/").rsplit("/", 1)[-1] or "Unknown"
            lines.append(
                f"| {short_id} | {project} | {s.turn_count} "
                f"| {format_duration(s.total_latency_ms)} | {format_duration(s.mean_latency_ms)} |"
            )
        if len(report.sessions) > MARKDOWN_SESSION_LIMIT:
            lines += [
                "",
                f"*Showing top {MARKDOWN_SESSION_LIMIT} sessions out of {len(report.sessions)} total*",
            ]

    return "\n".join(lines) + "\n"


_RENDERERS = {
    "json": render_json,
    "csv": render_csv,
    "markdown": render_markdown,
}


def default_export_path(fmt: str, directory: str | Path = ".", now: datetime | None = None) -> Path:
    """cctime-export-<UTC timestamp>.<ext> inside directory."""
    if now is None:
        now = datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return Path(directory) / f"cctime-export-{stamp}.{_EXTENSIONS[fmt]}"


def export_report(
    report: MetricsReport,
    fmt: str,
    output_path: str | Path | None = None,
    include_stats: bool = True,
) -> Path:
    """Write a report to disk and return the path written.

    Raises ValueError for an unknown format; OSError propagates.
    """
    if fmt not in _RENDERERS:
        raise ValueError(f"Unsupported export format: {fmt}")

    path = Path(output_path) if output_path else default_export_path(fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_RENDERERS[fmt](report, include_stats), encoding="utf-8")
    logger.debug("Exported %s report to %s", fmt, path)
    return path
