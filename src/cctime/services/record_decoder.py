"""Decode append-only JSONL session logs into LogEvents."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

import orjson

from cctime.types.events import (
    DecodeFailure,
    DecodeResult,
    EventKind,
    LogEvent,
    Rejected,
    RejectReason,
    TokenUsage,
)

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024


def decode_line(line: str) -> LogEvent | Rejected:
    """Decode one raw log line.

    Pure function of its input: never raises for bad data, returns a
    Rejected with the reason instead.
    """
    line = line.strip()
    if not line:
        return Rejected(RejectReason.BLANK)

    if len(line) > MAX_LINE_SIZE:
        return Rejected(
            RejectReason.MALFORMED,
            f"line exceeds {MAX_LINE_SIZE // (1024 * 1024)}MB",
        )

    try:
        raw = orjson.loads(line)
    except orjson.JSONDecodeError as e:
        return Rejected(RejectReason.MALFORMED, str(e))

    if not isinstance(raw, dict):
        return Rejected(RejectReason.MALFORMED, "record is not an object")

    return decode_record(raw)


def decode_record(raw: dict) -> LogEvent | Rejected:
    """Decode an already-parsed JSON object."""
    type_str = raw.get("type")
    if not type_str:
        return Rejected(RejectReason.MISSING_FIELD, "type is required")

    try:
        kind = EventKind(type_str)
    except ValueError:
        # summary, file-history-snapshot and friends carry no timestamp
        return Rejected(RejectReason.UNKNOWN_KIND, str(type_str))

    ts_value = raw.get("timestamp")
    if ts_value is None or ts_value == "":
        return Rejected(RejectReason.MISSING_FIELD, "timestamp is required")

    timestamp = parse_timestamp(ts_value)
    if timestamp is None:
        return Rejected(RejectReason.BAD_TIMESTAMP, repr(ts_value))

    message = raw.get("message")
    return LogEvent(
        kind=kind,
        timestamp=timestamp,
        payload=message,
        is_continuation_marker=bool(raw.get("isCompactSummary", False)),
        usage=_parse_usage(raw, message),
        uuid=raw.get("uuid") or "",
        session_id=raw.get("sessionId") or "",
    )


def decode_lines(lines: Iterable[str], source: str = "<lines>") -> DecodeResult:
    """Decode a sequence of lines, collecting failures instead of raising."""
    events: list[LogEvent] = []
    failures: list[DecodeFailure] = []
    ignored = 0

    for line_num, line in enumerate(lines, start=1):
        result = decode_line(line)
        if isinstance(result, LogEvent):
            events.append(result)
            continue
        if result.is_failure:
            logger.debug(
                "Rejected line %d in %s (%s): %s",
                line_num, source, result.reason.value, result.detail,
            )
            failures.append(DecodeFailure(line_num, result.reason, result.detail))
        elif result.reason == RejectReason.UNKNOWN_KIND:
            ignored += 1

    return DecodeResult(events=events, failures=failures, ignored=ignored)


def read_log_file(file_path: str | Path) -> DecodeResult:
    """Decode an entire log file.

    Malformed lines are counted and skipped. I/O errors propagate so the
    caller can skip the file.
    """
    path = Path(file_path)
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return decode_lines(f, source=path.name)


def stream_log_file(file_path: str | Path) -> Iterator[LogEvent]:
    """Lazily yield decoded events from a log file, skipping rejected lines."""
    path = Path(file_path)
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_num, line in enumerate(f, start=1):
            result = decode_line(line)
            if isinstance(result, LogEvent):
                yield result
            elif result.is_failure:
                logger.debug(
                    "Rejected line %d in %s (%s): %s",
                    line_num, path.name, result.reason.value, result.detail,
                )


def parse_timestamp(ts_value) -> datetime | None:
    """Parse an ISO-8601 string or epoch number into an aware UTC datetime."""
    if isinstance(ts_value, bool):
        return None
    if isinstance(ts_value, (int, float)):
        seconds = ts_value / 1000 if ts_value > 1e12 else ts_value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(ts_value, str) and ts_value:
        try:
            # ISO 8601 format: "2026-02-13T12:00:00.000Z"
            dt = datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    return None


def _parse_usage(raw: dict, message) -> TokenUsage | None:
    """Usage lives on the message object, or at top level in older logs."""
    raw_usage = message.get("usage") if isinstance(message, dict) else None
    if raw_usage is None:
        raw_usage = raw.get("usage")
    if not isinstance(raw_usage, dict):
        return None
    return TokenUsage(
        input_tokens=raw_usage.get("input_tokens") or 0,
        output_tokens=raw_usage.get("output_tokens") or 0,
        cache_read_input_tokens=raw_usage.get("cache_read_input_tokens") or 0,
        cache_creation_input_tokens=(
            raw_usage.get("cache_creation_input_tokens")
            or raw_usage.get("cache_write_input_tokens")
            or 0
        ),
    )
