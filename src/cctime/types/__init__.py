"""Type definitions for cctime."""

from cctime.types.events import (
    EventKind,
    RejectReason,
    TokenUsage,
    LogEvent,
    Rejected,
    DecodeFailure,
    DecodeResult,
)
from cctime.types.turns import Turn, SegmentationStats
from cctime.types.metrics import (
    Percentiles,
    DailyBucket,
    SessionSummary,
    GlobalSummary,
    MetricsReport,
    LatencyStats,
)
from cctime.types.sessions import SessionFile, UsageStreak

__all__ = [
    "EventKind",
    "RejectReason",
    "TokenUsage",
    "LogEvent",
    "Rejected",
    "DecodeFailure",
    "DecodeResult",
    "Turn",
    "SegmentationStats",
    "Percentiles",
    "DailyBucket",
    "SessionSummary",
    "GlobalSummary",
    "MetricsReport",
    "LatencyStats",
    "SessionFile",
    "UsageStreak",
]
