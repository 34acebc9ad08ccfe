"""Aggregate types produced by the metrics reducer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Percentiles:
    p50: int = 0
    p90: int = 0
    p99: int = 0


@dataclass
class DailyBucket:
    date: str  # YYYY-MM-DD, UTC
    latencies: tuple[int, ...] = ()  # sorted ascending
    session_ids: set[str] = field(default_factory=set)
    percentiles: Percentiles = field(default_factory=Percentiles)

    @property
    def count(self) -> int:
        return len(self.latencies)

    @property
    def total_latency_ms(self) -> int:
        return sum(self.latencies)

    @property
    def mean_latency_ms(self) -> float:
        return self.total_latency_ms / self.count if self.latencies else 0.0


@dataclass
class SessionSummary:
    session_id: str
    project_path: str = ""
    latencies: tuple[int, ...] = ()
    first_turn_time: Optional[datetime] = None
    last_turn_time: Optional[datetime] = None

    @property
    def turn_count(self) -> int:
        return len(self.latencies)

    @property
    def total_latency_ms(self) -> int:
        return sum(self.latencies)

    @property
    def mean_latency_ms(self) -> float:
        return self.total_latency_ms / self.turn_count if self.latencies else 0.0


@dataclass(frozen=True)
class GlobalSummary:
    total_latency_ms: int = 0
    turn_count: int = 0
    mean_latency_ms: float = 0.0
    unique_sessions: int = 0
    date_from: str = ""
    date_to: str = ""


@dataclass
class MetricsReport:
    daily: dict[str, DailyBucket] = field(default_factory=dict)
    sessions: dict[str, SessionSummary] = field(default_factory=dict)
    summary: GlobalSummary = field(default_factory=GlobalSummary)


@dataclass(frozen=True)
class LatencyStats:
    count: int = 0
    average: float = 0.0
    median: int = 0
    minimum: int = 0
    maximum: int = 0
    p90: int = 0
    p99: int = 0
