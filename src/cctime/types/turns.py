"""Reconstructed user-to-assistant exchanges."""

from dataclasses import dataclass
from datetime import datetime, timedelta

_ONE_MS = timedelta(milliseconds=1)


@dataclass(frozen=True)
class Turn:
    """One genuine user message and the assistant burst that answered it."""
    trigger_timestamp: datetime
    trigger_text: str
    first_response_timestamp: datetime
    last_response_timestamp: datetime
    activity_count: int = 0
    tool_invocation_count: int = 0
    session_id: str = ""
    source_path: str = ""

    @property
    def response_latency_ms(self) -> int:
        return (self.first_response_timestamp - self.trigger_timestamp) // _ONE_MS

    @property
    def burst_duration_ms(self) -> int:
        return (self.last_response_timestamp - self.first_response_timestamp) // _ONE_MS


@dataclass
class SegmentationStats:
    turns: int = 0
    unanswered_triggers: int = 0
    negative_latency: int = 0
    gap_splits: int = 0
