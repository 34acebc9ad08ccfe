"""Event-level types for decoded JSONL log records."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class EventKind(str, Enum):
    USER_MESSAGE = "user"
    ASSISTANT_MESSAGE = "assistant"
    TOOL_RESULT = "tool_result"
    SYSTEM_NOTE = "system"


class RejectReason(str, Enum):
    BLANK = "blank"
    MALFORMED = "malformed"
    MISSING_FIELD = "missing_field"
    BAD_TIMESTAMP = "bad_timestamp"
    UNKNOWN_KIND = "unknown_kind"


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0

    @property
    def total(self) -> int:
        return (self.input_tokens + self.output_tokens +
                self.cache_read_input_tokens + self.cache_creation_input_tokens)


@dataclass(frozen=True)
class LogEvent:
    kind: EventKind
    timestamp: datetime
    payload: Any = None  # str, dict or None
    is_continuation_marker: bool = False
    usage: Optional[TokenUsage] = None
    uuid: str = ""
    session_id: str = ""


@dataclass(frozen=True)
class Rejected:
    """A line the decoder refused, with the reason."""
    reason: RejectReason
    detail: str = ""

    @property
    def is_failure(self) -> bool:
        """Blank lines and unknown record kinds are not decode failures."""
        return self.reason not in (RejectReason.BLANK, RejectReason.UNKNOWN_KIND)


@dataclass(frozen=True)
class DecodeFailure:
    line_number: int
    reason: RejectReason
    detail: str = ""


@dataclass
class DecodeResult:
    events: list[LogEvent]
    failures: list[DecodeFailure]
    ignored: int = 0

    @property
    def failure_count(self) -> int:
        return len(self.failures)
