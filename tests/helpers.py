"""Shared test helpers."""

from datetime import datetime, timedelta, timezone

from cctime.types.events import EventKind, LogEvent
from cctime.types.turns import Turn

BASE_TIME = datetime(2026, 1, 5, 10, 0, 0, tzinfo=timezone.utc)


def at(seconds: float = 0, base: datetime = BASE_TIME) -> datetime:
    """BASE_TIME plus an offset in seconds."""
    return base + timedelta(seconds=seconds)


def user(seconds: float, content="hello", **kwargs) -> LogEvent:
    return LogEvent(
        kind=EventKind.USER_MESSAGE,
        timestamp=at(seconds),
        payload={"role": "user", "content": content},
        **kwargs,
    )


def assistant(seconds: float, content=None, **kwargs) -> LogEvent:
    if content is None:
        content = [{"type": "text", "text": "ok"}]
    return LogEvent(
        kind=EventKind.ASSISTANT_MESSAGE,
        timestamp=at(seconds),
        payload={"role": "assistant", "content": content},
        **kwargs,
    )


def tool_echo(seconds: float, tool_use_id="tu1") -> LogEvent:
    """A user-role record carrying a tool result back to the assistant."""
    return user(seconds, [{"type": "tool_result", "tool_use_id": tool_use_id, "content": "done"}])


def system(seconds: float, content="note") -> LogEvent:
    return LogEvent(kind=EventKind.SYSTEM_NOTE, timestamp=at(seconds), payload=content)


def make_turn(
    trigger: datetime,
    latency_ms: int,
    burst_ms: int = 0,
    session_id: str = "s1",
    text: str = "hello",
) -> Turn:
    first = trigger + timedelta(milliseconds=latency_ms)
    return Turn(
        trigger_timestamp=trigger,
        trigger_text=text,
        first_response_timestamp=first,
        last_response_timestamp=first + timedelta(milliseconds=burst_ms),
        activity_count=1,
        session_id=session_id,
    )
