"""State machine that groups LogEvents into Turns."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from cctime.types.events import LogEvent
from cctime.types.turns import SegmentationStats, Turn
from cctime.utils.content_sanitizer import (
    count_tool_uses,
    extract_message_text,
    truncate_for_display,
)
from cctime.utils.message_classifier import (
    is_assistant_activity,
    is_genuine_user_message,
    is_tool_result_echo,
)

logger = logging.getLogger(__name__)

# Idle time inside a burst after which the burst is over
MAX_BURST_GAP = timedelta(minutes=15)


class SegmenterState(str, Enum):
    SEEKING = "seeking"
    IN_BURST = "in_burst"


class BurstAction(str, Enum):
    SKIP = "skip"              # event has no effect
    OPEN = "open"              # event becomes the trigger of a new turn
    EXTEND = "extend"          # assistant activity joins the burst
    KEEP_ALIVE = "keep_alive"  # tool result resets the gap clock
    CLOSE = "close"            # burst ends before this event


def transition(
    state: SegmenterState,
    event: LogEvent,
    last_activity: Optional[datetime] = None,
    gap_threshold: timedelta = MAX_BURST_GAP,
) -> BurstAction:
    """Decide what one event does to the segmenter in a given state.

    After CLOSE the caller re-evaluates the same event in SEEKING.
    """
    if state == SegmenterState.SEEKING:
        if is_genuine_user_message(event):
            return BurstAction.OPEN
        return BurstAction.SKIP

    if is_genuine_user_message(event):
        return BurstAction.CLOSE

    if is_assistant_activity(event):
        if _gap_exceeded(last_activity, event.timestamp, gap_threshold):
            return BurstAction.CLOSE
        return BurstAction.EXTEND

    if is_tool_result_echo(event):
        if _gap_exceeded(last_activity, event.timestamp, gap_threshold):
            return BurstAction.CLOSE
        return BurstAction.KEEP_ALIVE

    # System notes, continuation markers, synthetic and empty user text
    return BurstAction.SKIP


def _gap_exceeded(
    last_activity: Optional[datetime],
    current: datetime,
    gap_threshold: timedelta,
) -> bool:
    if last_activity is None:
        return False
    return current - last_activity > gap_threshold


@dataclass
class _OpenTurn:
    """Turn under construction while IN_BURST."""
    trigger_timestamp: datetime
    trigger_text: str
    first_response: Optional[datetime] = None
    last_response: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    activity_count: int = 0
    tool_invocation_count: int = 0


def segment_turns(
    events: Iterable[LogEvent],
    session_id: str = "",
    source_path: str = "",
    gap_threshold: timedelta = MAX_BURST_GAP,
) -> list[Turn]:
    """Segment an ordered event stream into Turns.

    A turn opens on a genuine user message and collects the assistant burst
    that follows. Tool-result echoes keep a burst alive without counting as
    activity. A burst ends at the next genuine user message, at an idle gap
    longer than gap_threshold, or at end of stream. Triggers that never got
    an answer are dropped.
    """
    segmenter = TurnSegmenter(session_id, source_path, gap_threshold)
    for event in events:
        segmenter.process(event)
    segmenter.finish()
    return segmenter.turns


class TurnSegmenter:
    """Single left-to-right scan over one log's events."""

    def __init__(
        self,
        session_id: str = "",
        source_path: str = "",
        gap_threshold: timedelta = MAX_BURST_GAP,
    ):
        self.session_id = session_id
        self.source_path = source_path
        self.gap_threshold = gap_threshold
        self.state = SegmenterState.SEEKING
        self.turns: list[Turn] = []
        self.stats = SegmentationStats()
        self._open: _OpenTurn | None = None

    def process(self, event: LogEvent) -> None:
        """Process a single event through the state machine."""
        last_activity = self._open.last_activity if self._open else None
        action = transition(self.state, event, last_activity, self.gap_threshold)

        if action == BurstAction.CLOSE:
            if self._open is not None and self._open.last_activity is not None:
                if is_assistant_activity(event) or is_tool_result_echo(event):
                    self.stats.gap_splits += 1
                    logger.debug(
                        "Gap of %s before %s ends burst in %s",
                        event.timestamp - self._open.last_activity,
                        event.timestamp.isoformat(), self.source_path or "<stream>",
                    )
            self._close()
            # Same event, fresh look from SEEKING
            action = transition(self.state, event, None, self.gap_threshold)

        if action == BurstAction.OPEN:
            self._open = _OpenTurn(
                trigger_timestamp=event.timestamp,
                trigger_text=truncate_for_display(extract_message_text(event.payload)),
            )
            self.state = SegmenterState.IN_BURST
        elif action == BurstAction.EXTEND:
            self._extend(event)
        elif action == BurstAction.KEEP_ALIVE:
            self._open.last_activity = event.timestamp

    def finish(self) -> None:
        """Close any burst still open at end of stream."""
        if self.state == SegmenterState.IN_BURST:
            self._close()

    def _extend(self, event: LogEvent) -> None:
        turn = self._open
        ts = event.timestamp
        if turn.first_response is None:
            turn.first_response = ts
            turn.last_response = ts
        elif ts > turn.last_response:
            turn.last_response = ts
        turn.last_activity = ts
        turn.activity_count += 1
        turn.tool_invocation_count += count_tool_uses(event.payload)

    def _close(self) -> None:
        turn = self._open
        self._open = None
        self.state = SegmenterState.SEEKING
        if turn is None:
            return

        if turn.first_response is None:
            self.stats.unanswered_triggers += 1
            logger.debug(
                "No assistant activity after trigger at %s, dropping it",
                turn.trigger_timestamp.isoformat(),
            )
            return

        if turn.first_response < turn.trigger_timestamp:
            self.stats.negative_latency += 1
            logger.debug(
                "Negative latency for trigger at %s (first response %s), dropping turn",
                turn.trigger_timestamp.isoformat(), turn.first_response.isoformat(),
            )
            return

        self.turns.append(Turn(
            trigger_timestamp=turn.trigger_timestamp,
            trigger_text=turn.trigger_text,
            first_response_timestamp=turn.first_response,
            last_response_timestamp=turn.last_response,
            activity_count=turn.activity_count,
            tool_invocation_count=turn.tool_invocation_count,
            session_id=self.session_id,
            source_path=self.source_path,
        ))
        self.stats.turns += 1
