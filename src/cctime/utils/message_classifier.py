"""Decide whether a decoded event is a genuine user turn."""

from enum import Enum

from cctime.types.events import EventKind, LogEvent
from cctime.utils.content_sanitizer import (
    extract_message_text,
    has_synthetic_marker,
    has_tool_result,
    plain_text,
)


class TriggerVerdict(str, Enum):
    NOT_USER_MESSAGE = "not_user_message"
    CONTINUATION = "continuation"
    SYNTHETIC_SYSTEM_TEXT = "synthetic_system_text"
    TOOL_RESULT_ECHO = "tool_result_echo"
    EMPTY_TEXT = "empty_text"
    QUALIFIES = "qualifies"


def classify_trigger(event: LogEvent) -> TriggerVerdict:
    """Classify a decoded event as a turn trigger candidate.

    Checks run in order and the first match wins:
    - anything but a user message -> NOT_USER_MESSAGE
    - session continuation / compact summary -> CONTINUATION
    - plain text with a command, system-reminder or hook marker
      -> SYNTHETIC_SYSTEM_TEXT
    - content carrying a tool result -> TOOL_RESULT_ECHO
    - no extractable text -> EMPTY_TEXT
    """
    if event.kind != EventKind.USER_MESSAGE:
        return TriggerVerdict.NOT_USER_MESSAGE

    if event.is_continuation_marker:
        return TriggerVerdict.CONTINUATION

    text = plain_text(event.payload)
    if text is not None and has_synthetic_marker(text):
        return TriggerVerdict.SYNTHETIC_SYSTEM_TEXT

    if has_tool_result(event.payload):
        return TriggerVerdict.TOOL_RESULT_ECHO

    if not extract_message_text(event.payload):
        return TriggerVerdict.EMPTY_TEXT

    return TriggerVerdict.QUALIFIES


def is_genuine_user_message(event: LogEvent) -> bool:
    """Quick check: does this event open a new turn?"""
    return classify_trigger(event) == TriggerVerdict.QUALIFIES


def is_tool_result_echo(event: LogEvent) -> bool:
    """True for tool-result records, whichever kind the log gave them."""
    if event.kind == EventKind.TOOL_RESULT:
        return True
    return classify_trigger(event) == TriggerVerdict.TOOL_RESULT_ECHO


def is_assistant_activity(event: LogEvent) -> bool:
    return event.kind == EventKind.ASSISTANT_MESSAGE
