"""Tests for trigger classification."""

from cctime.types.events import EventKind, LogEvent
from cctime.utils.message_classifier import (
    TriggerVerdict,
    classify_trigger,
    is_assistant_activity,
    is_genuine_user_message,
    is_tool_result_echo,
)
from helpers import assistant, at, system, tool_echo, user


class TestClassifyTrigger:
    def test_plain_user_text_qualifies(self):
        assert classify_trigger(user(0, "fix the bug")) == TriggerVerdict.QUALIFIES

    def test_text_blocks_qualify(self):
        event = user(0, [{"type": "text", "text": "look at this"}])
        assert classify_trigger(event) == TriggerVerdict.QUALIFIES

    def test_bare_string_payload(self):
        event = LogEvent(kind=EventKind.USER_MESSAGE, timestamp=at(0), payload="hi")
        assert classify_trigger(event) == TriggerVerdict.QUALIFIES

    def test_assistant_is_not_a_user_message(self):
        assert classify_trigger(assistant(0)) == TriggerVerdict.NOT_USER_MESSAGE

    def test_system_is_not_a_user_message(self):
        assert classify_trigger(system(0)) == TriggerVerdict.NOT_USER_MESSAGE

    def test_continuation_marker(self):
        event = user(0, "This session is being continued...", is_continuation_marker=True)
        assert classify_trigger(event) == TriggerVerdict.CONTINUATION

    def test_command_marker(self):
        event = user(0, "<command-name>/clear</command-name>")
        assert classify_trigger(event) == TriggerVerdict.SYNTHETIC_SYSTEM_TEXT

    def test_system_reminder_marker(self):
        event = user(0, "ok <system-reminder>be brief</system-reminder>")
        assert classify_trigger(event) == TriggerVerdict.SYNTHETIC_SYSTEM_TEXT

    def test_hook_marker(self):
        event = user(0, "<user-prompt-submit-hook>ran</user-prompt-submit-hook>")
        assert classify_trigger(event) == TriggerVerdict.SYNTHETIC_SYSTEM_TEXT

    def test_markers_only_checked_on_plain_text(self):
        """A marker inside a text block does not make the message synthetic."""
        event = user(0, [{"type": "text", "text": "what does <command-name> mean?"}])
        assert classify_trigger(event) == TriggerVerdict.QUALIFIES

    def test_tool_result_echo(self):
        assert classify_trigger(tool_echo(0)) == TriggerVerdict.TOOL_RESULT_ECHO

    def test_text_block_with_tool_use_id_is_echo(self):
        event = user(0, [{"type": "text", "text": "output", "tool_use_id": "tu9"}])
        assert classify_trigger(event) == TriggerVerdict.TOOL_RESULT_ECHO

    def test_empty_text(self):
        assert classify_trigger(user(0, "   ")) == TriggerVerdict.EMPTY_TEXT
        assert classify_trigger(user(0, [])) == TriggerVerdict.EMPTY_TEXT

    def test_missing_payload(self):
        event = LogEvent(kind=EventKind.USER_MESSAGE, timestamp=at(0))
        assert classify_trigger(event) == TriggerVerdict.EMPTY_TEXT

    def test_continuation_checked_before_text(self):
        event = user(0, [{"type": "tool_result", "tool_use_id": "x"}], is_continuation_marker=True)
        assert classify_trigger(event) == TriggerVerdict.CONTINUATION


class TestPredicates:
    def test_genuine_user_message(self):
        assert is_genuine_user_message(user(0, "hi")) is True
        assert is_genuine_user_message(tool_echo(0)) is False
        assert is_genuine_user_message(assistant(0)) is False

    def test_tool_result_echo(self):
        assert is_tool_result_echo(tool_echo(0)) is True
        tool_record = LogEvent(kind=EventKind.TOOL_RESULT, timestamp=at(0), payload={})
        assert is_tool_result_echo(tool_record) is True
        assert is_tool_result_echo(user(0, "hi")) is False

    def test_assistant_activity(self):
        assert is_assistant_activity(assistant(0)) is True
        assert is_assistant_activity(user(0)) is False
        assert is_assistant_activity(system(0)) is False
